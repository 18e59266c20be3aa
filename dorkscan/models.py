"""Shared data models for the dork scanner."""

from dataclasses import dataclass, field
from typing import List, Optional, Set


@dataclass(frozen=True)
class SearchEngine:
    """A search engine a dork can be sent to."""
    name: str
    url: str                                  # base URL, the encoded dork is appended
    result_selector: Optional[str] = None
    title_selector: Optional[str] = None
    link_selector: Optional[str] = None
    snippet_selector: Optional[str] = None
    stats_selector: Optional[str] = None
    cookie_accept_selector: Optional[str] = None


@dataclass(frozen=True)
class ScanResult:
    """Outcome of one processed dork."""
    dork: str
    search_engine: str
    search_url: str
    timestamp: str
    manual_check: Optional[bool] = None       # None: operator did not ask to verify
    screenshot_path: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            'dork': self.dork,
            'searchEngine': self.search_engine,
            'searchUrl': self.search_url,
            'timestamp': self.timestamp,
        }
        if self.manual_check is not None:
            data['manualCheck'] = self.manual_check
        if self.screenshot_path:
            data['screenshotPath'] = self.screenshot_path
        return data

    def to_text(self) -> str:
        return f"{self.dork}\n{self.search_url}\n\n"


@dataclass
class Checkpoint:
    """Durable scan progress. last_index is -1 when nothing was recorded."""
    last_index: int = -1
    processed_dorks: Set[str] = field(default_factory=set)
    report_content: Optional[str] = None
    saved_at: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.last_index < 0 and not self.processed_dorks

    def to_dict(self) -> dict:
        return {
            'lastIndex': self.last_index,
            'reportContent': self.report_content,
            'processedDorks': sorted(self.processed_dorks),
            'timestamp': self.saved_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Checkpoint":
        last_index = data.get('lastIndex', -1)
        if not isinstance(last_index, int) or isinstance(last_index, bool):
            raise ValueError(f"lastIndex must be an integer, got {last_index!r}")
        processed = data.get('processedDorks') or []
        if not isinstance(processed, list):
            raise ValueError("processedDorks must be a list")
        return cls(
            last_index=last_index,
            processed_dorks={str(d) for d in processed},
            report_content=data.get('reportContent'),
            saved_at=data.get('timestamp'),
        )


@dataclass(frozen=True)
class DetectionResult:
    detected: bool
    reason: Optional[str] = None


@dataclass
class ScanStats:
    """Scan-level counters, written once when the run ends."""
    target_domain: str
    total_dorks: int
    alternative_domains: List[str] = field(default_factory=list)
    dorks_processed: int = 0
    manually_checked: int = 0
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    total_execution_time: int = 0             # milliseconds
    completed: bool = False
    resume_guaranteed: bool = True

    def to_dict(self) -> dict:
        return {
            'targetDomain': self.target_domain,
            'alternativeDomains': list(self.alternative_domains),
            'totalDorks': self.total_dorks,
            'dorksProcessed': self.dorks_processed,
            'manuallyChecked': self.manually_checked,
            'startTime': self.start_time,
            'endTime': self.end_time,
            'totalExecutionTime': self.total_execution_time,
            'completed': self.completed,
            'resumeGuaranteed': self.resume_guaranteed,
        }


@dataclass
class ScanOutcome:
    results: List[ScanResult]
    stats: ScanStats
    report_paths: dict = field(default_factory=dict)

    @property
    def completed(self) -> bool:
        return self.stats.completed
