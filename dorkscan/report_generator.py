"""
Report Generator Module

Writes everything a scan leaves behind in <results_dir>/reports:
- Dork list (JSON and plain text, ready to paste into a browser)
- Execution statistics
- Markdown summary with verification status and screenshots
- Error report when the scan dies, marker file when it is interrupted
"""
import json
import traceback
from pathlib import Path

from dorkscan.models import ScanResult, ScanStats
from dorkscan.utils import iso_now, success, timestamp


class ReportGenerator:
    def __init__(self, config: dict):
        self.config = config
        self.reports_dir = Path(config['scan']['results_dir']) / "reports"

    def _path(self, name: str) -> Path:
        self.reports_dir.mkdir(parents=True, exist_ok=True)
        return self.reports_dir / name

    def write_dork_list_json(self, domain: str, results: list, ts: str) -> str:
        output_file = self._path(f"dorks_list_{domain}_{ts}.json")
        with open(output_file, 'w', encoding='utf-8') as f:
            json.dump([r.to_dict() for r in results], f, indent=2, ensure_ascii=False)
        success(f"Dork list saved to: {output_file}")
        return str(output_file)

    def write_dork_list_text(self, domain: str, report_content: str, ts: str) -> str:
        output_file = self._path(f"dorks_list_{domain}_{ts}.txt")
        with open(output_file, 'w', encoding='utf-8') as f:
            f.write(report_content)
        success(f"Dork list (text) saved to: {output_file}")
        return str(output_file)

    def write_stats(self, stats: ScanStats, ts: str) -> str:
        output_file = self._path(f"execution_stats_{ts}.json")
        with open(output_file, 'w', encoding='utf-8') as f:
            json.dump(stats.to_dict(), f, indent=2)
        success(f"Execution stats saved to: {output_file}")
        return str(output_file)

    def generate_markdown(self, stats: ScanStats, results: list, ts: str) -> str:
        """Markdown summary of the scan."""
        md = f"""# Dork Scan Report: {stats.target_domain}

**Generated:** {iso_now()}
**Started:** {stats.start_time}
**Finished:** {stats.end_time}

---

## Summary

| Metric | Count |
|--------|-------|
| Total Dorks | {stats.total_dorks} |
| Processed This Run | {stats.dorks_processed} |
| Manually Verified | {stats.manually_checked} |
| Completed | {'yes' if stats.completed else 'no'} |

"""
        if stats.alternative_domains:
            md += "**Alternative domains:** " + ", ".join(stats.alternative_domains) + "\n\n"

        if not stats.resume_guaranteed:
            md += "> ⚠️ Checkpoint writes failed during this run; resume data may be stale.\n\n"

        if results:
            md += "## Dorks\n\n"
            md += "| # | Dork | Engine | Verified | Screenshot |\n"
            md += "|---|------|--------|----------|------------|\n"
            for idx, result in enumerate(results, 1):
                md += (f"| {idx} | `{_cell(result.dork)}` | [{result.search_engine}]({result.search_url}) "
                       f"| {_verified(result)} | {_screenshot_link(result)} |\n")

        md += "\n---\n\n*Only search domains you are authorized to test.*\n"

        output_file = self._path(f"dorks_scan_report_{ts}.md")
        with open(output_file, 'w', encoding='utf-8') as f:
            f.write(md)
        success(f"Report saved to: {output_file}")
        return str(output_file)

    def write_scan_reports(self, domain: str, results: list, report_content: str,
                           stats: ScanStats) -> dict:
        """Write all end-of-scan files. OSError propagates."""
        ts = timestamp()
        return {
            'json': self.write_dork_list_json(domain, results, ts),
            'text': self.write_dork_list_text(domain, report_content, ts),
            'stats': self.write_stats(stats, ts),
            'markdown': self.generate_markdown(stats, results, ts),
        }

    def write_error_report(self, exc: BaseException, stats: ScanStats = None):
        """Best-effort error dump. Returns the path, or None if it could not be written."""
        data = {
            'error': str(exc),
            'type': type(exc).__name__,
            'traceback': ''.join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
            'timestamp': iso_now(),
        }
        if stats is not None:
            data['stats'] = stats.to_dict()
        try:
            output_file = self._path(f"error_report_{timestamp()}.json")
            with open(output_file, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
        except OSError:
            return None
        return str(output_file)

    def write_interrupted_marker(self):
        """Best-effort marker for an operator interrupt."""
        try:
            output_file = self._path(f"interrupted_{timestamp()}.txt")
            with open(output_file, 'w', encoding='utf-8') as f:
                f.write(f"Scan interrupted by the operator at {iso_now()}.\n")
        except OSError:
            return None
        return str(output_file)


def _cell(text: str) -> str:
    return text.replace('|', '\\|').replace('`', "'")


def _verified(result: ScanResult) -> str:
    if result.manual_check is None:
        return '-'
    return '✓' if result.manual_check else '✗'


def _screenshot_link(result: ScanResult) -> str:
    if not result.screenshot_path:
        return 'N/A'
    name = Path(result.screenshot_path).name
    return f"[{name}](../screenshots/{name})"
