"""
Scan Driver

Walks the dork list in order, one dork at a time:
1. Skip what a previous run already recorded (checkpoint)
2. Pick a random engine and build the search URL
3. Show the dork and, if the operator wants, verify it in a browser
4. Record the result and rewrite the checkpoint
5. Every few dorks, ask the operator whether to keep going

WHY ONE AT A TIME?
The whole point is to look like a person searching. Parallel queries
get the engines' rate limiters to kick in within minutes, and a human
can only solve one CAPTCHA at a time anyway.
"""
import random
import time
from datetime import datetime

from rich.markup import escape

from dorkscan.errors import FatalScanError, PersistenceError
from dorkscan.models import Checkpoint, ScanOutcome, ScanResult, ScanStats
from dorkscan.search_engines import build_search_url, pick_engine
from dorkscan.utils import alert, console, error, info, iso_now, success, warning

STOP_ANSWERS = {'q', 'quit', 'n', 'no', 'stop'}


class DorkScanner:
    def __init__(self, config: dict, operator, checkpoint_store, report_generator,
                 verifier=None, chooser=random.choice, sleep=time.sleep):
        self.config = config
        self.scan_config = config.get('scan', {})
        self.operator = operator
        self.checkpoints = checkpoint_store
        self.reports = report_generator
        self.verifier = verifier
        self.chooser = chooser
        self.sleep = sleep

    @property
    def checkpoints_enabled(self) -> bool:
        return self.checkpoints is not None and self.scan_config.get('save_checkpoint', True)

    def run(self, domain: str, dorks: list) -> ScanOutcome:
        """Process dorks, resuming from the checkpoint if there is one.

        Any unexpected exception is turned into FatalScanError after a
        best-effort error report.
        """
        stats = ScanStats(
            target_domain=domain,
            total_dorks=len(dorks),
            alternative_domains=list(self.config.get('domain', {}).get('alternative_domains') or []),
            start_time=iso_now(),
        )
        try:
            return self._run(domain, dorks, stats)
        except (KeyboardInterrupt, EOFError):
            raise
        except Exception as e:
            error(f"Error during the scan: {escape(str(e))}")
            report_path = self.reports.write_error_report(e, stats)
            if report_path:
                error(f"Error report saved to: {report_path}")
            raise FatalScanError(str(e), report_path) from e

    def _run(self, domain: str, dorks: list, stats: ScanStats) -> ScanOutcome:
        checkpoint = self.checkpoints.load() if self.checkpoints_enabled else Checkpoint()
        start_index = checkpoint.last_index + 1
        processed = set(checkpoint.processed_dorks)
        report_content = checkpoint.report_content or ''

        if start_index > 0:
            success(f"Resuming from dork #{start_index + 1}/{len(dorks)}")

        results = []
        stopped = False
        pause_every = self.scan_config.get('pause_every', 10)
        display_delay = self.scan_config.get('display_delay', 0)

        for i in range(start_index, len(dorks)):
            dork = dorks[i]
            if dork in processed:
                warning(f"Skipping already processed dork: {escape(dork)}")
                continue

            result = self.process_dork(dork, i, len(dorks))

            results.append(result)
            processed.add(dork)
            report_content += result.to_text()
            stats.dorks_processed += 1
            if result.manual_check:
                stats.manually_checked += 1

            self._save_checkpoint(i, report_content, processed, stats)

            if pause_every and (i + 1) % pause_every == 0 and i < len(dorks) - 1:
                if not self._keep_going(i + 1, len(dorks)):
                    warning("Scan stopped by the operator; progress is kept in the checkpoint")
                    stopped = True
                    break

            if display_delay:
                self.sleep(display_delay)

        stats.completed = not stopped
        stats.end_time = iso_now()
        stats.total_execution_time = _millis_between(stats.start_time, stats.end_time)

        report_paths = self.reports.write_scan_reports(domain, results, report_content, stats)

        if stats.completed and self.checkpoints_enabled:
            try:
                if self.checkpoints.clear():
                    info("Checkpoint removed after a complete scan")
            except PersistenceError as e:
                alert("Checkpoint not removed", str(e))

        return ScanOutcome(results=results, stats=stats, report_paths=report_paths)

    def process_dork(self, dork: str, index: int, total: int) -> ScanResult:
        engine = pick_engine(self.chooser)
        url = build_search_url(engine, dork)

        console.print(f"\n[blue]{escape(f'[{index + 1}/{total}]')} Dork:[/blue]")
        console.print(f"[green]🔍 {escape(dork)}[/green]")
        console.print(f"[yellow]🔗 URL: {escape(url)}[/yellow]")
        console.print(f"[blue]🌐 Engine: {engine.name}[/blue]")

        created_at = iso_now()
        manual_check = None
        screenshot = None
        if self.verifier is not None and self.scan_config.get('manual_validation', True):
            if self.operator.confirm("👉 Verify this URL in the browser? (y/N): "):
                outcome = self.verifier.verify(url, dork, index, engine)
                manual_check = outcome['verified']
                screenshot = outcome['screenshot']

        return ScanResult(
            dork=dork,
            search_engine=engine.name,
            search_url=url,
            timestamp=created_at,
            manual_check=manual_check,
            screenshot_path=screenshot,
        )

    def _save_checkpoint(self, index: int, report_content: str, processed: set, stats: ScanStats):
        if not self.checkpoints_enabled:
            return
        try:
            self.checkpoints.save(index, report_content, processed)
        except PersistenceError as e:
            stats.resume_guaranteed = False
            alert("Checkpoint write failed",
                  f"{e}\nThe scan continues in memory, but it cannot be resumed from this point.")

    def _keep_going(self, shown: int, total: int) -> bool:
        answer = self.operator.ask(
            f"\nShown {shown}/{total} dorks. Press ENTER to continue or 'q' to stop: "
        )
        return (answer or '').strip().lower() not in STOP_ANSWERS


def _millis_between(start: str, end: str) -> int:
    delta = datetime.fromisoformat(end) - datetime.fromisoformat(start)
    return int(delta.total_seconds() * 1000)
