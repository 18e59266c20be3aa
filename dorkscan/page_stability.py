"""
Page Stability Waiter

Search result pages keep loading after the navigation event fires:
consent dialogs, lazy result blocks, challenge widgets. Running the
challenge detector too early misses them.

An observer injected into the page timestamps every DOM mutation and
XHR/fetch call; the host polls the DOM size until it stops changing
for a full stable window. Hitting the hard ceiling still counts as
stable so one slow page never stalls the scan.
"""
import time

from rich.markup import escape

from dorkscan import page_scripts
from dorkscan.captcha_detector import ensure_page_open
from dorkscan.utils import info, success, warning


class PageStabilityWaiter:
    def __init__(self, poll_interval_ms: int = 500, clock=time.monotonic, sleep=time.sleep):
        self.poll_interval_ms = poll_interval_ms
        self.clock = clock
        self.sleep = sleep

    def wait(self, page, stable_window_ms: int = 3000, max_wait_ms: int = 20000) -> bool:
        """Block until page settles or max_wait_ms passes.

        Returns False only when the page could not be observed at all.
        Raises PageUnavailable if the page is (or becomes) closed.
        """
        ensure_page_open(page)
        info("Waiting for the page to settle...")

        start = self.clock()
        try:
            # the observer removes itself shortly after one stable window
            page.evaluate(page_scripts.INSTALL_CHANGE_OBSERVER, stable_window_ms + 1000)
        except Exception as e:
            ensure_page_open(page)
            warning(f"Could not install the page observer: {escape(str(e))}")
            return False

        last_size = None
        size_changed_at = start
        try:
            while True:
                if self._elapsed_ms(start) >= max_wait_ms:
                    info(f"Page still changing after {max_wait_ms}ms; carrying on anyway")
                    return True

                ensure_page_open(page)
                try:
                    snapshot = page.evaluate(page_scripts.SNAPSHOT_DOM)
                except Exception as e:
                    ensure_page_open(page)
                    warning(f"Stability check failed: {escape(str(e))}")
                    return False

                now = self.clock()
                size = int(snapshot.get('domSize', 0))
                if size != last_size:
                    last_size = size
                    size_changed_at = now

                quiet_ms = min((now - size_changed_at) * 1000,
                               float(snapshot.get('sinceChangeMs', 0)))
                if quiet_ms >= stable_window_ms:
                    success("Page settled")
                    return True

                remaining_ms = max_wait_ms - self._elapsed_ms(start)
                if remaining_ms > 0:
                    self.sleep(min(self.poll_interval_ms, remaining_ms) / 1000)
        finally:
            self._remove_observer(page)

    def _elapsed_ms(self, start: float) -> float:
        return (self.clock() - start) * 1000

    def _remove_observer(self, page):
        try:
            if not page.is_closed():
                page.evaluate(page_scripts.REMOVE_CHANGE_OBSERVER)
        except Exception:
            # the observer also times itself out in the page
            pass
