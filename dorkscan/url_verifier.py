"""
Manual URL Verification

Opens a dork's search URL in a real browser so the operator can look at
the results with their own eyes:
- navigate with a rotated user agent
- dismiss the engine's cookie banner when there is one
- wait for the page to settle
- hand CAPTCHAs and block pages to the operator
- screenshot the results and wait until the operator is done

WHY MANUAL?
Engines block scripted result scraping fast. A human clicking through
the interesting dorks, with the tool handling the tedious parts, gets
further than any scraper.
"""
import random
import time
from pathlib import Path

from rich.markup import escape

from dorkscan import page_scripts
from dorkscan.captcha_detector import ensure_page_open
from dorkscan.errors import PageUnavailable
from dorkscan.human_handoff import HumanHandoff
from dorkscan.page_stability import PageStabilityWaiter
from dorkscan.search_engines import pick_user_agent
from dorkscan.utils import dork_hash, error, info, learn, random_delay, success, warning


class UrlVerifier:
    def __init__(self, config: dict, operator, launcher, screenshots_dir: str = None,
                 handoff: HumanHandoff = None, waiter: PageStabilityWaiter = None,
                 chooser=random.choice, sleep=time.sleep, learn_mode: bool = False):
        self.config = config
        self.browser_config = config.get('browser', {})
        self.handoff_config = config.get('handoff', {})
        self.scan_config = config.get('scan', {})
        self.operator = operator
        self.launcher = launcher
        self.screenshots_dir = screenshots_dir
        self.handoff = handoff or HumanHandoff(operator)
        self.waiter = waiter or PageStabilityWaiter(
            poll_interval_ms=self.handoff_config.get('poll_interval_ms', 500), sleep=sleep
        )
        self.chooser = chooser
        self.sleep = sleep
        self.learn_mode = learn_mode
        self.launches = 0

    def verify(self, url: str, dork: str, index: int, engine=None) -> dict:
        """Open url for the operator. Always closes the browser before returning.

        Returns {'verified': bool, 'screenshot': path or None}.
        """
        learn("Manual Verification",
              "The browser opens on the search results. If the engine shows a CAPTCHA, "
              "the page flashes red and the scan waits for you to solve it. "
              "Type 'skip' to give up on a page.",
              self.learn_mode)

        outcome = {'verified': False, 'screenshot': None}
        if self.launches:
            random_delay(self.scan_config.get('search_delay', 0),
                         self.scan_config.get('random_delay_max', 0), sleep=self.sleep)
        self.launches += 1

        session = None
        try:
            info("Opening browser for manual verification...")
            session = self.launcher.launch()
            page = session.new_page(pick_user_agent(self.chooser))

            self._navigate(page, url)
            if engine is not None and engine.cookie_accept_selector:
                self._accept_cookies(page, engine.cookie_accept_selector)

            self.waiter.wait(
                page,
                stable_window_ms=self.handoff_config.get('stable_window_ms', 3000),
                max_wait_ms=self.handoff_config.get('max_wait_ms', 20000),
            )

            if not self.handoff.resolve(page, timeout=self.handoff_config.get('timeout', 60)):
                warning("Page results are unusable; not marking this dork as verified")
                return outcome

            self.handoff.clear(page)
            outcome['screenshot'] = self.take_screenshot(page, dork, index)
            self.operator.pause("✅ Browser open for inspection. Press ENTER when you are done...")
            outcome['verified'] = True
            return outcome
        except PageUnavailable as e:
            warning(f"Browser page went away: {escape(str(e))}")
            return outcome
        except EOFError:
            raise
        except Exception as e:
            error(f"Error while verifying URL in the browser: {escape(str(e))}")
            return outcome
        finally:
            if session is not None:
                session.close()

    def _navigate(self, page, url: str):
        info(f"Navigating to {escape(url)}...")
        try:
            page.goto(
                url,
                wait_until=self.browser_config.get('wait_until', 'networkidle'),
                timeout=self.browser_config.get('navigation_timeout', 30000),
            )
        except Exception as e:
            ensure_page_open(page)
            warning(f"Navigation did not finish cleanly ({escape(str(e))}); continuing with what loaded")

    def _accept_cookies(self, page, selector: str):
        try:
            if page.evaluate(page_scripts.CLICK_IF_PRESENT, selector):
                info("Accepted cookie banner")
        except Exception as e:
            ensure_page_open(page)
            warning(f"Could not accept cookie banner: {escape(str(e))}")

    def take_screenshot(self, page, dork: str, index: int):
        """Full-page screenshot named after the dork. Best-effort."""
        if not self.screenshots_dir or not self.browser_config.get('screenshots', True):
            return None

        path = Path(self.screenshots_dir) / f"dork_{index}_{dork_hash(dork)}.png"
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            page.screenshot(path=str(path), full_page=True)
        except Exception as e:
            warning(f"Could not take screenshot: {escape(str(e))}")
            return None
        success(f"Screenshot saved to {path.name}")
        return str(path)
