"""
Browser Launcher

Thin wrapper around Playwright's sync API. The rest of DorkScan only
touches the returned page through goto / evaluate / screenshot /
is_closed, and the session through new_page / close.
"""
from playwright.sync_api import sync_playwright
from rich.markup import escape

from dorkscan.utils import warning

DEFAULT_ARGS = [
    '--disable-blink-features=AutomationControlled',
    '--start-maximized',
]

HIDE_WEBDRIVER = "Object.defineProperty(navigator, 'webdriver', { get: () => false });"


class BrowserSession:
    """One browser process. Close it before moving to the next dork."""

    def __init__(self, playwright, browser, viewport: dict):
        self._playwright = playwright
        self.browser = browser
        self.viewport = viewport

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False

    def new_page(self, user_agent: str = None):
        context = self.browser.new_context(user_agent=user_agent, viewport=self.viewport)
        context.add_init_script(HIDE_WEBDRIVER)
        return context.new_page()

    def close(self):
        if self.browser is not None:
            try:
                self.browser.close()
            except Exception as e:
                warning(f"Error closing browser: {escape(str(e))}")
            self.browser = None
        if self._playwright is not None:
            try:
                self._playwright.stop()
            except Exception as e:
                warning(f"Error stopping Playwright: {escape(str(e))}")
            self._playwright = None


class BrowserLauncher:
    def __init__(self, config: dict):
        self.browser_config = config.get('browser', {})

    def launch(self) -> BrowserSession:
        playwright = sync_playwright().start()
        try:
            browser = playwright.chromium.launch(
                headless=self.browser_config.get('headless', False),
                args=self.browser_config.get('args') or DEFAULT_ARGS,
            )
        except Exception:
            playwright.stop()
            raise
        viewport = self.browser_config.get('viewport') or {'width': 1280, 'height': 800}
        return BrowserSession(playwright, browser, viewport)
