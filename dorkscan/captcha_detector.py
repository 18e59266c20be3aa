"""
Challenge Detector

Decides whether a loaded page is a CAPTCHA, rate-limit or block page
instead of real search results. Three heuristics, first hit wins:
1. Block keywords in the visible page text
2. Known CAPTCHA widgets (reCAPTCHA, hCaptcha, FunCaptcha, Arkose)
3. Image-tile grids typical of "select all squares with..." challenges

The page script only reads raw facts (text, first matching widget,
tile count); the decision is made here.

When the page cannot be inspected we assume a challenge is there.
A false positive costs the operator a keypress; a false negative lets
the engine silently block the rest of the scan.
"""
from rich.markup import escape

from dorkscan import page_scripts
from dorkscan.errors import DetectionError, PageUnavailable
from dorkscan.models import DetectionResult
from dorkscan.utils import warning

BLOCK_KEYWORDS = [
    'captcha',
    'robot',
    'automated',
    'bot check',
    'suspicious activity',
    'unusual traffic',
    'security check',
    'human verification',
    'verify you are human',
    'are you a robot',
    'challenge',
    'blocked',
    'access denied',
    'denied access',
    'too many requests',
    'rate limit exceeded',
    'please wait',
    'suspicious',
    'behavior detected',
    'verifica',
]

CAPTCHA_SELECTORS = [
    'iframe[src*="recaptcha"]',
    'iframe[src*="captcha"]',
    'iframe[src*="hcaptcha"]',
    'iframe[src*="funcaptcha"]',
    'iframe[src*="arkoselabs"]',
    'div.g-recaptcha',
    'div.h-captcha',
    'div#captcha',
    'div.captcha',
    'input[name*="captcha"]',
    'img[alt*="captcha"]',
    'form[action*="captcha"]',
]

GRID_SELECTOR = 'table td img, div.rc-imageselect-tile'
GRID_THRESHOLD = 4


def ensure_page_open(page):
    """Raise PageUnavailable unless page is a live handle."""
    if page is None:
        raise PageUnavailable("No browser page available")
    try:
        closed = page.is_closed()
    except Exception as e:
        raise PageUnavailable(f"Browser page is unusable: {e}") from e
    if closed:
        raise PageUnavailable("Browser page was closed")


class ChallengeDetector:
    def __init__(self, keywords: list = None, selectors: list = None,
                 grid_selector: str = GRID_SELECTOR, grid_threshold: int = GRID_THRESHOLD):
        self.keywords = [k.lower() for k in (keywords or BLOCK_KEYWORDS)]
        self.selectors = list(selectors or CAPTCHA_SELECTORS)
        self.grid_selector = grid_selector
        self.grid_threshold = grid_threshold

    def _script_arg(self) -> dict:
        return {
            'selectors': self.selectors,
            'gridSelector': self.grid_selector,
        }

    def evaluate_facts(self, facts: dict) -> DetectionResult:
        """Apply the heuristics in order to the facts read from the page.

        facts: {text, bannerText, matchedSelector, tiles}. Text from our
        own attention banner is ignored.
        """
        text = str(facts.get('text') or '')
        banner = str(facts.get('bannerText') or '')
        if banner:
            text = text.replace(banner, '', 1)
        text = text.lower()

        for keyword in self.keywords:
            if keyword in text:
                return DetectionResult(True, f'page text contains "{keyword}"')

        selector = facts.get('matchedSelector')
        if selector:
            return DetectionResult(True, f"captcha element found: {selector}")

        tiles = int(facts.get('tiles') or 0)
        if tiles > self.grid_threshold:
            return DetectionResult(True, f"image grid with {tiles} tiles (possible image challenge)")

        return DetectionResult(False)

    def inspect(self, page) -> DetectionResult:
        """Run the heuristics; evaluation failures raise DetectionError."""
        ensure_page_open(page)
        try:
            facts = page.evaluate(page_scripts.DETECT_CHALLENGE, self._script_arg())
        except Exception as e:
            ensure_page_open(page)
            raise DetectionError(str(e)) from e

        if not isinstance(facts, dict):
            raise DetectionError(f"Unexpected page facts: {facts!r}")
        try:
            return self.evaluate_facts(facts)
        except (TypeError, ValueError) as e:
            raise DetectionError(f"Malformed page facts: {e}") from e

    def detect(self, page) -> DetectionResult:
        """Like inspect(), but any evaluation failure counts as a challenge."""
        try:
            result = self.inspect(page)
        except DetectionError as e:
            warning(f"Challenge detection failed, assuming the page is blocked: {escape(str(e))}")
            return DetectionResult(detected=True, reason=f"detection error: {e}")

        if result.detected:
            warning(f"Block detected: {escape(str(result.reason))}")
        return result
