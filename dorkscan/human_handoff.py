"""
Human Handoff Controller

Hands a blocked browser page to the operator and takes it back:

    IDLE -> CHECKING -> AWAITING_HUMAN -> RESOLVED | SKIPPED | TIMED_OUT

CHECKING runs the challenge detector. A clean page goes straight to
RESOLVED without asking anything. A blocked page gets a flashing banner
and the operator is prompted until the detector stops seeing the block,
the operator types the skip token, or the overall timeout runs out.

Detection policy is asymmetric:
- initial check: a detector failure counts as blocked
- re-check after the operator answers: a detector failure counts as
  resolved, otherwise a broken page would keep the operator in the loop
  until the timeout
TODO: product owner to confirm the asymmetric policy before unifying it.
"""
import time
from enum import Enum

from rich.markup import escape
from rich.panel import Panel

from dorkscan import page_scripts
from dorkscan.captcha_detector import ChallengeDetector, ensure_page_open
from dorkscan.errors import DetectionError
from dorkscan.utils import console, info, success, warning

ATTENTION_MESSAGE = "⚠️ ATTENTION: human action required! Please solve the CAPTCHA or challenge ⚠️"


class HandoffState(Enum):
    IDLE = "idle"
    CHECKING = "checking"
    AWAITING_HUMAN = "awaiting_human"
    RESOLVED = "resolved"
    SKIPPED = "skipped"
    TIMED_OUT = "timed_out"


TERMINAL_STATES = {HandoffState.RESOLVED, HandoffState.SKIPPED, HandoffState.TIMED_OUT}


class HumanHandoff:
    def __init__(self, operator, detector: ChallengeDetector = None,
                 skip_token: str = "skip", clock=time.monotonic):
        self.operator = operator
        self.detector = detector or ChallengeDetector()
        self.skip_token = skip_token.lower()
        self.clock = clock
        self.state = HandoffState.IDLE
        self.last_detection = None

    def _finish(self, state: HandoffState) -> bool:
        self.state = state
        return state is HandoffState.RESOLVED

    def resolve(self, page, timeout: float = 60.0) -> bool:
        """Return True once page is usable, False if skipped or timed out.

        The page is borrowed, never closed here. PageUnavailable propagates.
        """
        self.state = HandoffState.CHECKING
        info("Checking whether the page needs a human...")

        self.last_detection = self.detector.detect(page)
        if not self.last_detection.detected:
            return self._finish(HandoffState.RESOLVED)

        console.print(Panel(
            f"[bold]Reason:[/bold] {escape(str(self.last_detection.reason))}\n"
            "🤖 → 👤 Handing control to you. Solve the challenge in the browser window.\n"
            f"⏳ You have {timeout:.0f} seconds.",
            title="⚠️ CAPTCHA or block detected",
            border_style="yellow"
        ))
        self.highlight(page)
        self.state = HandoffState.AWAITING_HUMAN

        deadline = self.clock() + timeout
        prompt = f"👆 Press ENTER after solving the challenge, or type '{self.skip_token}' to skip: "
        while True:
            remaining = deadline - self.clock()
            if remaining <= 0:
                break

            answer = self.operator.ask(prompt, timeout=remaining)
            if answer is None:
                break
            if answer.strip().lower() == self.skip_token:
                warning("Skipping this page. Moving on to the next dork...")
                return self._finish(HandoffState.SKIPPED)

            ensure_page_open(page)
            try:
                self.last_detection = self.detector.inspect(page)
            except DetectionError as e:
                warning(f"Could not re-check the page ({escape(str(e))}); assuming the challenge was solved")
                return self._finish(HandoffState.RESOLVED)

            if not self.last_detection.detected:
                success("Challenge solved. Continuing...")
                return self._finish(HandoffState.RESOLVED)

            warning(f"Still blocked ({escape(str(self.last_detection.reason))}). "
                    f"Try again or type '{self.skip_token}' to skip.")

        warning("Time is up for this challenge. Skipping...")
        return self._finish(HandoffState.TIMED_OUT)

    def highlight(self, page):
        """Flash a banner in the page. Best-effort."""
        try:
            page.evaluate(page_scripts.SHOW_ATTENTION_BANNER, ATTENTION_MESSAGE)
        except Exception as e:
            warning(f"Could not highlight the browser window: {e}")

    def clear(self, page):
        """Remove the banner added by highlight(). Silent on closed pages."""
        try:
            if page is None or page.is_closed():
                return
            page.evaluate(page_scripts.REMOVE_ATTENTION_BANNER)
        except Exception as e:
            warning(f"Could not remove the attention banner: {e}")
