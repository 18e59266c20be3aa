"""
Operator Console

The single line-based channel between the scanner and the human at the
keyboard. One instance is created by the entry point, passed to every
component that needs an answer, and closed exactly once at shutdown.

Lines are read on a background thread so a question can carry a
timeout (the CAPTCHA handoff gives the operator a bounded window).
"""
import queue
import sys
import threading
import time

from dorkscan.utils import console as default_console

AFFIRMATIVE = {'s', 'sim', 'y', 'yes'}

_EOF = object()


class OperatorConsole:
    def __init__(self, stream=None, console=None, poll_interval: float = 0.2):
        self.stream = stream if stream is not None else sys.stdin
        self.console = console or default_console
        self.poll_interval = poll_interval
        self._lines = queue.Queue()
        self._reader = None
        self._closed = False
        self._stale = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False

    @property
    def closed(self) -> bool:
        return self._closed

    def _read_lines(self):
        while True:
            try:
                line = self.stream.readline()
            except (OSError, ValueError):
                # stream closed underneath us
                line = ''
            if not line:
                self._lines.put(_EOF)
                return
            self._lines.put(line.rstrip('\r\n'))

    def _ensure_reader(self):
        if self._reader is None:
            self._reader = threading.Thread(target=self._read_lines, name="operator-input", daemon=True)
            self._reader.start()

    def _discard_pending(self):
        # answers typed after a prompt timed out belong to no question
        eof = False
        while True:
            try:
                item = self._lines.get_nowait()
            except queue.Empty:
                break
            if item is _EOF:
                eof = True
        if eof:
            self._lines.put(_EOF)
        self._stale = False

    def ask(self, question: str, timeout: float = None):
        """Print question and return the next line, or None after timeout seconds.

        Raises EOFError once the input stream is exhausted.
        """
        if self._closed:
            raise RuntimeError("Operator console is closed")
        if self._stale:
            self._discard_pending()

        self.console.print(question, end='')
        self._ensure_reader()

        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            wait = self.poll_interval
            if deadline is not None:
                wait = min(wait, deadline - time.monotonic())
                if wait <= 0:
                    self.console.print()
                    self._stale = True
                    return None
            try:
                item = self._lines.get(timeout=wait)
            except queue.Empty:
                continue
            if item is _EOF:
                # keep the marker so later questions fail the same way
                self._lines.put(_EOF)
                self.console.print()
                raise EOFError("Operator input closed")
            return item

    def confirm(self, question: str) -> bool:
        answer = self.ask(question)
        return (answer or '').strip().lower() in AFFIRMATIVE

    def pause(self, message: str = "Press ENTER to continue...") -> str:
        return self.ask(message) or ''

    def close(self):
        # The reader thread is a daemon blocked in readline(); it dies with the process.
        self._closed = True
