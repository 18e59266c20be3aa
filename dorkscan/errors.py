"""Exceptions raised across DorkScan."""


class DorkScanError(Exception):
    """Base class for all DorkScan errors."""


class InvalidDomainError(DorkScanError, ValueError):
    """The target domain is empty or not a valid hostname."""


class PageUnavailable(DorkScanError):
    """The browser page was closed or is otherwise unusable."""


class DetectionError(DorkScanError):
    """Evaluating the challenge heuristics inside the page failed."""


class PersistenceError(DorkScanError):
    """A checkpoint or report could not be written to disk."""


class FatalScanError(DorkScanError):
    """The scan loop died; an error report was written if possible."""

    def __init__(self, message: str, report_path: str = None):
        super().__init__(message)
        self.report_path = report_path
