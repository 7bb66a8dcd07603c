from typing import Optional


class ReviewRangerError(Exception):
    """Base class for every error raised by the review pipeline."""


class ConfigurationError(ReviewRangerError):
    """Required inputs are missing or invalid. Raised before the pipeline starts."""


class DiffExecutionError(ReviewRangerError):
    """The diff command exited non-zero or ran past its deadline."""


class ApiError(ReviewRangerError):
    """
    The review endpoint failed on every attempt.

    Only the last underlying failure is kept (also available as __cause__);
    earlier attempts are logged by the client.
    """

    def __init__(self, message: str, attempts: int = 0, last_error: Optional[BaseException] = None):
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


class ReportingError(ReviewRangerError):
    """A reporting channel (comment, check run, inline comments) failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
