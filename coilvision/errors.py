"""Exception hierarchy for coilvision.

Everything raised on purpose by this package derives from
:class:`CoilVisionError`, so the CLI can report it and exit cleanly.
"""

from __future__ import annotations


class CoilVisionError(Exception):
    """Base class for coilvision errors."""


class ConfigurationError(CoilVisionError):
    """Raised when required settings (endpoint, key, resource id) are blank."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(
            "You need to set the endpoint, key and resource id. "
            f"Missing: {', '.join(self.missing)}"
        )


class ProjectNotFoundError(CoilVisionError):
    """Raised when no project with the configured name exists."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Project {name!r} not found")


class UnrecognizedImageError(CoilVisionError):
    """Raised when an image filename does not map to a known label."""

    def __init__(self, filename: str, reason: str) -> None:
        self.filename = filename
        self.reason = reason
        super().__init__(f"Unrecognized image filename {filename!r}: {reason}")


class NoIterationError(CoilVisionError):
    """Raised when the project has no trained iteration to fall back to."""


class PollTimeoutError(CoilVisionError):
    """Raised when a status poll exceeds its maximum number of attempts."""

    def __init__(self, what: str, polls: int, last_status: str | None) -> None:
        self.polls = polls
        self.last_status = last_status
        super().__init__(
            f"{what} still {last_status!r} after {polls} polls; giving up"
        )


class CustomVisionError(CoilVisionError):
    """A failed call to the Custom Vision service.

    Parameters
    ----------
    message:
        Human-readable message (from the service when available).
    status:
        HTTP status code, ``0`` when no response was received.
    code:
        Service error code, e.g. ``BadRequestTrainingNotNeeded``.
    """

    def __init__(self, message: str, status: int = 0, code: str | None = None) -> None:
        self.status = status
        self.code = code
        self.message = message
        prefix = f"[{status}] " if status else ""
        suffix = f" ({code})" if code else ""
        super().__init__(f"{prefix}{message}{suffix}")
