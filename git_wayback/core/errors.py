"""Error types for wayback resolution."""

from typing import Optional


class WaybackError(Exception):
    """Base exception for wayback resolution."""
    pass


class CutoffParseError(WaybackError, ValueError):
    """Raised when a wayback time does not match the accepted layout.

    Attributes:
        text: The rejected input.
        layout: The layout the input was expected to follow.
    """

    def __init__(self, text: str, layout: str, reason: Optional[str] = None):
        self.text = text
        self.layout = layout
        message = f"Cannot parse wayback time {text!r}, expected layout {layout!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class NotFoundError(WaybackError):
    """No commit or tag predates the wayback time."""

    def __init__(self, message: str = "Reference not found"):
        super().__init__(message)


class HistoryError(WaybackError):
    """Raised when walking history or resolving an object fails."""
    pass


class RepositoryOpenError(HistoryError):
    """Raised when a path cannot be opened as a repository."""

    def __init__(self, path, reason: str):
        self.path = path
        super().__init__(f"Cannot open repository at {path}: {reason}")
