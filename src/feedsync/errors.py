"""Errors raised while fetching and parsing a feed.

The set is closed: every transport or parse failure for a single source is
mapped to one of these classes. They are recoverable per source and are
collected into the sync error report instead of aborting a pass.
"""


class FeedError(Exception):
    """Base class for per-source feed failures."""

    kind = "error"
    default_message = "Failed to refresh feed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def user_message(self) -> str:
        """Human-readable text for failure banners."""
        return self.default_message


class InvalidURLError(FeedError):
    kind = "invalid_url"
    default_message = "Invalid feed URL"


class NoConnectionError(FeedError):
    kind = "no_connection"
    default_message = "No internet connection"


class FeedTimeoutError(FeedError):
    kind = "timeout"
    default_message = "Feed request timed out"


class FetchCancelledError(FeedError):
    kind = "cancelled"
    default_message = "Feed refresh was cancelled"


class NetworkError(FeedError):
    """Any other transport failure, keeping the underlying exception."""

    kind = "network"
    default_message = "Network error"

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"Network error: {cause}")

    @property
    def user_message(self) -> str:
        return str(self)


class NoDataError(FeedError):
    kind = "no_data"
    default_message = "No data received"


class ParsingError(FeedError):
    kind = "parsing"
    default_message = "Unable to parse feed. The feed format may not be supported"
