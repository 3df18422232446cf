"""Exception types raised by the notifier"""


class StreamWatchError(Exception):
    """Base class for all streamwatch errors"""


class ConfigMissing(StreamWatchError):
    """Required configuration is absent or invalid. Fatal before startup."""

    def __init__(self, fields: list[str], detail: str = "") -> None:
        self.fields = fields
        message = f"Missing or invalid configuration: {', '.join(fields) or 'unknown'}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class CategoryNotFound(StreamWatchError):
    """The configured game name did not resolve to a Twitch category. Fatal."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Twitch category not found: {name!r}")


class FetchError(StreamWatchError):
    """Listing active streams failed. The tick is abandoned."""


class ChannelUnavailable(StreamWatchError):
    """The Discord notification channel is not resolved."""


class DispatchError(StreamWatchError):
    """Sending a single notification failed. Logged, never retried."""

    def __init__(self, streamer: str, reason: str) -> None:
        self.streamer = streamer
        super().__init__(f"Failed to notify for {streamer}: {reason}")


class TwitchAPIError(StreamWatchError):
    """A Helix or OAuth request did not succeed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
