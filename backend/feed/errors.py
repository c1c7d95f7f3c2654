from __future__ import annotations


class FeedError(Exception):
    """Base class for visit-feed failures."""

    kind = "feed_error"


class FeedUnreachable(FeedError):
    """The feed could not be fetched (network error, timeout, HTTP error status)."""

    kind = "feed_unreachable"


class FeedMalformed(FeedError):
    """The feed body is not the expected `{countries: [...], states: [...]}` document."""

    kind = "feed_malformed"


class RecordMalformed(FeedError):
    """
    One record in the feed is unusable. Collected and logged, never raised out of
    the loader.
    """

    kind = "record_malformed"

    def __init__(self, list_name: str, index: int, reason: str):
        super().__init__(f"{list_name}[{index}]: {reason}")
        self.list_name = list_name
        self.index = index
        self.reason = reason
