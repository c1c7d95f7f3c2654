from .errors import FeedError, FeedMalformed, FeedUnreachable, RecordMalformed
from .loader import FeedParseResult, VisitFeedLoader, fetch_feed, parse_feed

__all__ = [
    "FeedError",
    "FeedMalformed",
    "FeedParseResult",
    "FeedUnreachable",
    "RecordMalformed",
    "VisitFeedLoader",
    "fetch_feed",
    "parse_feed",
]
