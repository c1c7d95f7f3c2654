"""
Visit feed client.

Fetches the visited-regions document once and turns it into `RegionRecord`s:

    {
      "countries": [{"name": "France", "last": 2019}, ...],
      "states":    [{"name": "Texas",  "last": 2016}, ...]
    }

Top-level problems (unreachable host, non-JSON body, missing lists) raise.
Bad individual records are skipped and logged so one typo does not drop the feed.
"""
from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable

import requests

from feed.errors import FeedError, FeedMalformed, FeedUnreachable, RecordMalformed
from regions.types import RegionKind, RegionRecord

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 10.0

# Top-level list name -> region kind.
_FEED_LISTS: tuple[tuple[str, RegionKind], ...] = (
    ("countries", RegionKind.country),
    ("states", RegionKind.state),
)


@dataclass(frozen=True)
class FeedParseResult:
    records: list[RegionRecord] = field(default_factory=list)
    rejected: list[RecordMalformed] = field(default_factory=list)


def parse_feed(payload: bytes | str | dict[str, Any]) -> FeedParseResult:
    if isinstance(payload, dict):
        doc: Any = payload
    else:
        try:
            doc = json.loads(payload)
        except (TypeError, ValueError) as exc:
            raise FeedMalformed(f"Feed body is not JSON: {exc}") from exc

    if not isinstance(doc, dict):
        raise FeedMalformed(f"Feed root must be an object, got {type(doc).__name__}")

    lists: list[tuple[str, RegionKind, list[Any]]] = []
    for list_name, kind in _FEED_LISTS:
        items = doc.get(list_name)
        if not isinstance(items, list):
            raise FeedMalformed(f"Feed is missing a `{list_name}` list")
        lists.append((list_name, kind, items))

    records: list[RegionRecord] = []
    rejected: list[RecordMalformed] = []
    for list_name, kind, items in lists:
        for i, raw in enumerate(items):
            try:
                records.append(_parse_record(raw, kind=kind, list_name=list_name, index=i))
            except RecordMalformed as exc:
                log.warning("Skipping malformed feed record %s", exc)
                rejected.append(exc)

    return FeedParseResult(records=records, rejected=rejected)


def _parse_record(raw: Any, *, kind: RegionKind, list_name: str, index: int) -> RegionRecord:
    if not isinstance(raw, dict):
        raise RecordMalformed(list_name, index, "record is not an object")

    name = raw.get("name")
    if not isinstance(name, str) or not name.strip():
        raise RecordMalformed(list_name, index, "missing or non-string `name`")

    last = raw.get("last")
    # bool is an int subclass; a JSON true/false is not a year.
    if isinstance(last, bool):
        raise RecordMalformed(list_name, index, "`last` must be an integer year")
    if isinstance(last, float) and last.is_integer():
        last = int(last)
    if not isinstance(last, int):
        raise RecordMalformed(list_name, index, "missing or non-integer `last`")

    return RegionRecord(name=name, kind=kind, last_visited_year=last)


def fetch_feed(
    url: str,
    *,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    session: requests.Session | None = None,
) -> bytes:
    """
    Single attempt, no retry. Timeouts count as unreachable.
    """
    getter = session or requests
    try:
        resp = getter.get(url, timeout=timeout_s)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise FeedUnreachable(f"Could not fetch visit feed {url}: {exc}") from exc
    return resp.content


@dataclass
class VisitFeedLoader:
    url: str
    timeout_s: float = DEFAULT_TIMEOUT_S
    session: requests.Session | None = None

    def load(self) -> FeedParseResult:
        payload = fetch_feed(self.url, timeout_s=self.timeout_s, session=self.session)
        result = parse_feed(payload)
        log.info(
            "Visit feed loaded from %s: %d records, %d rejected",
            self.url,
            len(result.records),
            len(result.rejected),
        )
        return result

    def load_async(
        self,
        on_success: Callable[[FeedParseResult], None],
        on_error: Callable[[FeedError], None],
    ) -> threading.Thread:
        """
        Run `load()` on a background thread; exactly one callback fires, on that thread.
        """

        def _run() -> None:
            try:
                result = self.load()
            except FeedError as exc:
                log.warning("Visit feed failed (%s): %s", exc.kind, exc)
                on_error(exc)
                return
            on_success(result)

        t = threading.Thread(target=_run, name="visit-feed", daemon=True)
        t.start()
        return t
