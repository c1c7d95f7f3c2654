from __future__ import annotations

import threading
from datetime import date

import pytest

from feed.errors import FeedUnreachable
from feed.loader import FeedParseResult, parse_feed
from highlight.controller import GestureKind, GesturePhase, GestureSample
from render.viewport import Viewport
from session.map_session import create_session
from settings.types import MapConfig


class _FakeLoader:
    """Stands in for VisitFeedLoader; runs callbacks on a background thread."""

    def __init__(self, *, result: FeedParseResult | None = None, error=None):
        self.result = result
        self.error = error
        self.calls = 0

    def load_async(self, on_success, on_error):
        self.calls += 1

        def _run():
            if self.error is not None:
                on_error(self.error)
            else:
                on_success(self.result)

        t = threading.Thread(target=_run, daemon=True)
        t.start()
        return t


FEED = parse_feed(
    {
        "countries": [
            {"name": "France", "last": 2020},
            {"name": "United States", "last": 2022},
            {"name": "Spain"},
        ],
        "states": [{"name": "Texas", "last": 2016}],
    }
)


@pytest.fixture
def session_factory():
    made = []

    def _make(loader):
        s = create_session(MapConfig(), loader=loader, clock=lambda: date(2023, 6, 1))
        made.append(s)
        return s

    yield _make
    for s in made:
        s.close()


def _wait_loaded(session, thread):
    thread.join(2.0)
    session.dispatcher.flush(timeout_s=2.0)


def _viewport(session) -> Viewport:
    return session.renderer.viewport


def test_feed_merge_registers_well_formed_records(session_factory):
    session = session_factory(_FakeLoader(result=FEED))
    _wait_loaded(session, session.start())

    status = session.feed_status()
    assert status["state"] == "loaded"
    assert status["registered"] == 3
    assert status["rejected"] == 1

    regions = {r["name"]: r for r in session.regions()}
    assert set(regions) == {"France", "United States", "Texas"}
    assert regions["France"]["baseOpacity"] == pytest.approx(0.75)
    assert regions["France"]["baseColor"] == "#f1a340"
    assert regions["Texas"]["kind"] == "state"

    order = session.renderer.layer_ids()
    assert order.index("Texas") < order.index("admin-3-4-boundaries-bg")


def test_start_is_once_per_session(session_factory):
    loader = _FakeLoader(result=FEED)
    session = session_factory(loader)
    _wait_loaded(session, session.start())
    assert session.start() is None
    assert loader.calls == 1


def test_feed_failure_degrades_to_base_map(session_factory):
    session = session_factory(_FakeLoader(error=FeedUnreachable("host down")))
    _wait_loaded(session, session.start())

    status = session.feed_status()
    assert status["state"] == "failed"
    assert status["errorKind"] == "feed_unreachable"
    assert session.regions() == []
    assert session.figure()["data"] == []


def test_gesture_over_overlapping_regions_highlights_topmost(session_factory):
    session = session_factory(_FakeLoader(result=FEED))
    _wait_loaded(session, session.start())
    vp = _viewport(session)

    texas = vp.lonlat_to_screen(-100.0, 31.0)
    state = session.handle_gesture(GestureSample(GesturePhase.began, texas))
    assert state.region == "Texas"

    highlighted = [r["name"] for r in session.regions() if r["highlighted"]]
    assert highlighted == ["Texas"]
    assert session.renderer.fill_style("Texas") == ("#ff0000", 1.0)

    state = session.handle_gesture(GestureSample(GesturePhase.ended, texas))
    assert state.is_idle
    assert session.renderer.fill_style("Texas")[0] == "#998ec3"


def test_long_press_drives_the_label(session_factory):
    session = session_factory(_FakeLoader(result=FEED))
    _wait_loaded(session, session.start())
    france = _viewport(session).lonlat_to_screen(2.0, 47.0)

    session.handle_gesture(GestureSample(GesturePhase.began, france, GestureKind.long_press))
    assert session.label.as_dict()["text"] == "France"
    assert session.label.as_dict()["visible"] is True

    session.handle_gesture(GestureSample(GesturePhase.ended, france, GestureKind.long_press))
    assert session.label.as_dict()["visible"] is False


def test_feed_arriving_after_close_is_dropped(session_factory):
    session = session_factory(_FakeLoader(result=FEED))
    session.dispatcher.start()
    session.close()

    assert session.merge(FEED) is False
    session._on_feed_loaded(FEED)

    assert session.closed
    assert len(session.registry) == 0
    assert session.feed_status()["registered"] == 0
    assert not session.dispatcher._worker.is_alive()
