"""Unit tests for minute-aligned session windows."""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from core.constants import SessionOutcome, SessionStatus
from core.exceptions import InvalidArgumentError, InvalidTimestampError
from services.sessions import (
    build_trading_sessions,
    classify,
    current_window,
    draw_outcome,
    generate_windows,
    is_active,
    next_windows,
    window_from_bounds,
)
from utils.timeutils import parse_instant, to_iso

ANCHOR = datetime(2025, 6, 29, 9, 0, 0, tzinfo=timezone.utc)
SAIGON = ZoneInfo("Asia/Ho_Chi_Minh")
MS = timedelta(milliseconds=1)


class FixedRandom:
    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


@pytest.mark.parametrize("count", [0, 1, 2, 30, 100])
def test_generate_windows_length(count):
    assert len(generate_windows(ANCHOR, count)) == count


def test_generate_windows_example():
    """Two windows from 09:00:00 run 09:00:01-09:00:59.999 and 09:01:01-09:01:59.999."""
    first, second = generate_windows(ANCHOR, 2)

    assert to_iso(first.start_time) == "2025-06-29T09:00:01.000Z"
    assert to_iso(first.end_time) == "2025-06-29T09:00:59.999Z"
    assert to_iso(second.start_time) == "2025-06-29T09:01:01.000Z"
    assert to_iso(second.end_time) == "2025-06-29T09:01:59.999Z"
    assert [first.id, second.id] == ["session-1", "session-2"]


def test_window_shape():
    windows = generate_windows(ANCHOR + timedelta(seconds=42, microseconds=123456), 30)

    for window in windows:
        assert window.start_time.second == 1
        assert window.start_time.microsecond == 0
        assert window.end_time.second == 59
        assert window.end_time.microsecond == 999000
        assert window.end_time - window.start_time == timedelta(seconds=58, milliseconds=999)

    for previous, following in zip(windows, windows[1:]):
        assert following.start_time - previous.start_time == timedelta(minutes=1)


def test_windows_cross_hour_and_month():
    windows = generate_windows(datetime(2025, 6, 30, 23, 59, 30, tzinfo=timezone.utc), 2)
    assert to_iso(windows[1].start_time) == "2025-07-01T00:00:01.000Z"


def test_labels_use_display_timezone():
    windows = generate_windows(ANCHOR, 2, SAIGON)
    assert [w.label for w in windows] == ["16:00", "16:01"]


def test_labels_default_to_utc():
    assert generate_windows(ANCHOR, 1)[0].label == "09:00"


def test_anchor_accepts_iso_string():
    windows = generate_windows("2025-06-29T09:00:00.000Z", 1)
    assert windows[0].start_time == ANCHOR.replace(second=1)


def test_naive_anchor_is_utc():
    windows = generate_windows(datetime(2025, 6, 29, 9, 0, 0), 1)
    assert windows[0].start_time.tzinfo is not None
    assert to_iso(windows[0].start_time) == "2025-06-29T09:00:01.000Z"


@pytest.mark.parametrize("count", [-1, 2.5, "3", None, True])
def test_generate_windows_rejects_bad_count(count):
    with pytest.raises(InvalidArgumentError):
        generate_windows(ANCHOR, count)


@pytest.mark.parametrize("anchor", ["not a date", "", 1719651600])
def test_generate_windows_rejects_bad_anchor(anchor):
    with pytest.raises(InvalidTimestampError):
        generate_windows(anchor, 1)


def test_classify_states():
    window = generate_windows(ANCHOR, 1)[0]

    before = classify(window, window.start_time - MS)
    assert before.status is SessionStatus.UPCOMING
    assert before.progress == 0

    at_start = classify(window, window.start_time)
    assert at_start.status is SessionStatus.ACTIVE
    assert at_start.progress == 0

    at_end = classify(window, window.end_time)
    assert at_end.status is SessionStatus.ACTIVE
    assert at_end.progress == 100

    after = classify(window, window.end_time + MS)
    assert after.status is SessionStatus.COMPLETED
    assert after.progress == 100


def test_classify_midway():
    window = generate_windows(ANCHOR, 1)[0]
    state = classify(window, "2025-06-29T09:00:30.000Z")

    assert state.status is SessionStatus.ACTIVE
    # 29 of 58.999 seconds elapsed
    assert state.progress == pytest.approx(29 / 58.999 * 100)
    assert state.progress == pytest.approx(50, abs=1)


def test_progress_stays_in_range():
    window = generate_windows(ANCHOR, 1)[0]
    instant = window.start_time - timedelta(seconds=5)
    while instant < window.end_time + timedelta(seconds=5):
        progress = classify(window, instant).progress
        assert 0 <= progress <= 100
        instant += timedelta(milliseconds=250)


@pytest.mark.parametrize("offset", [
    timedelta(seconds=-5),
    timedelta(0),
    timedelta(seconds=29),
    timedelta(seconds=58, milliseconds=999),
    timedelta(seconds=59, milliseconds=500),
    timedelta(minutes=2),
])
def test_classify_is_repeatable(offset):
    """Same window and instant give the same state, whatever form the instant takes."""
    window = generate_windows(ANCHOR, 1)[0]
    instant = window.start_time + offset

    from_datetime = classify(window, instant)
    from_string = classify(window, to_iso(instant))

    assert from_datetime == from_string
    assert classify(window, instant) == from_datetime


def test_gap_between_windows_is_not_active():
    first, second = generate_windows(ANCHOR, 2)
    gap = first.end_time + timedelta(milliseconds=500)

    assert not is_active(first, gap)
    assert not is_active(second, gap)
    assert is_active(second, second.start_time)


def test_current_window():
    now = datetime(2025, 6, 29, 9, 15, 42, 500000, tzinfo=timezone.utc)
    window = current_window(now, SAIGON)

    assert window.id == "current"
    assert to_iso(window.start_time) == "2025-06-29T09:15:01.000Z"
    assert to_iso(window.end_time) == "2025-06-29T09:15:59.999Z"
    assert window.label == "16:15"
    assert is_active(window, now)


def test_next_windows_start_in_following_minute():
    now = datetime(2025, 6, 29, 9, 15, 42, tzinfo=timezone.utc)
    windows = next_windows(now, 3)

    assert [to_iso(w.start_time) for w in windows] == [
        "2025-06-29T09:16:01.000Z",
        "2025-06-29T09:17:01.000Z",
        "2025-06-29T09:18:01.000Z",
    ]


def test_draw_outcome():
    assert draw_outcome(FixedRandom(0.75)) is SessionOutcome.UP
    assert draw_outcome(FixedRandom(0.5)) is SessionOutcome.DOWN
    assert draw_outcome(FixedRandom(0.1)) is SessionOutcome.DOWN
    assert draw_outcome() in set(SessionOutcome)


def test_build_trading_sessions():
    sessions = build_trading_sessions(ANCHOR, 5, SAIGON, rng=FixedRandom(0.9))

    assert len(sessions) == 5
    first = sessions[0].to_dict()
    assert first == {
        "id": "session-1",
        "startTime": "2025-06-29T09:01:01.000Z",
        "endTime": "2025-06-29T09:01:59.999Z",
        "label": "16:01",
        "status": "upcoming",
        "progress": 0.0,
        "result": "up",
        "session": "16:01",
    }
    assert all(s.state.status is SessionStatus.UPCOMING for s in sessions)


def test_window_from_bounds():
    window = window_from_bounds("S1", "2025-06-29T09:00:01.000Z", "2025-06-29T09:00:59.999Z", SAIGON)
    assert window.label == "16:00"
    assert classify(window, "2025-06-29T09:05:00Z").status is SessionStatus.COMPLETED


def test_parse_instant_variants():
    assert parse_instant("2025-06-29T09:00:00Z") == ANCHOR
    assert parse_instant("2025-06-29T16:00:00+07:00") == ANCHOR
    assert parse_instant(datetime(2025, 6, 29, 16, 0, tzinfo=SAIGON)) == ANCHOR
    assert parse_instant("2025-06-29T16:00:00+07:00").tzinfo == timezone.utc
