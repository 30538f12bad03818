"""Minute-aligned trading session windows.

Every trading session occupies one wall-clock minute. Inside that minute the
window runs from second ``:01.000`` to ``:59.999``; the instants between
``:59.999`` and the next ``:01.000`` belong to no window. The countdown shown
on the admin dashboard depends on that layout, so it is kept literally.

Windows are derived from an anchor instant and are never stored: they are
regenerated on every request, and classifying a window against an instant is
a pure function of both.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any, Dict, List, Optional

from core import get_logger
from core.constants import SessionDefaults, SessionOutcome, SessionStatus
from core.exceptions import InvalidArgumentError
from utils.timeutils import Instant, parse_instant, to_iso

logger = get_logger(__name__)

SESSION_STEP = timedelta(minutes=1)


@dataclass(frozen=True)
class SessionWindow:
    id: str
    start_time: datetime
    end_time: datetime
    label: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "startTime": to_iso(self.start_time),
            "endTime": to_iso(self.end_time),
            "label": self.label,
        }


@dataclass(frozen=True)
class SessionState:
    status: SessionStatus
    progress: float


@dataclass(frozen=True)
class TradingSession:
    """A window as shown on the trading sessions monitor."""
    window: SessionWindow
    state: SessionState
    result: SessionOutcome

    def to_dict(self) -> Dict[str, Any]:
        data = self.window.to_dict()
        data.update(
            status=self.state.status.value,
            progress=self.state.progress,
            result=self.result.value,
            session=self.window.label,
        )
        return data


def _window_start(instant: datetime) -> datetime:
    return instant.replace(second=SessionDefaults.START_SECOND, microsecond=0)


def _window_end(start: datetime) -> datetime:
    return start.replace(second=SessionDefaults.END_SECOND, microsecond=SessionDefaults.END_MICROSECOND)


def format_label(start: datetime, tz: Optional[tzinfo] = None) -> str:
    """``HH:MM`` of the window start in the display timezone."""
    local = start.astimezone(tz or timezone.utc)
    return local.strftime(SessionDefaults.LABEL_FORMAT)


def _make_window(window_id: str, start: datetime, tz: Optional[tzinfo]) -> SessionWindow:
    return SessionWindow(
        id=window_id,
        start_time=start,
        end_time=_window_end(start),
        label=format_label(start, tz),
    )


def window_from_bounds(window_id: str, start: Instant, end: Instant, tz: Optional[tzinfo] = None) -> SessionWindow:
    """Wrap stored start/end timestamps as a window so it can be classified."""
    start_time = parse_instant(start)
    return SessionWindow(id=window_id, start_time=start_time, end_time=parse_instant(end), label=format_label(start_time, tz))


def generate_windows(anchor: Instant, count: int, tz: Optional[tzinfo] = None) -> List[SessionWindow]:
    """Build ``count`` consecutive windows starting in the minute of ``anchor``.

    Args:
        anchor: Instant whose minute hosts the first window
        count: Number of windows, zero or more
        tz: Timezone used for the ``HH:MM`` labels (UTC when omitted)

    Returns:
        Ordered list of windows, one per minute

    Raises:
        InvalidArgumentError: If ``count`` is negative or not an integer
        InvalidTimestampError: If ``anchor`` is not an instant
    """
    if isinstance(count, bool) or not isinstance(count, int):
        raise InvalidArgumentError(f"Window count must be an integer, got {count!r}")
    if count < 0:
        raise InvalidArgumentError(f"Window count must not be negative, got {count}")

    start = _window_start(parse_instant(anchor))
    windows = []
    for index in range(count):
        windows.append(_make_window(f"session-{index + 1}", start, tz))
        start = _window_start(start + SESSION_STEP)
    return windows


def classify(window: SessionWindow, now: Instant) -> SessionState:
    """Status and elapsed percentage of ``window`` at ``now``.

    Both window boundaries count as active.
    """
    instant = parse_instant(now)
    if instant < window.start_time:
        return SessionState(SessionStatus.UPCOMING, 0.0)
    if instant > window.end_time:
        return SessionState(SessionStatus.COMPLETED, 100.0)

    total = window.end_time - window.start_time
    elapsed = instant - window.start_time
    progress = (elapsed / total) * 100 if total else 100.0
    return SessionState(SessionStatus.ACTIVE, min(100.0, max(0.0, progress)))


def is_active(window: SessionWindow, now: Instant) -> bool:
    instant = parse_instant(now)
    return window.start_time <= instant <= window.end_time


def current_window(now: Instant, tz: Optional[tzinfo] = None) -> SessionWindow:
    """The window of the minute containing ``now``."""
    start = _window_start(parse_instant(now))
    return _make_window("current", start, tz)


def next_windows(now: Instant, count: int, tz: Optional[tzinfo] = None) -> List[SessionWindow]:
    """``count`` windows beginning with the minute after ``now``."""
    return generate_windows(parse_instant(now) + SESSION_STEP, count, tz)


def draw_outcome(rng: Optional[random.Random] = None) -> SessionOutcome:
    """Placeholder up/down result; no market data is consulted."""
    chooser = rng or random
    return SessionOutcome.UP if chooser.random() > 0.5 else SessionOutcome.DOWN


def build_trading_sessions(
    now: Instant,
    count: int,
    tz: Optional[tzinfo] = None,
    rng: Optional[random.Random] = None,
) -> List[TradingSession]:
    """Windows from the next minute on, classified against ``now``."""
    instant = parse_instant(now)
    sessions = [
        TradingSession(window=window, state=classify(window, instant), result=draw_outcome(rng))
        for window in next_windows(instant, count, tz)
    ]
    logger.debug("Generated %d trading sessions from %s", len(sessions), to_iso(instant))
    return sessions
