"""Typed filters for the admin listings, one per collection.

Each query object validates its own fields and renders a parameterised
``WHERE`` clause, so route handlers never assemble SQL fragments.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar, List, Optional, Tuple

from core.constants import PaginationDefaults, RequestStatus
from core.exceptions import InvalidArgumentError, ValidationError
from utils.pagination import Pagination
from utils.timeutils import end_of_day, to_iso

USER_STATUS_FILTERS = ("all", "active", "inactive")

Clause = Tuple[str, List[object]]


def like_pattern(text: str) -> str:
    """Substring LIKE pattern with ``%``, ``_`` and ``\\`` taken literally."""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _render(conditions: List[str]) -> str:
    return " WHERE " + " AND ".join(conditions) if conditions else ""


@dataclass(frozen=True)
class UserQuery:
    search: str = ""
    status: str = "all"
    limit: int = PaginationDefaults.USERS_LIMIT

    def __post_init__(self) -> None:
        if self.status not in USER_STATUS_FILTERS:
            raise ValidationError(f"Unknown user status filter: {self.status!r}")
        if self.limit < 1:
            raise InvalidArgumentError(f"limit must be >= 1, got {self.limit}")

    def where(self) -> Clause:
        conditions: List[str] = []
        params: List[object] = []
        if self.search:
            conditions.append("(username LIKE ? ESCAPE '\\' OR full_name LIKE ? ESCAPE '\\')")
            pattern = like_pattern(self.search)
            params.extend([pattern, pattern])
        if self.status != "all":
            conditions.append("active=?")
            params.append(1 if self.status == "active" else 0)
        return _render(conditions), params


@dataclass(frozen=True)
class UserUpdate:
    """Partial user edit; ``None`` leaves a field untouched."""
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    active: Optional[bool] = None
    bet_locked: Optional[bool] = None
    withdraw_locked: Optional[bool] = None

    _COLUMNS: ClassVar[Tuple[str, ...]] = (
        "full_name", "email", "phone", "active", "bet_locked", "withdraw_locked",
    )

    def assignments(self) -> List[Tuple[str, object]]:
        pairs: List[Tuple[str, object]] = []
        for column in self._COLUMNS:
            value = getattr(self, column)
            if value is None:
                continue
            pairs.append((column, int(value) if isinstance(value, bool) else value))
        return pairs

    def is_empty(self) -> bool:
        return not self.assignments()


@dataclass(frozen=True)
class OrderQuery:
    """Bet history filter; the date range applies only when both ends are set."""
    username: str = ""
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    pagination: Pagination = field(
        default_factory=lambda: Pagination(per_page=PaginationDefaults.ORDERS_PAGE_SIZE)
    )

    def where(self) -> Clause:
        conditions: List[str] = []
        params: List[object] = []
        if self.username:
            conditions.append("username LIKE ? ESCAPE '\\'")
            params.append(like_pattern(self.username))
        if self.start_date and self.end_date:
            conditions.append("created_at >= ? AND created_at <= ?")
            params.extend([to_iso(self.start_date), to_iso(end_of_day(self.end_date))])
        return _render(conditions), params


@dataclass(frozen=True)
class RequestQuery:
    """Deposit and withdrawal request filter."""
    status: Optional[str] = None
    search: str = ""
    pagination: Pagination = field(default_factory=Pagination)

    def __post_init__(self) -> None:
        if self.status is not None and self.status not in {s.value for s in RequestStatus}:
            raise ValidationError(f"Unknown request status: {self.status!r}")

    def where(self, table_alias: str = "r") -> Clause:
        conditions: List[str] = []
        params: List[object] = []
        if self.status:
            conditions.append(f"{table_alias}.status=?")
            params.append(self.status)
        if self.search:
            conditions.append("(u.username LIKE ? ESCAPE '\\' OR u.full_name LIKE ? ESCAPE '\\')")
            pattern = like_pattern(self.search)
            params.extend([pattern, pattern])
        return _render(conditions), params
