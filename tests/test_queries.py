"""Unit tests for the typed listing filters and pagination."""

from datetime import datetime, timezone

import pytest

from core.exceptions import InvalidArgumentError, ValidationError
from database.queries import OrderQuery, RequestQuery, UserQuery, UserUpdate, like_pattern
from utils.pagination import Pagination


def test_like_pattern_escapes_wildcards():
    assert like_pattern("ann") == "%ann%"
    assert like_pattern("50%_off") == "%50\\%\\_off%"
    assert like_pattern("a\\b") == "%a\\\\b%"


def test_user_query_defaults():
    query = UserQuery()
    assert query.where() == ("", [])
    assert query.limit == 100


def test_user_query_search_and_status():
    where, params = UserQuery(search="nguyen", status="inactive").where()
    assert "username LIKE ?" in where
    assert "full_name LIKE ?" in where
    assert "active=?" in where
    assert params == ["%nguyen%", "%nguyen%", 0]


def test_user_query_rejects_unknown_status():
    with pytest.raises(ValidationError):
        UserQuery(status="banned")


def test_user_query_rejects_bad_limit():
    with pytest.raises(InvalidArgumentError):
        UserQuery(limit=0)


def test_user_update_assignments():
    update = UserUpdate(full_name="Tran Van A", bet_locked=True, active=False)
    assert update.assignments() == [("full_name", "Tran Van A"), ("active", 0), ("bet_locked", 1)]
    assert not update.is_empty()
    assert UserUpdate().is_empty()


def test_order_query_range_needs_both_ends():
    start = datetime(2025, 6, 1, tzinfo=timezone.utc)
    end = datetime(2025, 6, 29, tzinfo=timezone.utc)

    where, params = OrderQuery(start_date=start).where()
    assert where == ""

    where, params = OrderQuery(username="bob", start_date=start, end_date=end).where()
    assert "created_at >= ?" in where
    assert params == ["%bob%", "2025-06-01T00:00:00.000Z", "2025-06-29T23:59:59.999Z"]


def test_order_query_default_page_size():
    assert OrderQuery().pagination.per_page == 10


def test_request_query():
    where, params = RequestQuery(status="pending", search="an").where("d")
    assert "d.status=?" in where
    assert "u.username LIKE ?" in where
    assert params == ["pending", "%an%", "%an%"]


def test_request_query_rejects_unknown_status():
    with pytest.raises(ValidationError):
        RequestQuery(status="done")


def test_pagination_arithmetic():
    page = Pagination(page=3, per_page=10)
    assert page.offset == 20
    assert page.total_pages(30) == 3
    assert page.total_pages(31) == 4
    assert page.total_pages(0) == 0
    assert page.slice(list(range(25))) == [20, 21, 22, 23, 24]


@pytest.mark.parametrize("page, per_page", [(0, 10), (1, 0), (1, 501), (-2, 5)])
def test_pagination_rejects_bad_values(page, per_page):
    with pytest.raises(InvalidArgumentError):
        Pagination(page=page, per_page=per_page)
