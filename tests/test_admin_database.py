"""Tests for the sqlite-backed admin store."""

import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from core.constants import RequestStatus, SettingsDefaults
from core.exceptions import ValidationError
from database import apply_migrations
from database.queries import OrderQuery, RequestQuery, UserQuery, UserUpdate
from utils.pagination import Pagination

T0 = datetime(2025, 6, 29, 9, 0, tzinfo=timezone.utc)


def make_users(db, count=3):
    return [
        db.insert_user(
            username=f"user{i}",
            full_name=f"Nguyen Van {chr(65 + i)}",
            phone=f"09{i:08d}",
            created_at=T0 + timedelta(minutes=i),
        )
        for i in range(count)
    ]


def test_migrations_are_idempotent(tmp_path):
    path = str(tmp_path / "twice.sqlite")
    apply_migrations(path)
    apply_migrations(path)

    conn = sqlite3.connect(path)
    tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    conn.close()
    assert {
        "users", "deposits", "withdrawals", "bets", "trading_sessions",
        "user_documents", "settings", "audit_log",
    } <= tables


def test_ping(db):
    assert db.ping() is True


def test_insert_and_get_user(db):
    user_id = db.insert_user(username="alice", full_name="Alice", email="a@example.com", balance_available=1000)
    user = db.get_user(user_id)

    assert len(user_id) == 32
    data = user.to_dict()
    assert data["_id"] == user_id
    assert data["fullName"] == "Alice"
    assert data["balance"] == {"available": 1000, "frozen": 0}
    assert data["status"] == {"active": True, "betLocked": False, "withdrawLocked": False}
    assert "password_hash" not in data
    assert db.get_user("missing") is None


def test_list_users_newest_first(db):
    make_users(db)
    users = db.list_users(UserQuery())
    assert [u.username for u in users] == ["user2", "user1", "user0"]


def test_list_users_search_is_case_insensitive(db):
    make_users(db)
    assert [u.username for u in db.list_users(UserQuery(search="VAN B"))] == ["user1"]
    assert [u.username for u in db.list_users(UserQuery(search="USER0"))] == ["user0"]


def test_list_users_search_treats_wildcards_literally(db):
    db.insert_user(username="plain")
    db.insert_user(username="with_underscore")
    assert [u.username for u in db.list_users(UserQuery(search="_"))] == ["with_underscore"]
    assert db.list_users(UserQuery(search="%")) == []


def test_list_users_status_and_limit(db):
    ids = make_users(db, 5)
    db.update_user(ids[0], UserUpdate(active=False))

    assert [u.username for u in db.list_users(UserQuery(status="inactive"))] == ["user0"]
    assert len(db.list_users(UserQuery(status="active"))) == 4
    assert len(db.list_users(UserQuery(limit=2))) == 2


def test_update_user(db):
    user_id = db.insert_user(username="bob")
    updated = db.update_user(user_id, UserUpdate(email="bob@example.com", withdraw_locked=True))

    assert updated.email == "bob@example.com"
    assert updated.withdraw_locked is True
    assert updated.bet_locked is False
    assert updated.updated_at is not None
    assert db.update_user("missing", UserUpdate(active=False)) is None


def test_delete_user(db):
    user_id = db.insert_user(username="carol")
    deleted = db.delete_user(user_id)

    assert deleted.username == "carol"
    assert db.get_user(user_id) is None
    assert db.delete_user(user_id) is None


def test_recent_users(db):
    make_users(db, 12)
    recent = db.recent_users(limit=10)
    assert len(recent) == 10
    assert recent[0].username == "user11"


def test_list_orders_filters_and_pages(db):
    for i in range(15):
        db.insert_bet(username="alice" if i % 3 else "bob", amount=100 + i, created_at=T0 + timedelta(hours=i))

    bets, total = db.list_orders(OrderQuery())
    assert total == 15
    assert len(bets) == 10
    assert bets[0].amount == 114

    bets, total = db.list_orders(OrderQuery(username="bo"))
    assert total == 5
    assert all(bet.username == "bob" for bet in bets)

    bets, total = db.list_orders(OrderQuery(pagination=Pagination(page=2, per_page=10)))
    assert len(bets) == 5


def test_list_orders_date_range_includes_whole_end_day(db):
    db.insert_bet(username="a", amount=1, created_at=datetime(2025, 6, 28, 23, 0, tzinfo=timezone.utc))
    db.insert_bet(username="a", amount=2, created_at=datetime(2025, 6, 29, 23, 59, 59, 500000, tzinfo=timezone.utc))
    db.insert_bet(username="a", amount=3, created_at=datetime(2025, 6, 30, 0, 0, 1, tzinfo=timezone.utc))

    bets, total = db.list_orders(OrderQuery(
        start_date=datetime(2025, 6, 29, tzinfo=timezone.utc),
        end_date=datetime(2025, 6, 29, tzinfo=timezone.utc),
    ))
    assert total == 1
    assert bets[0].amount == 2


def test_list_deposits_joins_users_and_drops_orphans(db):
    alice, bob = make_users(db, 2)
    db.insert_deposit(alice, 500, created_at=T0)
    db.insert_deposit(bob, 700, created_at=T0 + timedelta(minutes=1))
    db.insert_deposit("ghost-user", 900, created_at=T0 + timedelta(minutes=2))

    deposits, total = db.list_deposits(RequestQuery())
    assert total == 2
    assert [d.amount for d in deposits] == [700, 500]
    assert deposits[0].to_dict()["userDetails"]["username"] == "user1"

    # Direct lookup still finds the orphan
    orphan_id = db.insert_deposit("ghost-user", 1)
    assert db.get_deposit(orphan_id).user is None


def test_list_deposits_status_and_search(db):
    alice, bob = make_users(db, 2)
    pending = db.insert_deposit(alice, 500)
    db.insert_deposit(bob, 700, status=RequestStatus.REJECTED.value)

    deposits, total = db.list_deposits(RequestQuery(status="pending"))
    assert [d.id for d in deposits] == [pending]

    deposits, total = db.list_deposits(RequestQuery(search="user1"))
    assert total == 1
    assert deposits[0].status == "rejected"


def test_list_withdrawals(db):
    (alice,) = make_users(db, 1)
    db.insert_withdrawal(alice, 300, bank_name="ACB", account_number="0123", account_holder="ALICE")

    withdrawals, total = db.list_withdrawals(RequestQuery())
    assert total == 1
    data = withdrawals[0].to_dict()
    assert data["receivedAmount"] == 300
    assert data["bankAccount"]["bankName"] == "ACB"
    assert data["username"] == "user0"


def test_settle_deposit_only_once(db):
    user_id = db.insert_user(username="dan", balance_available=100)
    deposit_id = db.insert_deposit(user_id, 250)

    assert db.settle_deposit(deposit_id, RequestStatus.APPROVED, "ok", "admin") is True
    assert db.settle_deposit(deposit_id, RequestStatus.APPROVED, "again", "admin") is False
    assert db.get_user(user_id).balance_available == 350

    deposit = db.get_deposit(deposit_id)
    assert deposit.status == "approved"
    assert deposit.processed_by == "admin"
    assert deposit.notes == "ok"


def test_settle_withdrawal_moves_frozen_funds(db):
    user_id = db.insert_user(username="eve", balance_available=100, balance_frozen=400)
    approved = db.insert_withdrawal(user_id, 150)
    rejected = db.insert_withdrawal(user_id, 250)

    db.settle_withdrawal(approved, RequestStatus.APPROVED, "", "admin")
    user = db.get_user(user_id)
    assert (user.balance_available, user.balance_frozen) == (100, 250)

    db.settle_withdrawal(rejected, RequestStatus.REJECTED, "bad account", "admin")
    user = db.get_user(user_id)
    assert (user.balance_available, user.balance_frozen) == (350, 0)


def test_recent_sessions_newest_first(db):
    for minute in range(3):
        start = T0 + timedelta(minutes=minute, seconds=1)
        db.insert_stored_session(f"S{minute}", start, start + timedelta(seconds=58, milliseconds=999))

    sessions = db.recent_sessions(limit=2)
    assert [s.session_id for s in sessions] == ["S2", "S1"]
    assert sessions[0].start_time == "2025-06-29T09:02:01.000Z"


def test_settings_defaults_and_update(db):
    assert db.get_settings() == SettingsDefaults.VALUES

    settings = db.update_settings({"bankName": "Vietcombank", "minDeposit": 50000})
    assert settings["bankName"] == "Vietcombank"
    assert settings["minDeposit"] == "50000"

    with pytest.raises(ValidationError):
        db.update_settings({"unknownKey": "x"})


def test_statistics(db):
    ids = make_users(db, 4)
    db.update_user(ids[0], UserUpdate(active=False, bet_locked=True))
    db.update_user(ids[1], UserUpdate(withdraw_locked=True))
    db.insert_deposit(ids[2], 100)
    db.insert_withdrawal(ids[3], 50)
    db.insert_bet(username="user2", amount=30, created_at=T0)
    db.insert_bet(username="user2", amount=70, created_at=T0 + timedelta(hours=1))
    db.insert_bet(username="user2", amount=999, created_at=T0 - timedelta(days=1))

    stats = db.get_statistics(since=T0)
    assert stats == {
        "total_users": 4,
        "active_users": 3,
        "bet_locked_users": 1,
        "withdraw_locked_users": 1,
        "pending_deposits": 1,
        "pending_withdrawals": 1,
        "bets_today": 2,
        "bet_volume_today": 100,
    }


def test_audit_log(db):
    db.log_admin_action("admin", "UPDATE_USER", "user", entity_id="u1", new_value={"active": 0})
    db.log_admin_action("root", "DELETE_USER", "user", entity_id="u2")

    entries = db.list_audit_log()
    assert [e.action_type for e in entries] == ["DELETE_USER", "UPDATE_USER"]
    assert entries[1].new_value == '{"active": 0}'
    assert [e.admin_username for e in db.list_audit_log(admin_username="root")] == ["root"]
    assert db.list_audit_log(action_type="UPDATE_USER", entity_type="deposit") == []
