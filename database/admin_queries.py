"""Synchronous queries behind the admin web API."""

from __future__ import annotations

import json
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from core import get_logger
from core.constants import DatabaseDefaults, RequestStatus, SettingsDefaults
from core.exceptions import RepositoryError, ValidationError
from database.models import AuditEntry, Bet, DepositRequest, StoredSession, User, WithdrawalRequest
from database.queries import OrderQuery, RequestQuery, UserQuery, UserUpdate
from utils.timeutils import to_iso, utcnow

logger = get_logger(__name__)

# Never selected: password_hash, verification details
USER_COLUMNS = (
    "id, username, full_name, email, phone, role, balance_available, balance_frozen, "
    "active, bet_locked, withdraw_locked, created_at, updated_at, last_login"
)

REQUEST_USER_COLUMNS = (
    "u.username AS user_username, u.full_name AS user_full_name, u.phone AS user_phone"
)


def new_id() -> str:
    """Opaque 32-character record id."""
    return uuid.uuid4().hex


class AdminDatabase:
    def __init__(self, db_path: str) -> None:
        self.db_path = Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(
            self.db_path,
            timeout=DatabaseDefaults.BUSY_TIMEOUT,
            isolation_level=None  # Autocommit; multi-statement writes use _transaction
        )
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")
        conn.execute("PRAGMA temp_store=MEMORY")
        return conn

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = self._connect()
        except sqlite3.Error as exc:
            raise RepositoryError(f"Cannot open database {self.db_path}: {exc}") from exc
        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        with self._connection() as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")

    def ping(self) -> bool:
        try:
            with self._connection() as conn:
                conn.execute("SELECT 1").fetchone()
            return True
        except (RepositoryError, sqlite3.Error) as exc:
            logger.warning("Database ping failed: %s", exc)
            return False

    # ------------------------------------------------------------------ users

    def insert_user(
        self,
        username: str,
        full_name: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        balance_available: float = 0,
        balance_frozen: float = 0,
        active: bool = True,
        bet_locked: bool = False,
        withdraw_locked: bool = False,
        verified: bool = False,
        created_at: Optional[datetime] = None,
        last_login: Optional[datetime] = None,
    ) -> str:
        user_id = new_id()
        with self._connection() as conn:
            conn.execute(
                """
                INSERT INTO users (
                    id, username, full_name, email, phone, balance_available, balance_frozen,
                    active, bet_locked, withdraw_locked, verified, created_at, last_login
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    user_id, username, full_name, email, phone, balance_available, balance_frozen,
                    int(active), int(bet_locked), int(withdraw_locked), int(verified),
                    to_iso(created_at or utcnow()), to_iso(last_login),
                ),
            )
        return user_id

    def list_users(self, query: UserQuery) -> List[User]:
        where, params = query.where()
        with self._connection() as conn:
            rows = conn.execute(
                f"SELECT {USER_COLUMNS} FROM users{where} ORDER BY created_at DESC LIMIT ?",
                [*params, query.limit],
            ).fetchall()
        return [User.from_row(row) for row in rows]

    def get_user(self, user_id: str) -> Optional[User]:
        with self._connection() as conn:
            row = conn.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id=?", (user_id,)).fetchone()
        return User.from_row(row) if row else None

    def update_user(self, user_id: str, changes: UserUpdate) -> Optional[User]:
        """Apply ``changes`` and return the updated user, ``None`` if absent."""
        assignments = changes.assignments()
        columns = ", ".join(f"{column}=?" for column, _ in assignments)
        params = [value for _, value in assignments]
        with self._connection() as conn:
            cursor = conn.execute(
                f"UPDATE users SET {columns + ', ' if columns else ''}updated_at=? WHERE id=?",
                [*params, to_iso(utcnow()), user_id],
            )
            if cursor.rowcount == 0:
                return None
        return self.get_user(user_id)

    def delete_user(self, user_id: str) -> Optional[User]:
        """Delete a user and return the removed record."""
        user = self.get_user(user_id)
        if user is None:
            return None
        with self._connection() as conn:
            conn.execute("DELETE FROM users WHERE id=?", (user_id,))
        return user

    def recent_users(self, limit: int = 10) -> List[User]:
        with self._connection() as conn:
            rows = conn.execute(
                f"SELECT {USER_COLUMNS} FROM users ORDER BY created_at DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [User.from_row(row) for row in rows]

    # ------------------------------------------------------------------ bets

    def insert_bet(
        self,
        username: str,
        amount: float,
        user_id: Optional[str] = None,
        session_id: Optional[str] = None,
        direction: Optional[str] = None,
        status: str = "pending",
        payout: float = 0,
        created_at: Optional[datetime] = None,
    ) -> str:
        bet_id = new_id()
        created = to_iso(created_at or utcnow())
        with self._connection() as conn:
            conn.execute(
                """
                INSERT INTO bets (id, user_id, username, session_id, direction, amount, status, payout, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (bet_id, user_id, username, session_id, direction, amount, status, payout, created, created),
            )
        return bet_id

    def list_orders(self, query: OrderQuery) -> Tuple[List[Bet], int]:
        where, params = query.where()
        page = query.pagination
        with self._connection() as conn:
            rows = conn.execute(
                f"SELECT * FROM bets{where} ORDER BY created_at DESC LIMIT ? OFFSET ?",
                [*params, page.per_page, page.offset],
            ).fetchall()
            total = conn.execute(f"SELECT COUNT(*) FROM bets{where}", params).fetchone()[0]
        return [Bet.from_row(row) for row in rows], total

    # ------------------------------------------------------------------ deposits / withdrawals

    def insert_deposit(
        self,
        user_id: str,
        amount: float,
        proof_image: Optional[str] = None,
        transaction_code: Optional[str] = None,
        status: str = RequestStatus.PENDING.value,
        created_at: Optional[datetime] = None,
    ) -> str:
        deposit_id = new_id()
        created = to_iso(created_at or utcnow())
        with self._connection() as conn:
            conn.execute(
                """
                INSERT INTO deposits (id, user_id, amount, status, proof_image, transaction_code, notes, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, '', ?, ?)
                """,
                (deposit_id, user_id, amount, status, proof_image, transaction_code, created, created),
            )
        return deposit_id

    def insert_withdrawal(
        self,
        user_id: str,
        amount: float,
        received_amount: Optional[float] = None,
        bank_name: Optional[str] = None,
        account_number: Optional[str] = None,
        account_holder: Optional[str] = None,
        branch: Optional[str] = None,
        status: str = RequestStatus.PENDING.value,
        created_at: Optional[datetime] = None,
    ) -> str:
        withdrawal_id = new_id()
        created = to_iso(created_at or utcnow())
        with self._connection() as conn:
            conn.execute(
                """
                INSERT INTO withdrawals (
                    id, user_id, amount, received_amount, status, bank_name, account_number,
                    account_holder, branch, note, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, '', ?, ?)
                """,
                (
                    withdrawal_id, user_id, amount,
                    amount if received_amount is None else received_amount,
                    status, bank_name, account_number, account_holder, branch, created, created,
                ),
            )
        return withdrawal_id

    def _list_requests(self, table: str, query: RequestQuery) -> Tuple[List[sqlite3.Row], int]:
        # Inner join: requests whose user no longer exists are not listed
        where, params = query.where("r")
        page = query.pagination
        base = f"FROM {table} r JOIN users u ON u.id = r.user_id{where}"
        with self._connection() as conn:
            rows = conn.execute(
                f"SELECT r.*, {REQUEST_USER_COLUMNS} {base} ORDER BY r.created_at DESC LIMIT ? OFFSET ?",
                [*params, page.per_page, page.offset],
            ).fetchall()
            total = conn.execute(f"SELECT COUNT(*) {base}", params).fetchone()[0]
        return rows, total

    def _get_request(self, table: str, request_id: str) -> Optional[sqlite3.Row]:
        with self._connection() as conn:
            return conn.execute(
                f"SELECT r.*, {REQUEST_USER_COLUMNS} FROM {table} r "
                "LEFT JOIN users u ON u.id = r.user_id WHERE r.id=?",
                (request_id,),
            ).fetchone()

    def list_deposits(self, query: RequestQuery) -> Tuple[List[DepositRequest], int]:
        rows, total = self._list_requests("deposits", query)
        return [DepositRequest.from_row(row) for row in rows], total

    def list_withdrawals(self, query: RequestQuery) -> Tuple[List[WithdrawalRequest], int]:
        rows, total = self._list_requests("withdrawals", query)
        return [WithdrawalRequest.from_row(row) for row in rows], total

    def get_deposit(self, deposit_id: str) -> Optional[DepositRequest]:
        row = self._get_request("deposits", deposit_id)
        return DepositRequest.from_row(row) if row else None

    def get_withdrawal(self, withdrawal_id: str) -> Optional[WithdrawalRequest]:
        row = self._get_request("withdrawals", withdrawal_id)
        return WithdrawalRequest.from_row(row) if row else None

    def settle_deposit(self, deposit_id: str, status: RequestStatus, notes: str, processed_by: str) -> bool:
        """Move a pending deposit to ``status``; approval credits the amount.

        Returns ``False`` when the deposit is no longer pending.
        """
        now = to_iso(utcnow())
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT user_id, amount FROM deposits WHERE id=? AND status=?",
                (deposit_id, RequestStatus.PENDING.value),
            ).fetchone()
            if row is None:
                return False
            conn.execute(
                "UPDATE deposits SET status=?, notes=?, processed_by=?, processed_at=?, updated_at=? WHERE id=?",
                (status.value, notes, processed_by, now, now, deposit_id),
            )
            if status is RequestStatus.APPROVED:
                conn.execute(
                    "UPDATE users SET balance_available = balance_available + ?, updated_at=? WHERE id=?",
                    (row["amount"], now, row["user_id"]),
                )
        return True

    def settle_withdrawal(self, withdrawal_id: str, status: RequestStatus, note: str, processed_by: str) -> bool:
        """Move a pending withdrawal to ``status`` and release the frozen amount.

        Approval pays the frozen amount out; rejection returns it to the
        available balance. Returns ``False`` when no longer pending.
        """
        now = to_iso(utcnow())
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT user_id, amount FROM withdrawals WHERE id=? AND status=?",
                (withdrawal_id, RequestStatus.PENDING.value),
            ).fetchone()
            if row is None:
                return False
            conn.execute(
                "UPDATE withdrawals SET status=?, note=?, processed_by=?, processed_at=?, updated_at=? WHERE id=?",
                (status.value, note, processed_by, now, now, withdrawal_id),
            )
            available_delta = row["amount"] if status is RequestStatus.REJECTED else 0
            conn.execute(
                "UPDATE users SET balance_frozen = balance_frozen - ?, "
                "balance_available = balance_available + ?, updated_at=? WHERE id=?",
                (row["amount"], available_delta, now, row["user_id"]),
            )
        return True

    # ------------------------------------------------------------------ sessions / documents

    def insert_stored_session(
        self,
        session_id: str,
        start_time: datetime,
        end_time: datetime,
        status: Optional[str] = None,
        result: Optional[str] = None,
    ) -> str:
        record_id = new_id()
        with self._connection() as conn:
            conn.execute(
                "INSERT INTO trading_sessions (id, session_id, start_time, end_time, status, result) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (record_id, session_id, to_iso(start_time), to_iso(end_time), status, result),
            )
        return record_id

    def recent_sessions(self, limit: int = 10) -> List[StoredSession]:
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT * FROM trading_sessions ORDER BY start_time DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [StoredSession.from_row(row) for row in rows]

    def insert_user_document(self, doc_type: str, url: str, user_id: Optional[str] = None) -> str:
        document_id = new_id()
        now = to_iso(utcnow())
        with self._connection() as conn:
            conn.execute(
                "INSERT INTO user_documents (id, user_id, type, url, status, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, 'pending', ?, ?)",
                (document_id, user_id, doc_type, url, now, now),
            )
        return document_id

    # ------------------------------------------------------------------ settings

    def get_settings(self) -> Dict[str, str]:
        with self._connection() as conn:
            rows = conn.execute("SELECT key, value FROM settings").fetchall()
        values = dict(SettingsDefaults.VALUES)
        values.update({row["key"]: row["value"] for row in rows if row["key"] in values})
        return values

    def update_settings(self, values: Mapping[str, Any]) -> Dict[str, str]:
        unknown = sorted(set(values) - set(SettingsDefaults.VALUES))
        if unknown:
            raise ValidationError(f"Unknown settings: {', '.join(unknown)}")
        now = to_iso(utcnow())
        with self._transaction() as conn:
            conn.executemany(
                "INSERT INTO settings (key, value, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at",
                [(key, str(value), now) for key, value in values.items()],
            )
        return self.get_settings()

    # ------------------------------------------------------------------ statistics

    def get_statistics(self, since: datetime) -> Dict[str, int]:
        """Dashboard counters; bet and request counts are taken from ``since`` on."""
        since_iso = to_iso(since)
        with self._connection() as conn:
            user_stats = conn.execute("""
                SELECT
                    COUNT(*) as total,
                    SUM(CASE WHEN active = 1 THEN 1 ELSE 0 END) as active,
                    SUM(CASE WHEN bet_locked = 1 THEN 1 ELSE 0 END) as bet_locked,
                    SUM(CASE WHEN withdraw_locked = 1 THEN 1 ELSE 0 END) as withdraw_locked
                FROM users
            """).fetchone()

            request_stats = conn.execute("""
                SELECT
                    (SELECT COUNT(*) FROM deposits WHERE status='pending') as pending_deposits,
                    (SELECT COUNT(*) FROM withdrawals WHERE status='pending') as pending_withdrawals
            """).fetchone()

            bet_stats = conn.execute(
                "SELECT COUNT(*) as bets, COALESCE(SUM(amount), 0) as volume FROM bets WHERE created_at >= ?",
                (since_iso,),
            ).fetchone()

        return {
            "total_users": user_stats["total"] or 0,
            "active_users": user_stats["active"] or 0,
            "bet_locked_users": user_stats["bet_locked"] or 0,
            "withdraw_locked_users": user_stats["withdraw_locked"] or 0,
            "pending_deposits": request_stats["pending_deposits"] or 0,
            "pending_withdrawals": request_stats["pending_withdrawals"] or 0,
            "bets_today": bet_stats["bets"] or 0,
            "bet_volume_today": bet_stats["volume"] or 0,
        }

    # ------------------------------------------------------------------ audit log

    def log_admin_action(
        self,
        admin_username: str,
        action_type: str,
        entity_type: str,
        entity_id: Optional[str] = None,
        old_value: Optional[Any] = None,
        new_value: Optional[Any] = None,
        reason: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> int:
        """Record an admin action; structured values are stored as JSON."""
        with self._connection() as conn:
            cursor = conn.execute(
                """
                INSERT INTO audit_log (
                    admin_username, action_type, entity_type, entity_id,
                    old_value, new_value, reason, ip_address, user_agent, created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    admin_username,
                    action_type,
                    entity_type,
                    entity_id,
                    json.dumps(old_value) if old_value is not None else None,
                    json.dumps(new_value) if new_value is not None else None,
                    reason,
                    ip_address,
                    user_agent,
                    to_iso(utcnow()),
                ),
            )
            return cursor.lastrowid

    def list_audit_log(
        self,
        limit: int = 100,
        offset: int = 0,
        admin_username: Optional[str] = None,
        action_type: Optional[str] = None,
        entity_type: Optional[str] = None,
    ) -> List[AuditEntry]:
        query = "SELECT * FROM audit_log WHERE 1=1"
        params: List[object] = []

        if admin_username:
            query += " AND admin_username = ?"
            params.append(admin_username)

        if action_type:
            query += " AND action_type = ?"
            params.append(action_type)

        if entity_type:
            query += " AND entity_type = ?"
            params.append(entity_type)

        query += " ORDER BY id DESC LIMIT ? OFFSET ?"
        params.extend([limit, offset])
        with self._connection() as conn:
            rows = conn.execute(query, params).fetchall()
        return [AuditEntry.from_row(row) for row in rows]
