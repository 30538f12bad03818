"""Database schema migrations."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from core import get_logger

logger = get_logger(__name__)


SCHEMA_SQL: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        username TEXT UNIQUE NOT NULL,
        full_name TEXT,
        email TEXT,
        phone TEXT,
        password_hash TEXT,
        role TEXT DEFAULT 'user',
        balance_available REAL NOT NULL DEFAULT 0,
        balance_frozen REAL NOT NULL DEFAULT 0,
        active INTEGER NOT NULL DEFAULT 1,
        bet_locked INTEGER NOT NULL DEFAULT 0,
        withdraw_locked INTEGER NOT NULL DEFAULT 0,
        verified INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT,
        last_login TEXT
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_users_created_at ON users(created_at);",
    "CREATE INDEX IF NOT EXISTS idx_users_active ON users(active);",
    """
    CREATE TABLE IF NOT EXISTS deposits (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        amount REAL NOT NULL,
        status TEXT NOT NULL DEFAULT 'pending',
        proof_image TEXT,
        transaction_code TEXT,
        notes TEXT,
        processed_by TEXT,
        processed_at TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_deposits_status ON deposits(status, created_at);",
    """
    CREATE TABLE IF NOT EXISTS withdrawals (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        amount REAL NOT NULL,
        received_amount REAL NOT NULL,
        status TEXT NOT NULL DEFAULT 'pending',
        bank_name TEXT,
        account_number TEXT,
        account_holder TEXT,
        branch TEXT,
        note TEXT,
        processed_by TEXT,
        processed_at TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_withdrawals_status ON withdrawals(status, created_at);",
    """
    CREATE TABLE IF NOT EXISTS bets (
        id TEXT PRIMARY KEY,
        user_id TEXT,
        username TEXT NOT NULL,
        session_id TEXT,
        direction TEXT,
        amount REAL NOT NULL,
        status TEXT NOT NULL DEFAULT 'pending',
        payout REAL NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_bets_created_at ON bets(created_at);",
    """
    CREATE TABLE IF NOT EXISTS trading_sessions (
        id TEXT PRIMARY KEY,
        session_id TEXT,
        start_time TEXT,
        end_time TEXT,
        status TEXT,
        result TEXT
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_trading_sessions_start ON trading_sessions(start_time);",
    """
    CREATE TABLE IF NOT EXISTS user_documents (
        id TEXT PRIMARY KEY,
        user_id TEXT,
        type TEXT NOT NULL,
        url TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'pending',
        created_at TEXT NOT NULL,
        updated_at TEXT
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS settings (
        key TEXT PRIMARY KEY,
        value TEXT,
        updated_at TEXT
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS audit_log (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        admin_username TEXT NOT NULL,
        action_type TEXT NOT NULL,
        entity_type TEXT NOT NULL,
        entity_id TEXT,
        old_value TEXT,
        new_value TEXT,
        reason TEXT,
        ip_address TEXT,
        user_agent TEXT,
        created_at TEXT NOT NULL
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_audit_log_created_at ON audit_log(created_at);",
)


def apply_migrations(db_path: str) -> None:
    """Create the schema if it does not exist yet."""
    path = Path(db_path)
    if not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(path)
    try:
        for statement in SCHEMA_SQL:
            conn.execute(statement)
        conn.commit()
    finally:
        conn.close()
    logger.info("Database schema ready at %s", path)
