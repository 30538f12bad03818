#!/usr/bin/env python3
"""Populate a back-office database with demo users, requests and bets.

Usage:
    python scripts/seed_demo_data.py --users 30
    python scripts/seed_demo_data.py --db-path data/demo.sqlite --sessions 20
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
from datetime import timedelta
from pathlib import Path

from faker import Faker

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from config import load_config  # noqa: E402
from core import BetResult, SessionDefaults, setup_logger  # noqa: E402
from database import AdminDatabase, apply_migrations  # noqa: E402
from services.sessions import classify, draw_outcome, generate_windows  # noqa: E402
from utils.timeutils import resolve_timezone, utcnow  # noqa: E402

logger = logging.getLogger("backoffice.seed")

BANKS = ("Vietcombank", "Techcombank", "BIDV", "VietinBank", "MB Bank", "ACB")
AMOUNTS = (100_000, 200_000, 500_000, 1_000_000, 2_000_000, 5_000_000)


def mock_phone(rng: random.Random) -> str:
    return "09" + "".join(str(rng.randint(0, 9)) for _ in range(8))


def seed_users(db: AdminDatabase, fake: Faker, rng: random.Random, count: int) -> list[tuple[str, str, float]]:
    """Users as (id, username, frozen); a frozen amount backs one pending withdrawal."""
    now = utcnow()
    users = []
    for index in range(count):
        username = f"{fake.user_name()}{index}"
        frozen = rng.choice(AMOUNTS) if rng.random() < 0.5 else 0
        user_id = db.insert_user(
            username=username,
            full_name=fake.name(),
            email=fake.email(),
            phone=mock_phone(rng),
            balance_available=rng.choice(AMOUNTS) * rng.randint(0, 5),
            balance_frozen=frozen,
            active=rng.random() > 0.1,
            bet_locked=rng.random() < 0.1,
            withdraw_locked=rng.random() < 0.1,
            verified=rng.random() > 0.5,
            created_at=now - timedelta(days=rng.randint(0, 60), minutes=rng.randint(0, 1440)),
            last_login=now - timedelta(minutes=rng.randint(0, 10_000)),
        )
        users.append((user_id, username, frozen))
    logger.info("Inserted %d users", len(users))
    return users


def seed_requests(db: AdminDatabase, fake: Faker, rng: random.Random, users: list[tuple[str, str, float]], count: int) -> None:
    now = utcnow()
    for _ in range(count):
        user_id, _, _ = rng.choice(users)
        db.insert_deposit(
            user_id=user_id,
            amount=rng.choice(AMOUNTS),
            transaction_code=fake.bothify("NAP########"),
            created_at=now - timedelta(minutes=rng.randint(0, 5000)),
        )

    withdrawals = 0
    for user_id, _, frozen in users:
        if not frozen:
            continue
        db.insert_withdrawal(
            user_id=user_id,
            amount=frozen,
            received_amount=frozen * 0.99,
            bank_name=rng.choice(BANKS),
            account_number=fake.numerify("##########"),
            account_holder=fake.name().upper(),
            branch=fake.city(),
            created_at=now - timedelta(minutes=rng.randint(0, 5000)),
        )
        withdrawals += 1
    logger.info("Inserted %d deposits and %d withdrawals", count, withdrawals)


def seed_sessions_and_bets(db: AdminDatabase, rng: random.Random, users: list[tuple[str, str, float]], sessions: int) -> None:
    config = load_config()
    tz = resolve_timezone(config.session_timezone)
    now = utcnow()

    # Past windows up to and including the current minute
    windows = generate_windows(now - timedelta(minutes=sessions - 1), sessions, tz)
    bets = 0
    for window in windows:
        state = classify(window, now)
        outcome = draw_outcome(rng)
        session_id = f"S{window.start_time:%Y%m%d%H%M}"
        db.insert_stored_session(
            session_id=session_id,
            start_time=window.start_time,
            end_time=window.end_time,
            status=state.status.value,
            result=outcome.value if state.progress >= 100 else None,
        )
        for _ in range(rng.randint(0, 4)):
            user_id, username, _ = rng.choice(users)
            direction = draw_outcome(rng)
            amount = rng.choice(AMOUNTS)
            if state.progress < 100:
                result, payout = BetResult.PENDING, 0
            elif direction == outcome:
                result, payout = BetResult.WIN, amount * 1.95
            else:
                result, payout = BetResult.LOSE, 0
            db.insert_bet(
                username=username,
                amount=amount,
                user_id=user_id,
                session_id=session_id,
                direction=direction.value,
                status=result.value,
                payout=payout,
                created_at=window.start_time + timedelta(seconds=rng.randint(0, 50)),
            )
            bets += 1
    logger.info("Inserted %d sessions and %d bets", len(windows), bets)


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed the back-office database with demo data")
    parser.add_argument("--db-path", default=None, help="Database path (defaults to DATABASE_PATH)")
    parser.add_argument("--users", type=int, default=20, help="Number of users to create")
    parser.add_argument("--requests", type=int, default=15, help="Deposits to create")
    parser.add_argument("--sessions", type=int, default=SessionDefaults.UPCOMING_COUNT, help="Past sessions to create")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible data")
    args = parser.parse_args()

    setup_logger(name="backoffice", level=logging.INFO)

    if args.users < 1:
        parser.error("--users must be at least 1")

    db_path = args.db_path or load_config().database_path
    apply_migrations(db_path)
    db = AdminDatabase(db_path)

    rng = random.Random(args.seed)
    fake = Faker("vi_VN")
    if args.seed is not None:
        fake.seed_instance(args.seed)

    users = seed_users(db, fake, rng, args.users)
    seed_requests(db, fake, rng, users, args.requests)
    seed_sessions_and_bets(db, rng, users, args.sessions)

    print(f"Demo data written to {db_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
