"""Records of the back-office store and their JSON shape."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Any, Dict, Optional


def _opt(row: sqlite3.Row, key: str) -> Any:
    return row[key] if key in row.keys() else None


@dataclass(slots=True)
class User:
    id: str
    username: str
    full_name: Optional[str]
    email: Optional[str]
    phone: Optional[str]
    role: str
    balance_available: float
    balance_frozen: float
    active: bool
    bet_locked: bool
    withdraw_locked: bool
    created_at: Optional[str]
    updated_at: Optional[str] = None
    last_login: Optional[str] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "User":
        return cls(
            id=row["id"],
            username=row["username"],
            full_name=row["full_name"],
            email=row["email"],
            phone=row["phone"],
            role=row["role"] or "user",
            balance_available=row["balance_available"] or 0,
            balance_frozen=row["balance_frozen"] or 0,
            active=bool(row["active"]),
            bet_locked=bool(row["bet_locked"]),
            withdraw_locked=bool(row["withdraw_locked"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            last_login=row["last_login"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "_id": self.id,
            "username": self.username,
            "fullName": self.full_name,
            "email": self.email,
            "phone": self.phone,
            "role": self.role,
            "balance": {
                "available": self.balance_available,
                "frozen": self.balance_frozen,
            },
            "status": {
                "active": self.active,
                "betLocked": self.bet_locked,
                "withdrawLocked": self.withdraw_locked,
            },
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "lastLogin": self.last_login,
        }


@dataclass(slots=True)
class UserSummary:
    """User fields joined onto a deposit or withdrawal request."""
    id: str
    username: str
    full_name: Optional[str]
    phone: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "_id": self.id,
            "username": self.username,
            "fullName": self.full_name,
            "phone": self.phone,
        }


@dataclass(slots=True)
class DepositRequest:
    id: str
    user_id: str
    amount: float
    status: str
    proof_image: Optional[str]
    transaction_code: Optional[str]
    notes: Optional[str]
    processed_by: Optional[str]
    processed_at: Optional[str]
    created_at: str
    updated_at: Optional[str]
    user: Optional[UserSummary] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "DepositRequest":
        user = None
        if _opt(row, "user_username") is not None:
            user = UserSummary(
                id=row["user_id"],
                username=row["user_username"],
                full_name=row["user_full_name"],
                phone=row["user_phone"],
            )
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            amount=row["amount"],
            status=row["status"],
            proof_image=row["proof_image"],
            transaction_code=row["transaction_code"],
            notes=row["notes"],
            processed_by=row["processed_by"],
            processed_at=row["processed_at"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            user=user,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "_id": self.id,
            "userId": self.user_id,
            "username": self.user.username if self.user else None,
            "amount": self.amount,
            "status": self.status,
            "proofImage": self.proof_image,
            "transactionCode": self.transaction_code,
            "notes": self.notes,
            "processedBy": self.processed_by,
            "processedAt": self.processed_at,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "userDetails": self.user.to_dict() if self.user else None,
        }


@dataclass(slots=True)
class WithdrawalRequest:
    id: str
    user_id: str
    amount: float
    received_amount: float
    status: str
    bank_name: Optional[str]
    account_number: Optional[str]
    account_holder: Optional[str]
    branch: Optional[str]
    note: Optional[str]
    processed_by: Optional[str]
    processed_at: Optional[str]
    created_at: str
    updated_at: Optional[str]
    user: Optional[UserSummary] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "WithdrawalRequest":
        user = None
        if _opt(row, "user_username") is not None:
            user = UserSummary(
                id=row["user_id"],
                username=row["user_username"],
                full_name=row["user_full_name"],
                phone=row["user_phone"],
            )
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            amount=row["amount"],
            received_amount=row["received_amount"],
            status=row["status"],
            bank_name=row["bank_name"],
            account_number=row["account_number"],
            account_holder=row["account_holder"],
            branch=row["branch"],
            note=row["note"],
            processed_by=row["processed_by"],
            processed_at=row["processed_at"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            user=user,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "_id": self.id,
            "userId": self.user_id,
            "username": self.user.username if self.user else None,
            "amount": self.amount,
            "receivedAmount": self.received_amount,
            "status": self.status,
            "bankAccount": {
                "bankName": self.bank_name,
                "accountNumber": self.account_number,
                "accountHolder": self.account_holder,
                "branch": self.branch,
            },
            "note": self.note,
            "processedBy": self.processed_by,
            "processedAt": self.processed_at,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass(slots=True)
class Bet:
    id: str
    user_id: Optional[str]
    username: str
    session_id: Optional[str]
    direction: Optional[str]
    amount: float
    status: str
    payout: float
    created_at: str
    updated_at: Optional[str]

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Bet":
        return cls(**{name: row[name] for name in cls.__slots__})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "_id": self.id,
            "userId": self.user_id,
            "user": self.username,
            "session": self.session_id,
            "direction": self.direction,
            "amount": self.amount,
            "status": self.status,
            "payout": self.payout,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass(slots=True)
class StoredSession:
    """A row of the ``trading_sessions`` collection kept by the game server."""
    id: str
    session_id: Optional[str]
    start_time: Optional[str]
    end_time: Optional[str]
    status: Optional[str]
    result: Optional[str]

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "StoredSession":
        return cls(**{name: row[name] for name in cls.__slots__})


@dataclass(slots=True)
class AuditEntry:
    id: int
    admin_username: str
    action_type: str
    entity_type: str
    entity_id: Optional[str]
    old_value: Optional[str]
    new_value: Optional[str]
    reason: Optional[str]
    ip_address: Optional[str]
    user_agent: Optional[str]
    created_at: str

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "AuditEntry":
        return cls(**{name: row[name] for name in cls.__slots__})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "adminUsername": self.admin_username,
            "actionType": self.action_type,
            "entityType": self.entity_type,
            "entityId": self.entity_id,
            "oldValue": self.old_value,
            "newValue": self.new_value,
            "reason": self.reason,
            "ipAddress": self.ip_address,
            "createdAt": self.created_at,
        }
