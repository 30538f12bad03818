"""Approval workflow for deposit and withdrawal requests.

A request leaves ``pending`` exactly once, to ``approved`` or ``rejected``.
Balance changes are plain increments applied together with the status
change; there is no ledger behind them.
"""

from __future__ import annotations

from typing import Optional

from prometheus_client import Counter

from core import get_logger
from core.constants import DECISION_STATUSES, RequestStatus
from core.exceptions import NotFoundError, RequestStateError, ValidationError
from database.admin_queries import AdminDatabase
from database.models import DepositRequest, WithdrawalRequest
from services.audit_service import ActorContext, AuditService

logger = get_logger(__name__)

MODERATION_DECISIONS = Counter(
    "moderation_decisions_total",
    "Deposit and withdrawal decisions taken by admins",
    ["kind", "status"],
)


def parse_decision(status: Optional[str]) -> RequestStatus:
    """Validate an admin decision; only approve and reject are accepted."""
    if not status:
        raise ValidationError("Missing status")
    try:
        decision = RequestStatus(status)
    except ValueError as exc:
        raise ValidationError(f"Invalid status: {status!r}") from exc
    if decision not in DECISION_STATUSES:
        raise ValidationError(f"Invalid status: {status!r}")
    return decision


class ModerationService:
    def __init__(self, db: AdminDatabase, audit: Optional[AuditService] = None) -> None:
        self.db = db
        self.audit = audit or AuditService(db)

    def decide_deposit(
        self,
        deposit_id: str,
        status: Optional[str],
        actor: ActorContext,
        notes: Optional[str] = None,
    ) -> DepositRequest:
        """Approve or reject a pending deposit.

        Approval adds the deposit amount to the user's available balance.

        Raises:
            ValidationError: Unknown or missing decision
            NotFoundError: No such deposit
            RequestStateError: The deposit was already processed
        """
        decision = parse_decision(status)
        deposit = self.db.get_deposit(deposit_id)
        if deposit is None:
            raise NotFoundError(f"Deposit {deposit_id} not found")
        if deposit.status != RequestStatus.PENDING.value:
            raise RequestStateError(f"Deposit {deposit_id} was already processed")

        if not self.db.settle_deposit(deposit_id, decision, notes or "", actor.admin_username):
            raise RequestStateError(f"Deposit {deposit_id} was already processed")

        MODERATION_DECISIONS.labels(kind="deposit", status=decision.value).inc()
        logger.info(
            "Deposit %s %s by %s (amount=%s, user=%s)",
            deposit_id, decision.value, actor.admin_username, deposit.amount, deposit.user_id,
        )
        self.audit.log_action(
            actor,
            action_type=f"{decision.value.upper()}_DEPOSIT",
            entity_type="deposit",
            entity_id=deposit_id,
            old_value={"status": deposit.status},
            new_value={"status": decision.value, "amount": deposit.amount},
            reason=notes,
        )
        return self.db.get_deposit(deposit_id)

    def decide_withdrawal(
        self,
        withdrawal_id: str,
        status: Optional[str],
        actor: ActorContext,
        note: Optional[str] = None,
    ) -> WithdrawalRequest:
        """Approve or reject a pending withdrawal.

        The requested amount was frozen when the user asked for it; approval
        pays it out, rejection returns it to the available balance.
        """
        decision = parse_decision(status)
        withdrawal = self.db.get_withdrawal(withdrawal_id)
        if withdrawal is None:
            raise NotFoundError(f"Withdrawal {withdrawal_id} not found")
        if withdrawal.status != RequestStatus.PENDING.value:
            raise RequestStateError(f"Withdrawal {withdrawal_id} was already processed")

        if not self.db.settle_withdrawal(withdrawal_id, decision, note or "", actor.admin_username):
            raise RequestStateError(f"Withdrawal {withdrawal_id} was already processed")

        MODERATION_DECISIONS.labels(kind="withdrawal", status=decision.value).inc()
        logger.info(
            "Withdrawal %s %s by %s (amount=%s, user=%s)",
            withdrawal_id, decision.value, actor.admin_username, withdrawal.amount, withdrawal.user_id,
        )
        self.audit.log_action(
            actor,
            action_type=f"{decision.value.upper()}_WITHDRAWAL",
            entity_type="withdrawal",
            entity_id=withdrawal_id,
            old_value={"status": withdrawal.status},
            new_value={"status": decision.value, "amount": withdrawal.amount},
            reason=note,
        )
        return self.db.get_withdrawal(withdrawal_id)
