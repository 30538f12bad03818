"""Admin action audit log."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Any, List, Optional

from core import get_logger
from core.exceptions import DatabaseError
from database.admin_queries import AdminDatabase
from database.models import AuditEntry

logger = get_logger(__name__)


@dataclass(frozen=True)
class ActorContext:
    """Who performed an action and from where."""
    admin_username: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


class AuditService:
    """Writes and reads the ``audit_log`` table."""

    def __init__(self, db: AdminDatabase) -> None:
        self.db = db

    def log_action(
        self,
        actor: ActorContext,
        action_type: str,
        entity_type: str,
        entity_id: Optional[str] = None,
        old_value: Optional[Any] = None,
        new_value: Optional[Any] = None,
        reason: Optional[str] = None,
    ) -> Optional[int]:
        """Record an admin action.

        A failing audit write is logged and does not undo the action it
        describes; ``None`` is returned in that case.
        """
        try:
            return self.db.log_admin_action(
                admin_username=actor.admin_username,
                action_type=action_type,
                entity_type=entity_type,
                entity_id=entity_id,
                old_value=old_value,
                new_value=new_value,
                reason=reason,
                ip_address=actor.ip_address,
                user_agent=actor.user_agent,
            )
        except (DatabaseError, sqlite3.Error) as exc:
            logger.error("Failed to write audit entry %s %s/%s: %s", action_type, entity_type, entity_id, exc)
            return None

    def get_audit_logs(
        self,
        limit: int = 100,
        offset: int = 0,
        admin_username: Optional[str] = None,
        action_type: Optional[str] = None,
        entity_type: Optional[str] = None,
    ) -> List[AuditEntry]:
        return self.db.list_audit_log(
            limit=limit,
            offset=offset,
            admin_username=admin_username,
            action_type=action_type,
            entity_type=entity_type,
        )
