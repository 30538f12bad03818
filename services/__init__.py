"""Services package."""

from .sessions import (
    SessionState,
    SessionWindow,
    TradingSession,
    build_trading_sessions,
    classify,
    current_window,
    draw_outcome,
    generate_windows,
    is_active,
    next_windows,
)
from .audit_service import ActorContext, AuditService
from .moderation import ModerationService
from .uploads import DocumentUploadService, StoredDocument

__all__ = [
    "SessionState",
    "SessionWindow",
    "TradingSession",
    "build_trading_sessions",
    "classify",
    "current_window",
    "draw_outcome",
    "generate_windows",
    "is_active",
    "next_windows",
    "ActorContext",
    "AuditService",
    "ModerationService",
    "DocumentUploadService",
    "StoredDocument",
]
