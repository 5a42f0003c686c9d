"""
Audit logging service
"""
from typing import Any, Dict, List, Optional

from leaveflow.db.store import LeaveStore
from leaveflow.models import AuditLog
from leaveflow.utils.datetime_utils import now_utc
from leaveflow.utils.json_serializer import to_json_safe


def log_audit(
    store: LeaveStore,
    actor_id: Optional[str],
    action: str,
    entity_type: str,
    entity_id: Optional[str] = None,
    meta: Optional[Dict[str, Any]] = None
) -> AuditLog:
    """
    Create an audit log entry

    Args:
        store: Leave store
        actor_id: ID of the user performing the action (None for system actions)
        action: Action type (e.g., "LEAVE_APPLY", "DELEGATION_ADD")
        entity_type: Type of entity (e.g., "leave_requests", "delegations")
        entity_id: ID of the affected entity (optional)
        meta: Additional metadata as dictionary (optional)

    Returns:
        Created AuditLog instance
    """
    safe_meta = to_json_safe(meta) if meta is not None else None

    with store.lock:
        audit_log = AuditLog(
            id=store.next_id("a"),
            actor_id=actor_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            meta=safe_meta,
            created_at=now_utc(),
        )
        store.audit_logs[audit_log.id] = audit_log
    return audit_log


def list_audit_logs(
    store: LeaveStore,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
) -> List[AuditLog]:
    """Audit entries in creation order, optionally filtered by entity."""
    logs = list(store.audit_logs.values())
    if entity_type is not None:
        logs = [log for log in logs if log.entity_type == entity_type]
    if entity_id is not None:
        logs = [log for log in logs if log.entity_id == entity_id]
    return logs
