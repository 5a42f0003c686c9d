"""
User directory service - user lookup, role lookup and approver configuration
"""
import logging
from typing import List, Optional

from leaveflow.core.errors import NotFoundError, ValidationError, ConflictError
from leaveflow.db.store import LeaveStore
from leaveflow.models import Role, User
from leaveflow.services.audit_service import log_audit

logger = logging.getLogger(__name__)


def get_user(store: LeaveStore, user_id: str) -> User:
    """
    Get a user by ID

    Raises:
        NotFoundError: If the user does not exist
    """
    user = store.users.get(user_id)
    if user is None:
        raise NotFoundError(f"User with id {user_id} not found")
    return user


def list_users(store: LeaveStore, role: Optional[Role] = None) -> List[User]:
    users = list(store.users.values())
    if role is not None:
        users = [u for u in users if u.role == role]
    return users


def add_user(store: LeaveStore, user: User, actor_id: Optional[str] = None) -> User:
    """Register a user in the directory (duplicate IDs are rejected)."""
    with store.lock:
        if user.id in store.users:
            raise ConflictError(f"User with id {user.id} already exists")
        store.add_user(user)
    log_audit(store, actor_id, "USER_CREATE", "users", user.id, {"role": user.role})
    return user


def find_hr_user(store: LeaveStore, exclude: Optional[str] = None) -> Optional[User]:
    """First HR user other than `exclude` (None when no such user exists)."""
    return _first_with_role(store, lambda role: role == Role.HR, exclude)


def find_executive(store: LeaveStore, exclude: Optional[str] = None) -> Optional[User]:
    """First MD or Director other than `exclude` (None when no such user exists)."""
    return _first_with_role(store, lambda role: role.is_executive, exclude)


def _first_with_role(store: LeaveStore, predicate, exclude: Optional[str]) -> Optional[User]:
    for user in store.users.values():
        if predicate(user.role) and user.id != exclude:
            return user
    return None


def update_user_approvers(
    store: LeaveStore,
    user_id: str,
    approver_ids: List[str],
    actor_id: Optional[str] = None,
) -> User:
    """
    Replace a user's ordered sequential approver list

    Args:
        store: Leave store
        user_id: User whose approvers are configured
        approver_ids: Ordered approver IDs (empty restores the default HR path)
        actor_id: ID of the user making the change

    Returns:
        Updated User

    Raises:
        NotFoundError: If the user or an approver does not exist
        ValidationError: If the list contains the user or duplicates
    """
    with store.lock:
        user = get_user(store, user_id)
        if user_id in approver_ids:
            raise ValidationError("A user cannot be their own approver")
        if len(set(approver_ids)) != len(approver_ids):
            raise ValidationError("Approver list contains duplicates")
        for approver_id in approver_ids:
            get_user(store, approver_id)

        before = list(user.sequential_approvers)
        user.sequential_approvers = list(approver_ids)

    logger.info(
        "approvers updated: user_id=%s before=%s after=%s", user_id, before, approver_ids
    )
    log_audit(
        store,
        actor_id,
        "APPROVERS_UPDATE",
        "users",
        user_id,
        {"before": before, "after": list(approver_ids)},
    )
    return user
