"""
Dependencies and guards for FastAPI endpoints
"""
from fastapi import Depends, Header, HTTPException, Request, status

from leaveflow.db.store import LeaveStore
from leaveflow.models import Role, User


def get_store(request: Request) -> LeaveStore:
    """Dependency for getting the application's leave store"""
    return request.app.state.store


def get_current_user(
    x_user_id: str = Header(..., alias="X-User-Id", description="ID of the acting user"),
    store: LeaveStore = Depends(get_store),
) -> User:
    """
    Resolve the acting user from the X-User-Id header

    This selects an identity; it does not authenticate it.
    """
    user = store.users.get(x_user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Unknown user {x_user_id}",
        )
    return user


def require_roles(*allowed_roles: Role):
    """
    Dependency factory for role-based access control

    Usage:
        @router.post("/holidays")
        def create(user: User = Depends(require_roles(Role.HR))):
            ...
    """
    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required roles: {[r.value for r in allowed_roles]}"
            )
        return current_user
    return role_checker
