"""
Main API router
"""
from fastapi import APIRouter

from leaveflow.api.v1 import (
    health,
    leaves,
    delegations,
    employees,
    holidays,
    notifications,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(leaves.router, prefix="/leaves", tags=["leaves"])
api_router.include_router(delegations.router, prefix="/delegations", tags=["delegations"])
api_router.include_router(employees.router, prefix="/employees", tags=["employees"])
api_router.include_router(holidays.router, prefix="/holidays", tags=["holidays"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
