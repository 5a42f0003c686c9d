"""
LeaveFlow Backend - Main Application Entry Point
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException

from leaveflow.api.router import api_router
from leaveflow.core.config import settings
from leaveflow.core.errors import (
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)
from leaveflow.core.logging import setup_logging
from leaveflow.db.init_db import seed_demo_data
from leaveflow.db.store import LeaveStore

# Setup logging first
setup_logging()
logger = logging.getLogger(__name__)


# Create FastAPI app
app = FastAPI(
    title="LeaveFlow Backend",
    description="Leave approval workflow engine: sequential approvers, delegation, balances",
    version=settings.VERSION or "1.0.0"
)

# Composition root: the one store every endpoint works against
app.state.store = LeaveStore()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register exception handlers
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Include all API routes under /api/v1
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def bootstrap_demo_data() -> None:
    """Load the demo org chart and holidays when SEED_DEMO_DATA is enabled."""
    if not settings.SEED_DEMO_DATA:
        logger.info("SEED_DEMO_DATA disabled, starting with an empty store")
        return
    seed_demo_data(app.state.store)
