"""
Pytest configuration and fixtures
"""
import pytest
from fastapi.testclient import TestClient

from leaveflow.core.deps import get_store
from leaveflow.db.init_db import seed_users
from leaveflow.db.store import LeaveStore
from leaveflow.main import app


@pytest.fixture(scope="function")
def store():
    """
    Fresh store per test with the demo org chart:

    u1 Employee (approvers u2), u2 TeamLead (approvers u3), u3 Manager,
    u4 HR, u5 MD, u6 Director, u7 Employee (default path).
    Weekend is Friday/Saturday; no holidays.
    """
    leave_store = LeaveStore(weekend_days=[5, 6])
    seed_users(leave_store)
    return leave_store


@pytest.fixture(scope="function")
def client(store):
    """Test client fixture with store override"""
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
