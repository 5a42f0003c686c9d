"""
Tests for health endpoint, endpoint wiring and error envelope
"""
import inspect

from fastapi.routing import APIRoute

from leaveflow.core.constants import SERVICE_NAME
from leaveflow.core.deps import get_current_user
from leaveflow.main import app


def test_health_endpoint(client):
    """Health endpoint returns service status"""
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["service"] == SERVICE_NAME


def test_unknown_user_header_rejected(client):
    response = client.get("/api/v1/leaves/my", headers={"X-User-Id": "nobody"})

    assert response.status_code == 401
    body = response.json()
    assert body["error"] is True
    assert body["path"] == "/api/v1/leaves/my"


def test_missing_user_header_is_validation_error(client):
    response = client.get("/api/v1/leaves/my")

    assert response.status_code == 422
    assert response.json()["kind"] == "request_validation"


def test_workflow_errors_carry_kind(client):
    response = client.get("/api/v1/leaves/l999", headers={"X-User-Id": "u1"})

    assert response.status_code == 404
    assert response.json()["kind"] == "not_found"


def test_store_endpoints_are_sync():
    """Endpoints that take the store lock run in the threadpool, not on the event loop"""
    store_routes = [
        route for route in app.routes
        if isinstance(route, APIRoute) and route.path != "/api/v1/health"
    ]

    assert store_routes
    for route in store_routes:
        assert not inspect.iscoroutinefunction(route.endpoint), route.path
    assert not inspect.iscoroutinefunction(get_current_user)
