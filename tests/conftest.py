import json
from typing import Any, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from leave_portal.core.session import TokenStore
from leave_portal.main import app
from leave_portal.services.api_client import LeaveAPIClient

BASE_URL = "http://backend.test"

EMPLOYEE = {
    "id": "u-emp",
    "email": "emily.johnson@example.com",
    "firstName": "Emily",
    "lastName": "Johnson",
    "role": "employee",
    "department": "Engineering",
    "joinDate": "2024-03-10",
    "isActive": True,
}
MANAGER = {
    "id": "u-mgr",
    "email": "michael.roberts@example.com",
    "firstName": "Michael",
    "lastName": "Roberts",
    "role": "manager",
    "department": "Engineering",
    "joinDate": "2024-02-01",
    "isActive": True,
}
ADMIN = {
    "id": "u-adm",
    "email": "sarah.chen@example.com",
    "firstName": "Sarah",
    "lastName": "Chen",
    "role": "admin",
    "department": "Executive",
    "joinDate": "2024-01-15",
    "isActive": True,
}

TOKENS = {"emp-token": EMPLOYEE, "mgr-token": MANAGER, "adm-token": ADMIN}


def make_request(request_id: str, status: str = "pending", **overrides) -> dict:
    data = {
        "id": request_id,
        "employeeId": "u-emp",
        "employeeName": "Emily Johnson",
        "leaveTypeId": "lt-annual",
        "leaveTypeName": "Annual Leave",
        "startDate": "2024-03-01",
        "endDate": "2024-03-03",
        "totalDays": 3,
        "reason": "trip",
        "status": status,
        "appliedDate": "2024-02-20T09:30:00Z",
    }
    data.update(overrides)
    return data


def make_balance(leave_type_id: str, name: str, total: float, used: float) -> dict:
    return {
        "leaveTypeId": leave_type_id,
        "leaveTypeName": name,
        "totalDays": total,
        "usedDays": used,
        "remainingDays": total - used,
    }


class FakeBackend:
    """In-memory stand-in for the leave REST API, served through MockTransport."""

    def __init__(self):
        self.routes: dict[tuple[str, str], Any] = {}
        self.calls: list[httpx.Request] = []

    def add(self, method: str, path: str, json_body: Any = None, status_code: int = 200):
        self.routes[(method, path)] = (status_code, json_body)

    def fail(self, method: str, path: str, exc: Optional[Exception] = None):
        self.routes[(method, path)] = exc or httpx.ConnectError("connection refused")

    def calls_to(self, method: str, path: str) -> list[httpx.Request]:
        return [c for c in self.calls if c.method == method and c.url.path == path]

    def json_sent(self, method: str, path: str) -> list[Any]:
        return [json.loads(c.content) for c in self.calls_to(method, path)]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        key = (request.method, request.url.path)
        if key == ("GET", "/auth/me") and key not in self.routes:
            token = request.headers.get("authorization", "").removeprefix("Bearer ")
            if token in TOKENS:
                return httpx.Response(200, json=TOKENS[token])
            return httpx.Response(401, json={"detail": "Invalid token"})
        route = self.routes.get(key)
        if route is None:
            return httpx.Response(404, json={"message": "Not found"})
        if isinstance(route, Exception):
            if isinstance(route, httpx.RequestError):
                route.request = request
            raise route
        status_code, body = route
        if body is None:
            return httpx.Response(status_code)
        return httpx.Response(status_code, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def token_store() -> TokenStore:
    return TokenStore("emp-token")


@pytest.fixture
async def api_client(backend, token_store):
    async with LeaveAPIClient(token_store, base_url=BASE_URL, transport=backend.transport) as client:
        yield client


@pytest.fixture
def client(backend):
    app.state.api_transport = backend.transport
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client
    app.state.api_transport = None


def sign_in(test_client: TestClient, token: str) -> None:
    test_client.cookies.set("token", token)
