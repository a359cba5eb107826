import pytest

from leave_portal.schemas.users import Role, User
from leave_portal.services.api_client import AuthorizationError
from leave_portal.services.dashboard import DASHBOARD_LOADERS, load_dashboard

from tests.conftest import ADMIN, EMPLOYEE, MANAGER, make_balance, make_request


def test_every_role_has_a_loader():
    assert set(DASHBOARD_LOADERS) == set(Role)


async def test_employee_dashboard_slices_recent_requests(api_client, backend):
    backend.add("GET", "/employee/requests", [make_request(f"r-{i}") for i in range(8)])
    backend.add("GET", "/employee/balance", [
        make_balance("lt-annual", "Annual Leave", 20, 5),
        make_balance("lt-sick", "Sick Leave", 10, 8),
    ])

    data = await load_dashboard(api_client, User.model_validate(EMPLOYEE))

    assert [r.id for r in data.recent_requests] == [f"r-{i}" for i in range(5)]
    assert data.total_remaining_days == 17
    assert data.recent_pending_count == 5


async def test_employee_dashboard_is_all_or_nothing(api_client, backend):
    backend.add("GET", "/employee/requests", [make_request("r-1")])
    backend.add("GET", "/employee/balance", {"message": "boom"}, status_code=500)

    data = await load_dashboard(api_client, User.model_validate(EMPLOYEE))

    assert data.recent_requests == []
    assert data.balances == []


async def test_manager_pending_count_ignores_history(api_client, backend):
    backend.add("GET", "/manager/pending", [make_request(f"p-{i}") for i in range(4)])
    backend.add("GET", "/manager/history", [
        make_request(f"h-{i}", status="approved") for i in range(7)
    ])

    data = await load_dashboard(api_client, User.model_validate(MANAGER))

    assert data.pending_count == 4
    assert len(data.recent_requests) == 5
    assert data.recent_approved_count == 5
    assert [r.id for r in data.pending_preview] == ["p-0", "p-1", "p-2"]
    assert data.pending_overflow == 1


async def test_admin_dashboard_makes_no_calls(api_client, backend):
    data = await load_dashboard(api_client, User.model_validate(ADMIN))

    assert data.role is Role.ADMIN
    assert backend.calls == []


async def test_unauthorized_is_not_swallowed(api_client, backend):
    backend.add("GET", "/manager/pending", {"detail": "expired"}, status_code=401)
    backend.add("GET", "/manager/history", [])

    with pytest.raises(AuthorizationError):
        await load_dashboard(api_client, User.model_validate(MANAGER))
