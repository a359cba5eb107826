"""Data behind the role-specific dashboard.

Each role has a loader. Paired reads run concurrently and are applied
together: if either fails the failure is logged and both lists stay empty.
A 401 is not swallowed here; it is handled globally by redirecting to login.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable

from leave_portal.core.config import settings
from leave_portal.schemas.leave import LeaveBalance, LeaveRequest, LeaveStatus
from leave_portal.schemas.users import Role, User
from leave_portal.services.api_client import APIError, AuthorizationError, LeaveAPIClient

logger = logging.getLogger(__name__)


@dataclass
class DashboardData:
    role: Role
    recent_requests: list[LeaveRequest] = field(default_factory=list)
    balances: list[LeaveBalance] = field(default_factory=list)
    pending_requests: list[LeaveRequest] = field(default_factory=list)

    @property
    def total_remaining_days(self) -> float:
        return sum(balance.remaining_days for balance in self.balances)

    @property
    def recent_pending_count(self) -> int:
        return sum(1 for r in self.recent_requests if r.status is LeaveStatus.PENDING)

    @property
    def recent_approved_count(self) -> int:
        return sum(1 for r in self.recent_requests if r.status is LeaveStatus.APPROVED)

    @property
    def pending_count(self) -> int:
        return len(self.pending_requests)

    @property
    def pending_preview(self) -> list[LeaveRequest]:
        return self.pending_requests[: settings.PENDING_PREVIEW_LIMIT]

    @property
    def pending_overflow(self) -> int:
        return max(self.pending_count - settings.PENDING_PREVIEW_LIMIT, 0)


async def fetch_pair(first: Awaitable, second: Awaitable) -> tuple:
    """Await two reads concurrently; raise the first failure if any."""
    results = await asyncio.gather(first, second, return_exceptions=True)
    errors = [r for r in results if isinstance(r, BaseException)]
    for error in errors:
        if isinstance(error, AuthorizationError):
            raise error
    if errors:
        raise errors[0]
    return tuple(results)


async def _load_employee(client: LeaveAPIClient, data: DashboardData) -> None:
    requests, balances = await fetch_pair(
        client.get_leave_requests(), client.get_leave_balance()
    )
    data.recent_requests = requests[: settings.RECENT_REQUESTS_LIMIT]
    data.balances = balances


async def _load_manager(client: LeaveAPIClient, data: DashboardData) -> None:
    pending, history = await fetch_pair(
        client.get_pending_requests(), client.get_request_history()
    )
    data.pending_requests = pending
    data.recent_requests = history[: settings.RECENT_REQUESTS_LIMIT]


async def _load_admin(client: LeaveAPIClient, data: DashboardData) -> None:
    return None


DASHBOARD_LOADERS: dict[Role, Callable[[LeaveAPIClient, DashboardData], Awaitable[None]]] = {
    Role.EMPLOYEE: _load_employee,
    Role.MANAGER: _load_manager,
    Role.ADMIN: _load_admin,
}


async def load_dashboard(client: LeaveAPIClient, user: User) -> DashboardData:
    data = DashboardData(role=user.role)
    loader = DASHBOARD_LOADERS[user.role]
    try:
        await loader(client, data)
    except AuthorizationError:
        raise
    except APIError:
        logger.exception("Error loading dashboard data for user %s", user.id)
    return data
