"""Client for the leave-management backend REST API.

One coroutine per backend operation. Every call carries the session's bearer
token when one is stored. Failures are raised as ``APIError`` subclasses so
that pages can decide how to present them; a 401 on an authenticated call
also fires the ``on_unauthorized`` callback so the owning session can drop
its token.
"""

import logging
from typing import Any, Callable, Optional, Protocol, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as SchemaValidationError

from leave_portal.core.config import settings
from leave_portal.schemas.holidays import Holiday, HolidayCreate, HolidayUpdate
from leave_portal.schemas.leave import (
    LeaveBalance,
    LeaveRequest,
    LeaveRequestCreate,
    LeaveRequestUpdate,
    LeaveType,
    LeaveTypeCreate,
    LeaveTypeUpdate,
    ReviewDecision,
)
from leave_portal.schemas.users import LoginResponse, User, UserCreate, UserUpdate

logger = logging.getLogger(__name__)


# ── Errors ────────────────────────────────────────────────────────────────────


class APIError(Exception):
    """A failed backend call. ``message`` is safe to show to the user."""

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message or "Backend request failed")
        self.message = message
        self.status_code = status_code


class NetworkError(APIError):
    pass


class ValidationError(APIError):
    pass


class AuthorizationError(APIError):
    pass


class ServerError(APIError):
    pass


class AuthenticationError(APIError):
    """Login was refused: bad credentials or an inactive account."""


def _error_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    message = body.get("message") or body.get("detail")
    return message if isinstance(message, str) else None


ModelT = TypeVar("ModelT", bound=BaseModel)

UNEXPECTED_RESPONSE_MESSAGE = "Unexpected response from the leave service"


def _parse(model: type[ModelT], data: Any) -> ModelT:
    try:
        return model.model_validate(data)
    except SchemaValidationError as e:
        logger.error("Malformed %s in backend response: %s", model.__name__, e)
        raise ServerError(UNEXPECTED_RESPONSE_MESSAGE) from e


def _parse_list(model: type[ModelT], data: Any) -> list[ModelT]:
    if data is not None and not isinstance(data, list):
        logger.error("Expected a list of %s, got %s", model.__name__, type(data).__name__)
        raise ServerError(UNEXPECTED_RESPONSE_MESSAGE)
    return [_parse(model, item) for item in data or []]


class TokenSource(Protocol):
    def get(self) -> Optional[str]:
        ...


# ── Client ────────────────────────────────────────────────────────────────────


class LeaveAPIClient:
    def __init__(
        self,
        token_store: TokenSource,
        base_url: Optional[str] = None,
        on_unauthorized: Optional[Callable[[], None]] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.token_store = token_store
        self.on_unauthorized = on_unauthorized
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or settings.API_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def __aenter__(self) -> "LeaveAPIClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self.token_store.get()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _request(
        self, method: str, path: str, *, authenticated: bool = True, **kwargs
    ) -> Any:
        try:
            response = await self._client.request(
                method, path, headers=self._headers(), **kwargs
            )
        except httpx.HTTPError as e:
            logger.error("Backend unreachable: %s %s (%s)", method, path, e)
            raise NetworkError("Could not reach the leave service") from e

        status_code = response.status_code
        if status_code == 401 and authenticated:
            logger.warning("Unauthorized response for %s %s", method, path)
            if self.on_unauthorized is not None:
                self.on_unauthorized()
            raise AuthorizationError(_error_message(response), status_code)
        if status_code >= 500:
            logger.error("Backend error %s for %s %s", status_code, method, path)
            raise ServerError(_error_message(response), status_code)
        if status_code >= 400:
            raise ValidationError(_error_message(response), status_code)

        if status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.error("Non-JSON response for %s %s", method, path)
            raise ServerError(UNEXPECTED_RESPONSE_MESSAGE, status_code) from e

    # ── Auth ──────────────────────────────────────────────────────────────────

    async def login(self, email: str, password: str) -> LoginResponse:
        try:
            data = await self._request(
                "POST",
                "/auth/login",
                json={"email": email, "password": password},
                authenticated=False,
            )
        except ValidationError as e:
            raise AuthenticationError(
                e.message or "Invalid email or password", e.status_code
            ) from e
        return _parse(LoginResponse, data)

    async def get_current_user(self) -> User:
        return _parse(User, await self._request("GET", "/auth/me"))

    # ── Users (admin) ─────────────────────────────────────────────────────────

    async def get_users(self) -> list[User]:
        data = await self._request("GET", "/admin/users")
        return _parse_list(User, data)

    async def create_user(self, user: UserCreate) -> User:
        data = await self._request("POST", "/admin/users", json=user.to_payload())
        return _parse(User, data)

    async def update_user(self, user_id: str, changes: UserUpdate) -> User:
        data = await self._request(
            "PUT", f"/admin/users/{user_id}", json=changes.to_payload()
        )
        return _parse(User, data)

    async def delete_user(self, user_id: str) -> None:
        await self._request("DELETE", f"/admin/users/{user_id}")

    # ── Leave types (admin) ───────────────────────────────────────────────────

    async def get_leave_types(self) -> list[LeaveType]:
        data = await self._request("GET", "/admin/leave-types")
        return _parse_list(LeaveType, data)

    async def create_leave_type(self, leave_type: LeaveTypeCreate) -> LeaveType:
        data = await self._request(
            "POST", "/admin/leave-types", json=leave_type.to_payload()
        )
        return _parse(LeaveType, data)

    async def update_leave_type(
        self, leave_type_id: str, changes: LeaveTypeUpdate
    ) -> LeaveType:
        data = await self._request(
            "PUT", f"/admin/leave-types/{leave_type_id}", json=changes.to_payload()
        )
        return _parse(LeaveType, data)

    async def delete_leave_type(self, leave_type_id: str) -> None:
        await self._request("DELETE", f"/admin/leave-types/{leave_type_id}")

    # ── Holidays (admin) ──────────────────────────────────────────────────────

    async def get_holidays(self) -> list[Holiday]:
        data = await self._request("GET", "/admin/holidays")
        return _parse_list(Holiday, data)

    async def create_holiday(self, holiday: HolidayCreate) -> Holiday:
        data = await self._request("POST", "/admin/holidays", json=holiday.to_payload())
        return _parse(Holiday, data)

    async def update_holiday(self, holiday_id: str, changes: HolidayUpdate) -> Holiday:
        data = await self._request(
            "PUT", f"/admin/holidays/{holiday_id}", json=changes.to_payload()
        )
        return _parse(Holiday, data)

    async def delete_holiday(self, holiday_id: str) -> None:
        await self._request("DELETE", f"/admin/holidays/{holiday_id}")

    # ── Leave requests (employee) ─────────────────────────────────────────────

    async def get_leave_requests(self) -> list[LeaveRequest]:
        data = await self._request("GET", "/employee/requests")
        return _parse_list(LeaveRequest, data)

    async def create_leave_request(self, request: LeaveRequestCreate) -> Any:
        return await self._request(
            "POST", "/employee/requests", json=request.to_payload()
        )

    async def update_leave_request(
        self, request_id: str, changes: LeaveRequestUpdate
    ) -> Any:
        return await self._request(
            "PUT", f"/employee/requests/{request_id}", json=changes.to_payload()
        )

    async def delete_leave_request(self, request_id: str) -> None:
        await self._request("DELETE", f"/employee/requests/{request_id}")

    async def get_leave_balance(self) -> list[LeaveBalance]:
        data = await self._request("GET", "/employee/balance")
        return _parse_list(LeaveBalance, data)

    # ── Manager actions ───────────────────────────────────────────────────────

    async def get_pending_requests(self) -> list[LeaveRequest]:
        data = await self._request("GET", "/manager/pending")
        return _parse_list(LeaveRequest, data)

    async def get_request_history(self) -> list[LeaveRequest]:
        data = await self._request("GET", "/manager/history")
        return _parse_list(LeaveRequest, data)

    async def approve_request(self, request_id: str, comments: Optional[str] = None) -> Any:
        return await self._request(
            "POST",
            f"/manager/approve/{request_id}",
            json=ReviewDecision(comments=comments).to_payload(),
        )

    async def reject_request(self, request_id: str, comments: str) -> Any:
        return await self._request(
            "POST",
            f"/manager/reject/{request_id}",
            json=ReviewDecision(comments=comments).to_payload(),
        )
