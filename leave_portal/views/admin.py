"""Admin pages for users, leave types and holidays.

Each page lists the records and offers a create form plus per-row actions.
Actions redirect back to the list on success and re-render it with the
error otherwise.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse
from pydantic import ValidationError as SchemaValidationError

from leave_portal.core.dependencies import get_api_client, get_current_user
from leave_portal.core.templating import render
from leave_portal.schemas.holidays import HolidayCreate
from leave_portal.schemas.leave import LeaveTypeCreate, LeaveTypeUpdate
from leave_portal.schemas.users import Role, User, UserCreate, UserUpdate
from leave_portal.services.api_client import (
    LeaveAPIClient,
    NetworkError,
    ServerError,
    ValidationError,
)
from leave_portal.views.common import fetch_or_empty, form_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

BackendFailure = (NetworkError, ServerError, ValidationError)


# ── Users ─────────────────────────────────────────────────────────────────────


async def _render_users(
    request: Request,
    user: User,
    client: LeaveAPIClient,
    error: Optional[str] = None,
    status_code: int = 200,
):
    users = await fetch_or_empty(client.get_users(), "users")
    return render(
        request,
        "admin_users.html",
        user=user,
        users=users,
        roles=list(Role),
        error=error,
        status_code=status_code,
    )


@router.get("/users")
async def users_page(
    request: Request,
    current_user: User = Depends(get_current_user),
    client: LeaveAPIClient = Depends(get_api_client),
):
    return await _render_users(request, current_user, client)


@router.post("/users")
async def create_user(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    first_name: str = Form(""),
    last_name: str = Form(""),
    role: str = Form(Role.EMPLOYEE.value),
    department: str = Form(""),
    join_date: str = Form(""),
    current_user: User = Depends(get_current_user),
    client: LeaveAPIClient = Depends(get_api_client),
):
    try:
        new_user = UserCreate(
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            role=role,
            department=department or None,
            join_date=join_date or None,
        )
    except SchemaValidationError as e:
        return await _render_users(
            request, current_user, client, error=form_error(e), status_code=400
        )
    try:
        created = await client.create_user(new_user)
    except BackendFailure as e:
        logger.exception("Error creating user %s", email)
        return await _render_users(
            request,
            current_user,
            client,
            error=e.message or "Failed to create user",
            status_code=400,
        )
    logger.info("Admin %s created user %s", current_user.id, created.id)
    return RedirectResponse("/admin/users", status_code=303)


@router.post("/users/{user_id}/toggle")
async def toggle_user(
    request: Request,
    user_id: str,
    is_active: bool = Form(...),
    current_user: User = Depends(get_current_user),
    client: LeaveAPIClient = Depends(get_api_client),
):
    """Activate or deactivate an account."""
    try:
        await client.update_user(user_id, UserUpdate(is_active=is_active))
    except BackendFailure as e:
        logger.exception("Error updating user %s", user_id)
        return await _render_users(
            request,
            current_user,
            client,
            error=e.message or "Failed to update user",
            status_code=400,
        )
    return RedirectResponse("/admin/users", status_code=303)


@router.post("/users/{user_id}/delete")
async def delete_user(
    request: Request,
    user_id: str,
    current_user: User = Depends(get_current_user),
    client: LeaveAPIClient = Depends(get_api_client),
):
    try:
        await client.delete_user(user_id)
    except BackendFailure as e:
        logger.exception("Error deleting user %s", user_id)
        return await _render_users(
            request,
            current_user,
            client,
            error=e.message or "Failed to delete user",
            status_code=400,
        )
    logger.info("Admin %s deleted user %s", current_user.id, user_id)
    return RedirectResponse("/admin/users", status_code=303)


# ── Leave types ───────────────────────────────────────────────────────────────


async def _render_leave_types(
    request: Request,
    user: User,
    client: LeaveAPIClient,
    error: Optional[str] = None,
    status_code: int = 200,
):
    leave_types = await fetch_or_empty(client.get_leave_types(), "leave types")
    return render(
        request,
        "admin_leave_types.html",
        user=user,
        leave_types=leave_types,
        error=error,
        status_code=status_code,
    )


@router.get("/leave-types")
async def leave_types_page(
    request: Request,
    current_user: User = Depends(get_current_user),
    client: LeaveAPIClient = Depends(get_api_client),
):
    return await _render_leave_types(request, current_user, client)


@router.post("/leave-types")
async def create_leave_type(
    request: Request,
    name: str = Form(""),
    days_allowed: str = Form(""),
    description: str = Form(""),
    current_user: User = Depends(get_current_user),
    client: LeaveAPIClient = Depends(get_api_client),
):
    try:
        leave_type = LeaveTypeCreate(
            name=name, days_allowed=days_allowed, description=description
        )
    except SchemaValidationError as e:
        return await _render_leave_types(
            request, current_user, client, error=form_error(e), status_code=400
        )
    try:
        await client.create_leave_type(leave_type)
    except BackendFailure as e:
        logger.exception("Error creating leave type %s", name)
        return await _render_leave_types(
            request,
            current_user,
            client,
            error=e.message or "Failed to create leave type",
            status_code=400,
        )
    return RedirectResponse("/admin/leave-types", status_code=303)


@router.post("/leave-types/{leave_type_id}/toggle")
async def toggle_leave_type(
    request: Request,
    leave_type_id: str,
    is_active: bool = Form(...),
    current_user: User = Depends(get_current_user),
    client: LeaveAPIClient = Depends(get_api_client),
):
    """Offer or withdraw a leave type from the apply form."""
    try:
        await client.update_leave_type(leave_type_id, LeaveTypeUpdate(is_active=is_active))
    except BackendFailure as e:
        logger.exception("Error updating leave type %s", leave_type_id)
        return await _render_leave_types(
            request,
            current_user,
            client,
            error=e.message or "Failed to update leave type",
            status_code=400,
        )
    return RedirectResponse("/admin/leave-types", status_code=303)


@router.post("/leave-types/{leave_type_id}/delete")
async def delete_leave_type(
    request: Request,
    leave_type_id: str,
    current_user: User = Depends(get_current_user),
    client: LeaveAPIClient = Depends(get_api_client),
):
    try:
        await client.delete_leave_type(leave_type_id)
    except BackendFailure as e:
        logger.exception("Error deleting leave type %s", leave_type_id)
        return await _render_leave_types(
            request,
            current_user,
            client,
            error=e.message or "Failed to delete leave type",
            status_code=400,
        )
    return RedirectResponse("/admin/leave-types", status_code=303)


# ── Holidays ──────────────────────────────────────────────────────────────────


async def _render_holidays(
    request: Request,
    user: User,
    client: LeaveAPIClient,
    error: Optional[str] = None,
    status_code: int = 200,
):
    holidays = await fetch_or_empty(client.get_holidays(), "holidays")
    return render(
        request,
        "admin_holidays.html",
        user=user,
        holidays=sorted(holidays, key=lambda h: h.holiday_date),
        error=error,
        status_code=status_code,
    )


@router.get("/holidays")
async def holidays_page(
    request: Request,
    current_user: User = Depends(get_current_user),
    client: LeaveAPIClient = Depends(get_api_client),
):
    return await _render_holidays(request, current_user, client)


@router.post("/holidays")
async def create_holiday(
    request: Request,
    name: str = Form(""),
    holiday_date: str = Form(""),
    description: str = Form(""),
    current_user: User = Depends(get_current_user),
    client: LeaveAPIClient = Depends(get_api_client),
):
    try:
        holiday = HolidayCreate(name=name, holiday_date=holiday_date, description=description)
    except SchemaValidationError as e:
        return await _render_holidays(
            request, current_user, client, error=form_error(e), status_code=400
        )
    try:
        await client.create_holiday(holiday)
    except BackendFailure as e:
        logger.exception("Error creating holiday %s", name)
        return await _render_holidays(
            request,
            current_user,
            client,
            error=e.message or "Failed to create holiday",
            status_code=400,
        )
    return RedirectResponse("/admin/holidays", status_code=303)


@router.post("/holidays/{holiday_id}/delete")
async def delete_holiday(
    request: Request,
    holiday_id: str,
    current_user: User = Depends(get_current_user),
    client: LeaveAPIClient = Depends(get_api_client),
):
    try:
        await client.delete_holiday(holiday_id)
    except BackendFailure as e:
        logger.exception("Error deleting holiday %s", holiday_id)
        return await _render_holidays(
            request,
            current_user,
            client,
            error=e.message or "Failed to delete holiday",
            status_code=400,
        )
    return RedirectResponse("/admin/holidays", status_code=303)
