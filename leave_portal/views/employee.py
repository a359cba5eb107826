"""Employee pages: apply for leave, balance, and own requests."""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import ValidationError as SchemaValidationError

from leave_portal.core.config import settings
from leave_portal.core.dependencies import get_api_client, get_current_user
from leave_portal.core.templating import render
from leave_portal.schemas.leave import ApplyLeaveForm, LeaveRequestCreate, LeaveType
from leave_portal.schemas.users import User
from leave_portal.services.api_client import (
    LeaveAPIClient,
    NetworkError,
    ServerError,
    ValidationError,
)
from leave_portal.services.leave_calculator import total_days
from leave_portal.views.common import fetch_or_empty, form_error

logger = logging.getLogger(__name__)

router = APIRouter(tags=["employee"])

SUBMIT_SUCCESS_MESSAGE = "Leave request submitted successfully!"
SUBMIT_FAILED_MESSAGE = "Failed to submit leave request"


async def _active_leave_types(client: LeaveAPIClient) -> list[LeaveType]:
    leave_types = await fetch_or_empty(client.get_leave_types(), "leave types")
    return [leave_type for leave_type in leave_types if leave_type.is_active]


def _render_apply(
    request: Request,
    user: User,
    leave_types: list[LeaveType],
    form: Optional[dict] = None,
    error: Optional[str] = None,
    success: Optional[str] = None,
    status_code: int = 200,
):
    form = form or {"leave_type_id": "", "start_date": "", "end_date": "", "reason": ""}
    try:
        preview = total_days(form["start_date"], form["end_date"])
    except ValueError:
        preview = 0
    return render(
        request,
        "apply.html",
        user=user,
        leave_types=leave_types,
        form=form,
        today=date.today().isoformat(),
        preview_days=preview,
        error=error,
        success=success,
        redirect_to="/requests" if success else None,
        redirect_delay=settings.REDIRECT_DELAY_SECONDS,
        status_code=status_code,
    )


@router.get("/apply")
async def apply_page(
    request: Request,
    current_user: User = Depends(get_current_user),
    client: LeaveAPIClient = Depends(get_api_client),
):
    leave_types = await _active_leave_types(client)
    return _render_apply(request, current_user, leave_types)


@router.post("/apply")
async def submit_leave_request(
    request: Request,
    leave_type_id: str = Form(""),
    start_date: str = Form(""),
    end_date: str = Form(""),
    reason: str = Form(""),
    current_user: User = Depends(get_current_user),
    client: LeaveAPIClient = Depends(get_api_client),
):
    """Submit a new leave request with its computed day count."""
    form = {
        "leave_type_id": leave_type_id,
        "start_date": start_date,
        "end_date": end_date,
        "reason": reason,
    }
    try:
        data = ApplyLeaveForm(**form)
    except SchemaValidationError as e:
        leave_types = await _active_leave_types(client)
        return _render_apply(
            request, current_user, leave_types, form, error=form_error(e), status_code=400
        )

    payload = LeaveRequestCreate(
        leave_type_id=data.leave_type_id,
        start_date=data.start_date,
        end_date=data.end_date,
        reason=data.reason,
        total_days=total_days(data.start_date, data.end_date),
    )
    try:
        await client.create_leave_request(payload)
    except (NetworkError, ServerError, ValidationError) as e:
        logger.exception("Error submitting leave request for user %s", current_user.id)
        leave_types = await _active_leave_types(client)
        return _render_apply(
            request,
            current_user,
            leave_types,
            form,
            error=e.message or SUBMIT_FAILED_MESSAGE,
            status_code=e.status_code if isinstance(e, ValidationError) else 502,
        )

    logger.info(
        "User %s submitted a %d-day leave request", current_user.id, payload.total_days
    )
    return _render_apply(request, current_user, [], success=SUBMIT_SUCCESS_MESSAGE)


@router.get("/apply/total-days")
async def preview_total_days(
    start: str = "",
    end: str = "",
    current_user: User = Depends(get_current_user),
):
    """Live day count for the apply form; 0 until both dates are chosen."""
    try:
        days = total_days(start, end)
    except ValueError:
        days = 0
    return JSONResponse({"totalDays": days})


@router.get("/balance")
async def balance_page(
    request: Request,
    current_user: User = Depends(get_current_user),
    client: LeaveAPIClient = Depends(get_api_client),
):
    balances = await fetch_or_empty(client.get_leave_balance(), "leave balance")
    return render(request, "balance.html", user=current_user, balances=balances)


async def _render_requests(
    request: Request,
    user: User,
    client: LeaveAPIClient,
    error: Optional[str] = None,
    status_code: int = 200,
):
    leave_requests = await fetch_or_empty(client.get_leave_requests(), "leave requests")
    return render(
        request,
        "requests.html",
        user=user,
        leave_requests=leave_requests,
        error=error,
        status_code=status_code,
    )


@router.get("/requests")
async def requests_page(
    request: Request,
    current_user: User = Depends(get_current_user),
    client: LeaveAPIClient = Depends(get_api_client),
):
    return await _render_requests(request, current_user, client)


@router.post("/requests/{request_id}/cancel")
async def cancel_leave_request(
    request: Request,
    request_id: str,
    current_user: User = Depends(get_current_user),
    client: LeaveAPIClient = Depends(get_api_client),
):
    """Withdraw one of the user's own pending requests."""
    try:
        await client.delete_leave_request(request_id)
    except (NetworkError, ServerError, ValidationError) as e:
        logger.exception("Error cancelling leave request %s", request_id)
        return await _render_requests(
            request,
            current_user,
            client,
            error=e.message or "Failed to cancel leave request",
            status_code=400,
        )
    return RedirectResponse("/requests", status_code=303)
