"""Manager pages: pending approvals and review history."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse

from leave_portal.core.dependencies import get_api_client, get_current_user
from leave_portal.core.templating import render
from leave_portal.schemas.users import User
from leave_portal.services.api_client import (
    LeaveAPIClient,
    NetworkError,
    ServerError,
    ValidationError,
)
from leave_portal.views.common import fetch_or_empty

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/manager", tags=["manager"])


async def _render_pending(
    request: Request,
    user: User,
    client: LeaveAPIClient,
    error: Optional[str] = None,
    status_code: int = 200,
):
    pending = await fetch_or_empty(client.get_pending_requests(), "pending requests")
    return render(
        request,
        "manager_pending.html",
        user=user,
        pending_requests=pending,
        error=error,
        status_code=status_code,
    )


@router.get("/pending")
async def pending_page(
    request: Request,
    current_user: User = Depends(get_current_user),
    client: LeaveAPIClient = Depends(get_api_client),
):
    return await _render_pending(request, current_user, client)


@router.post("/pending/{request_id}/approve")
async def approve_request(
    request: Request,
    request_id: str,
    comments: str = Form(""),
    current_user: User = Depends(get_current_user),
    client: LeaveAPIClient = Depends(get_api_client),
):
    try:
        await client.approve_request(request_id, comments.strip() or None)
    except (NetworkError, ServerError, ValidationError) as e:
        logger.exception("Error approving leave request %s", request_id)
        return await _render_pending(
            request,
            current_user,
            client,
            error=e.message or "Failed to approve leave request",
            status_code=400,
        )
    logger.info("Manager %s approved leave request %s", current_user.id, request_id)
    return RedirectResponse("/manager/pending", status_code=303)


@router.post("/pending/{request_id}/reject")
async def reject_request(
    request: Request,
    request_id: str,
    comments: str = Form(""),
    current_user: User = Depends(get_current_user),
    client: LeaveAPIClient = Depends(get_api_client),
):
    """Reject a pending request. A comment explaining why is required."""
    if not comments.strip():
        return await _render_pending(
            request,
            current_user,
            client,
            error="Comments are required to reject a request",
            status_code=400,
        )
    try:
        await client.reject_request(request_id, comments.strip())
    except (NetworkError, ServerError, ValidationError) as e:
        logger.exception("Error rejecting leave request %s", request_id)
        return await _render_pending(
            request,
            current_user,
            client,
            error=e.message or "Failed to reject leave request",
            status_code=400,
        )
    logger.info("Manager %s rejected leave request %s", current_user.id, request_id)
    return RedirectResponse("/manager/pending", status_code=303)


@router.get("/history")
async def history_page(
    request: Request,
    current_user: User = Depends(get_current_user),
    client: LeaveAPIClient = Depends(get_api_client),
):
    history = await fetch_or_empty(client.get_request_history(), "request history")
    return render(request, "manager_history.html", user=current_user, history=history)
