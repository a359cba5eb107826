from fastapi import APIRouter, Depends, Request

from leave_portal.core.dependencies import get_api_client, get_current_user
from leave_portal.core.templating import render
from leave_portal.schemas.users import User
from leave_portal.services.api_client import LeaveAPIClient
from leave_portal.services.dashboard import load_dashboard

router = APIRouter(tags=["dashboard"])


@router.get("/")
async def dashboard(
    request: Request,
    current_user: User = Depends(get_current_user),
    client: LeaveAPIClient = Depends(get_api_client),
):
    """Role-specific landing page."""
    data = await load_dashboard(client, current_user)
    return render(request, "dashboard.html", user=current_user, data=data)
