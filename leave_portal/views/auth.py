"""Login and logout pages."""

import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse
from pydantic import ValidationError as SchemaValidationError

from leave_portal.core.dependencies import get_session, guard_route
from leave_portal.core.session import SessionContext
from leave_portal.core.templating import render
from leave_portal.schemas.users import LoginRequest
from leave_portal.services.api_client import (
    AuthenticationError,
    NetworkError,
    ServerError,
    ValidationError,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.get("/login")
async def login_page(request: Request, session: SessionContext = Depends(guard_route)):
    return render(request, "login.html", email="", error=None)


@router.post("/login")
async def login(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    session: SessionContext = Depends(guard_route),
):
    try:
        credentials = LoginRequest(email=email, password=password)
    except SchemaValidationError:
        return render(
            request,
            "login.html",
            email=email,
            error="Enter a valid email address and password",
            status_code=400,
        )

    try:
        await session.login(credentials.email, credentials.password)
    except AuthenticationError as e:
        error = e.message or "Invalid email or password"
    except (NetworkError, ServerError, ValidationError) as e:
        logger.exception("Login failed for %s", email)
        error = e.message or "Login failed. Please try again."
    else:
        return RedirectResponse("/", status_code=303)

    return render(request, "login.html", email=email, error=error, status_code=401)


@router.post("/logout")
async def logout(session: SessionContext = Depends(get_session)):
    session.logout()
    return RedirectResponse("/login", status_code=303)
