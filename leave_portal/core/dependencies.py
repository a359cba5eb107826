from typing import AsyncGenerator

from fastapi import Depends, Request

from leave_portal.core.routing import RouteRedirect, SessionLoading, resolve_route
from leave_portal.core.session import SessionContext, TokenStore
from leave_portal.schemas.users import User
from leave_portal.services.api_client import LeaveAPIClient


def get_token_store(request: Request) -> TokenStore:
    token_store = getattr(request.state, "token_store", None)
    if token_store is None:
        token_store = TokenStore()
        request.state.token_store = token_store
    return token_store


async def get_api_client(
    request: Request,
    token_store: TokenStore = Depends(get_token_store),
) -> AsyncGenerator[LeaveAPIClient, None]:
    # Tests swap the backend out by setting app.state.api_transport.
    transport = getattr(request.app.state, "api_transport", None)
    async with LeaveAPIClient(token_store, transport=transport) as client:
        yield client


async def get_session(
    client: LeaveAPIClient = Depends(get_api_client),
    token_store: TokenStore = Depends(get_token_store),
) -> SessionContext:
    session = SessionContext(client, token_store)
    await session.initialize()
    return session


async def guard_route(
    request: Request,
    session: SessionContext = Depends(get_session),
) -> SessionContext:
    """Apply the routing state machine to the current path."""
    role = session.user.role if session.user else None
    decision = resolve_route(session.auth_state, role, request.url.path)
    if decision.redirect_to is not None:
        raise RouteRedirect(decision.redirect_to)
    if decision.view is not None:
        raise SessionLoading(request.url.path)
    return session


async def get_current_user(
    session: SessionContext = Depends(guard_route),
) -> User:
    if session.user is None:
        raise RouteRedirect("/login")
    return session.user
