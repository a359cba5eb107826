"""Session cookie middleware.

Reads the bearer token from the session cookie on every request and exposes
it as a ``TokenStore`` on ``request.state``. Whatever the request does to the
token (login, logout, a 401 from the backend) is written back to the cookie
on the response.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from leave_portal.core.config import settings
from leave_portal.core.session import TokenStore


class SessionCookieMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        token_store = TokenStore(request.cookies.get(settings.TOKEN_COOKIE_NAME))
        request.state.token_store = token_store

        response = await call_next(request)

        if token_store.changed:
            token = token_store.get()
            if token:
                response.set_cookie(
                    settings.TOKEN_COOKIE_NAME,
                    token,
                    max_age=settings.TOKEN_COOKIE_MAX_AGE,
                    httponly=True,
                    secure=settings.TOKEN_COOKIE_SECURE,
                    samesite="lax",
                )
            else:
                response.delete_cookie(settings.TOKEN_COOKIE_NAME)
        return response
