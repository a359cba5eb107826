"""Per-browser session state.

``TokenStore`` holds the bearer token read from the session cookie and
remembers whether it changed so the cookie can be rewritten on the way out.
``SessionContext`` owns the current user and is the only thing that mutates
the token: on login, on logout, and when the API client reports a 401.
"""

import logging
from typing import Optional

from leave_portal.core.routing import AuthState
from leave_portal.schemas.users import User
from leave_portal.services.api_client import APIError, LeaveAPIClient

logger = logging.getLogger(__name__)


class TokenStore:
    def __init__(self, token: Optional[str] = None):
        self._token = token or None
        self.changed = False

    def get(self) -> Optional[str]:
        return self._token

    def set(self, token: str) -> None:
        self._token = token
        self.changed = True

    def clear(self) -> None:
        if self._token is not None:
            self._token = None
            self.changed = True


class SessionContext:
    def __init__(self, client: LeaveAPIClient, token_store: TokenStore):
        self.client = client
        self.token_store = token_store
        self.user: Optional[User] = None
        self.is_loading = True
        client.on_unauthorized = self.handle_unauthorized

    @property
    def auth_state(self) -> AuthState:
        if self.is_loading:
            return AuthState.AUTHENTICATING
        if self.user is None:
            return AuthState.UNAUTHENTICATED
        return AuthState.AUTHENTICATED

    async def initialize(self) -> None:
        """Resolve the user behind a stored token, dropping the token if stale."""
        try:
            if self.token_store.get():
                try:
                    self.user = await self.client.get_current_user()
                except APIError as e:
                    logger.info("Stored token rejected, clearing session: %s", e)
                    self.token_store.clear()
                    self.user = None
        finally:
            self.is_loading = False

    async def login(self, email: str, password: str) -> User:
        result = await self.client.login(email, password)
        self.token_store.set(result.token)
        self.user = await self.client.get_current_user()
        self.is_loading = False
        logger.info("User %s logged in as %s", self.user.id, self.user.role.value)
        return self.user

    def logout(self) -> None:
        if self.user is not None:
            logger.info("User %s logged out", self.user.id)
        self.token_store.clear()
        self.user = None

    def handle_unauthorized(self) -> None:
        self.token_store.clear()
        self.user = None
