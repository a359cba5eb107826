"""Which page a visitor gets, given their auth state and role.

Routing is a small state machine: unauthenticated visitors only reach the
login page, a session still resolving its user gets the loading page, and an
authenticated user reaches the dashboard plus the sections of their role.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from leave_portal.schemas.users import Role

LOGIN_PATH = "/login"
ROOT_PATH = "/"
LOADING_VIEW = "loading"

COMMON_PATHS = ("/", "/logout")

ROLE_SECTIONS: dict[Role, tuple[str, ...]] = {
    Role.EMPLOYEE: ("/apply", "/balance", "/requests"),
    Role.MANAGER: ("/manager/pending", "/manager/history"),
    Role.ADMIN: ("/admin/users", "/admin/leave-types", "/admin/holidays"),
}

SECTION_LABELS = {
    "/apply": "Apply Leave",
    "/balance": "Leave Balance",
    "/requests": "My Requests",
    "/manager/pending": "Pending Requests",
    "/manager/history": "Request History",
    "/admin/users": "Users",
    "/admin/leave-types": "Leave Types",
    "/admin/holidays": "Holidays",
}


class AuthState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class RouteDecision:
    redirect_to: Optional[str] = None
    view: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.redirect_to is None and self.view is None


class RouteRedirect(Exception):
    """Raised by the route guard; handled by turning it into a redirect."""

    def __init__(self, location: str):
        super().__init__(location)
        self.location = location


class SessionLoading(Exception):
    """Raised while the session has not resolved its user yet."""

    def __init__(self, path: str):
        super().__init__(path)
        self.path = path


def sections_for(role: Role) -> tuple[str, ...]:
    try:
        return ROLE_SECTIONS[role]
    except KeyError:
        raise ValueError(f"No route sections registered for role '{role}'")


def _in_section(path: str, section: str) -> bool:
    return path == section or path.startswith(section + "/")


def resolve_route(state: AuthState, role: Optional[Role], path: str) -> RouteDecision:
    if state is AuthState.AUTHENTICATING:
        return RouteDecision(view=LOADING_VIEW)

    if state is AuthState.UNAUTHENTICATED or role is None:
        if path == LOGIN_PATH:
            return RouteDecision()
        return RouteDecision(redirect_to=LOGIN_PATH)

    if path == LOGIN_PATH:
        return RouteDecision(redirect_to=ROOT_PATH)
    if path in COMMON_PATHS:
        return RouteDecision()
    if any(_in_section(path, section) for section in sections_for(role)):
        return RouteDecision()
    return RouteDecision(redirect_to=ROOT_PATH)
