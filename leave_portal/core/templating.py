from datetime import date
from pathlib import Path
from typing import Any, Optional

from fastapi import Request
from fastapi.templating import Jinja2Templates

from leave_portal.core.config import settings
from leave_portal.core.routing import SECTION_LABELS, sections_for
from leave_portal.schemas.users import User
from leave_portal.services.leave_calculator import (
    bar_width,
    classify_balance,
    usage_percent,
)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def format_days(value: float) -> str:
    """Render 10.0 as "10" and 2.5 as "2.5"."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def format_date(value: Optional[date]) -> str:
    if value is None:
        return ""
    return value.strftime("%d %b %Y")


templates.env.filters["days"] = format_days
templates.env.filters["date"] = format_date
templates.env.globals.update(
    app_name=settings.APP_NAME,
    usage_percent=usage_percent,
    bar_width=bar_width,
    classify_balance=classify_balance,
)


def render(
    request: Request,
    name: str,
    user: Optional[User] = None,
    status_code: int = 200,
    **context: Any,
):
    nav = []
    if user is not None:
        nav = [(path, SECTION_LABELS[path]) for path in sections_for(user.role)]
    return templates.TemplateResponse(
        request,
        name,
        {"user": user, "nav": nav, **context},
        status_code=status_code,
    )
