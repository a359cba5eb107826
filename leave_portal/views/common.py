import logging
from typing import Awaitable, TypeVar

from pydantic import ValidationError as SchemaValidationError

from leave_portal.services.api_client import APIError, AuthorizationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

REQUIRED_FIELDS_MESSAGE = "Please fill in all required fields"


async def fetch_or_empty(call: Awaitable[list[T]], what: str) -> list[T]:
    """Await a list read; on failure log it and show an empty list instead."""
    try:
        return await call
    except AuthorizationError:
        raise
    except APIError:
        logger.exception("Error loading %s", what)
        return []


def form_error(exc: SchemaValidationError) -> str:
    """First human-readable problem in a rejected form."""
    for error in exc.errors():
        if error["type"] == "value_error":
            return error["msg"].removeprefix("Value error, ")
    return REQUIRED_FIELDS_MESSAGE
