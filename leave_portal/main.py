import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from leave_portal.core.config import settings
from leave_portal.core.routing import LOGIN_PATH, ROOT_PATH, RouteRedirect, SessionLoading
from leave_portal.core.templating import render
from leave_portal.middleware.session_cookie import SessionCookieMiddleware
from leave_portal.services.api_client import AuthorizationError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("%s started, backend at %s", settings.APP_NAME, settings.API_BASE_URL)
    yield
    logger.info("%s stopped", settings.APP_NAME)


app = FastAPI(
    title=settings.APP_NAME,
    debug=settings.DEBUG,
    version="0.1.0",
    docs_url=None,
    redoc_url=None,
    lifespan=lifespan,
)

# Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(SessionCookieMiddleware)


# ── Exception handlers ────────────────────────────────────────────────────────


@app.exception_handler(RouteRedirect)
async def route_redirect_handler(request: Request, exc: RouteRedirect):
    return RedirectResponse(exc.location, status_code=303)


@app.exception_handler(SessionLoading)
async def session_loading_handler(request: Request, exc: SessionLoading):
    return render(request, "loading.html", retry_path=exc.path)


@app.exception_handler(AuthorizationError)
async def authorization_error_handler(request: Request, exc: AuthorizationError):
    # The session already dropped its token; the middleware deletes the cookie.
    logger.info("Session expired on %s, redirecting to login", request.url.path)
    return RedirectResponse(LOGIN_PATH, status_code=303)


@app.exception_handler(StarletteHTTPException)
async def not_found_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return RedirectResponse(ROOT_PATH, status_code=303)
    return await http_exception_handler(request, exc)


# ── Routers ───────────────────────────────────────────────────────────────────
from leave_portal.views.admin import router as admin_router  # noqa: E402
from leave_portal.views.auth import router as auth_router  # noqa: E402
from leave_portal.views.dashboard import router as dashboard_router  # noqa: E402
from leave_portal.views.employee import router as employee_router  # noqa: E402
from leave_portal.views.manager import router as manager_router  # noqa: E402

app.include_router(auth_router)
app.include_router(dashboard_router)
app.include_router(employee_router)
app.include_router(manager_router)
app.include_router(admin_router)


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": settings.APP_NAME}
