"""
Access gate middleware.

Runs before every route:
- public paths pass through whatever the session state
- unauthenticated page requests are redirected to /login, API requests get 401
- authenticated users hitting /login or /signup are sent to /dashboard

Webhook paths are public because their callers have no user session; each
webhook authenticates its caller itself.
"""

import logging
from collections.abc import Awaitable, Callable

from fastapi import status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response
from starlette.types import ASGIApp

from calltech.config.settings import Settings, get_settings
from calltech.errors import error_response, internal_error_response
from calltech.middleware.session import SessionResolver

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"
SIGNUP_PATH = "/signup"
DASHBOARD_PATH = "/dashboard"
API_PREFIX = "/api/"


class AccessGateMiddleware(BaseHTTPMiddleware):
    """
    Per-request authentication checkpoint.

    The resolved identity (or None) is stored on ``request.state.identity``
    for the route dependencies.
    """

    # Matched exactly
    PUBLIC_EXACT_PATHS: tuple[str, ...] = ("/",)

    # Matched as prefixes
    PUBLIC_PATH_PREFIXES: tuple[str, ...] = (
        LOGIN_PATH,
        SIGNUP_PATH,
        "/demo",
        "/api/webhooks",
        "/api/auth/login",
        "/api/auth/signup",
        "/health",
        "/docs",
        "/redoc",
        "/openapi.json",
    )

    AUTH_PAGES: tuple[str, ...] = (LOGIN_PATH, SIGNUP_PATH)

    def __init__(self, app: ASGIApp, settings: Settings | None = None) -> None:
        super().__init__(app)
        self.resolver = SessionResolver(settings or get_settings())

    @classmethod
    def is_public_path(cls, path: str) -> bool:
        if path in cls.PUBLIC_EXACT_PATHS:
            return True
        return any(path.startswith(prefix) for prefix in cls.PUBLIC_PATH_PREFIXES)

    @classmethod
    def is_auth_page(cls, path: str) -> bool:
        return path in cls.AUTH_PAGES

    @staticmethod
    def is_api_path(path: str) -> bool:
        return path.startswith(API_PREFIX)

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        path = request.url.path
        session = self.resolver.resolve(request)
        request.state.identity = session.identity

        if not session.authenticated and not self.is_public_path(path):
            if self.is_api_path(path):
                logger.info(f"Unauthenticated API request to {path}")
                response: Response = error_response(status.HTTP_401_UNAUTHORIZED, "Unauthorized")
            else:
                response = RedirectResponse(url=LOGIN_PATH, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
            return self.resolver.apply(response, session)

        if session.authenticated and self.is_auth_page(path):
            response = RedirectResponse(url=DASHBOARD_PATH, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
            return self.resolver.apply(response, session)

        try:
            response = await call_next(request)
        except Exception as e:
            # Still answer (and propagate the session) when a handler blows up
            logger.error(f"Unhandled exception on {request.method} {path}: {e}", exc_info=True)
            response = internal_error_response()

        return self.resolver.apply(response, session)
