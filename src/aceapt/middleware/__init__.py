"""HTTP middleware stack for the quiz API.

Order, outermost first: CORS, request id, rate limiting, then the routes.
Starlette wraps in reverse-add order, so ``add_middleware`` calls below run
innermost first.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from aceapt.config import Settings
from aceapt.middleware.error_handler import setup_error_handlers
from aceapt.middleware.logging import setup_logging
from aceapt.middleware.rate_limit import RateLimitMiddleware
from aceapt.middleware.request_id import REQUEST_ID_HEADER, RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure logging, error handlers and the middleware chain on ``app``."""
    setup_logging(settings)
    setup_error_handlers(app)

    app.add_middleware(
        RateLimitMiddleware,
        requests_per_window=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
        auth_requests_per_window=settings.rate_limit_auth_requests,
    )
    app.add_middleware(RequestIdMiddleware)
    # Outermost, so 429s from the limiter still carry CORS headers
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER, "X-RateLimit-Remaining", "X-RateLimit-Limit"],
    )
