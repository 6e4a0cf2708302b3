import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from src.domain.base import utcnow
from .error import ClientError, ServerError, UpstreamError

logger = logging.getLogger(__name__)


def _retry_after_seconds(locked_until: str) -> int:
    remaining = datetime.fromisoformat(locked_until) - utcnow()
    return max(int(remaining.total_seconds()), 1)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    if exc.base_error.details:
        error_dict["details"] = exc.base_error.details
    logger.warning(f"Client error: {exc.base_error.code} on {request.url.path}")

    headers = None
    locked_until = (exc.base_error.details or {}).get("locked_until")
    if exc.status_code == status.HTTP_429_TOO_MANY_REQUESTS and locked_until:
        headers = {"Retry-After": str(_retry_after_seconds(locked_until))}

    return JSONResponse(
        status_code=exc.status_code, content={"error": error_dict}, headers=headers
    )


async def handle_upstream_error(request: Request, exc: UpstreamError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    if exc.base_error.details:
        error_dict["details"] = exc.base_error.details
    logger.error(f"Upstream error: {exc.base_error.code} {exc.base_error.details}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = {"code": exc.base_error.code, "message": "Internal server error"}
    logger.error(f"Server error: {exc.base_error.code}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    error_dict = {"code": "INTERNAL_ERROR", "message": "Internal server error"}
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    from src.adapter.services.in_memory_exchange_token_store import (
        InMemoryExchangeTokenStore,
        run_periodic_sweep,
    )
    from src.depends import get_exchange_token_store

    config = app.state.config
    store = get_exchange_token_store()

    sweeper = None
    if isinstance(store, InMemoryExchangeTokenStore):
        sweeper = asyncio.create_task(
            run_periodic_sweep(store, config.EXCHANGE_TOKEN_SWEEP_SECONDS)
        )

    yield

    if sweeper is not None:
        sweeper.cancel()
        try:
            await sweeper
        except asyncio.CancelledError:
            pass


def create_app(ApplicationConfig) -> FastAPI:
    app = FastAPI(title="Guardian Password Recovery API", version="0.1.0", lifespan=lifespan)
    app.state.config = ApplicationConfig

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from src.api.routes import health_check, linkage, otp, password_reset

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(linkage.router, tags=["Linkage"])
    app.include_router(otp.router, tags=["OTP"])
    app.include_router(password_reset.router, tags=["Password Reset"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(UpstreamError, handle_upstream_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    return app
