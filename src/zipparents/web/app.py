"""
ZipParents API - FastAPI application.

Domain errors raised by the services are mapped to HTTP responses here;
route handlers do not catch them.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from onboarding.api import router as onboarding_router
from zipparents import __version__
from zipparents.config import configure_logging, settings
from zipparents.errors import (
    AuthError,
    ConflictError,
    DecodeError,
    NotFoundError,
    PermissionDeniedError,
    StoreError,
    ValidationFailedError,
    ZipParentsError,
)
from zipparents.web.admin_routes import router as admin_router
from zipparents.web.auth_routes import router as auth_router
from zipparents.web.connection_routes import router as connection_router
from zipparents.web.discovery_routes import router as discovery_router
from zipparents.web.event_routes import router as event_router
from zipparents.web.message_routes import router as message_router
from zipparents.web.profile_routes import router as profile_router
from zipparents.web.safety_routes import router as safety_router

logger = logging.getLogger(__name__)

# Most specific first; the first match wins
ERROR_STATUS: list[tuple[type[ZipParentsError], int]] = [
    (ValidationFailedError, 422),
    (AuthError, 401),
    (PermissionDeniedError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (DecodeError, 502),
    (StoreError, 502),
]

app = FastAPI(title="ZipParents", version=__version__)


@app.on_event("startup")
async def startup_event():
    """Configure logging and report the environment on startup."""
    configure_logging()
    logger.info(f"ZipParents API starting up ({settings.zipparents_env})")


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def status_for(error: ZipParentsError) -> int:
    for error_type, status in ERROR_STATUS:
        if isinstance(error, error_type):
            return status
    return 400


@app.exception_handler(ZipParentsError)
async def domain_error_handler(request: Request, exc: ZipParentsError) -> JSONResponse:
    status = status_for(exc)
    body: dict = {"detail": str(exc)}
    if isinstance(exc, ValidationFailedError):
        body["errors"] = exc.errors
    elif isinstance(exc, AuthError) and exc.code:
        body["code"] = exc.code

    if status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {status}: {exc}")
    return JSONResponse(status_code=status, content=body)


app.include_router(auth_router, prefix="/api")
app.include_router(onboarding_router, prefix="/api")
app.include_router(profile_router, prefix="/api")
app.include_router(discovery_router, prefix="/api")
app.include_router(connection_router, prefix="/api")
app.include_router(message_router, prefix="/api")
app.include_router(event_router, prefix="/api")
app.include_router(safety_router, prefix="/api")
app.include_router(admin_router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}
