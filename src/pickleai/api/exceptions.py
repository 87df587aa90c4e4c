"""Global exception handlers."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pickleai.core.chat.exceptions import (
    SessionBusy,
    SessionLimitReached,
    SessionNotFound,
)


def register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers on ``app``."""

    @app.exception_handler(SessionNotFound)
    async def handle_session_not_found(
        request: Request, exc: SessionNotFound
    ) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content={"detail": str(exc), "code": "SESSION_NOT_FOUND"},
        )

    @app.exception_handler(SessionBusy)
    async def handle_session_busy(request: Request, exc: SessionBusy) -> JSONResponse:
        return JSONResponse(
            status_code=409,
            content={"detail": str(exc), "code": "SESSION_BUSY"},
            headers={"Retry-After": "1"},
        )

    @app.exception_handler(SessionLimitReached)
    async def handle_session_limit(
        request: Request, exc: SessionLimitReached
    ) -> JSONResponse:
        return JSONResponse(
            status_code=503,
            content={"detail": str(exc), "code": "SESSION_LIMIT_REACHED"},
            headers={"Retry-After": "30"},
        )
