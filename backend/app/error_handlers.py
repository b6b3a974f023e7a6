import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.errors import AccessError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Render every AccessError with its own status and a stable error code."""

    @app.exception_handler(AccessError)
    async def access_error_handler(request: Request, exc: AccessError):
        if exc.http_status >= 500:
            logger.error(
                "%s on %s: %s", exc.code, request.url.path, exc.message
            )
        else:
            logger.info(
                "%s on %s: %s", exc.code, request.url.path, exc.message
            )
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())
