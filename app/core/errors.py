from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exceptions import RelayError, BodyValidationError
from app.core.logging import get_logger
from app.schemas.response import ErrorResponse
from utils.constants import ERROR_INTERNAL

logger = get_logger(__name__)


def error_response(exc: RelayError) -> JSONResponse:
    """Builds the JSON response for a relay error."""
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(
            ErrorResponse(error=exc.code, **exc.extra).model_dump(exclude_unset=True)
        )
    )


def add_exception_handlers(app: FastAPI):
    """
    Registers exception handlers with the FastAPI app.
    """
    @app.exception_handler(RelayError)
    async def relay_exception_handler(request: Request, exc: RelayError):
        return error_response(exc)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """
        Handles standard HTTP exceptions (404, 405, etc.)
        """
        try:
            code = HTTPStatus(exc.status_code).phrase.upper().replace(" ", "_")
        except ValueError:
            code = "HTTP_ERROR"

        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=code).model_dump(exclude_unset=True),
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """
        Handles malformed request bodies (missing fields, null or
        non-scalar values, auth code length, invalid JSON).
        """
        logger.info(f"Rejected malformed body on {request.url.path}")
        return error_response(BodyValidationError(details=jsonable_encoder(exc.errors())))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catch-all for unhandled exceptions.
        """
        logger.error(
            f"Unhandled exception: {str(exc)}",
            extra={
                "method": request.method,
                "path": request.url.path,
            },
            exc_info=True
        )

        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error=ERROR_INTERNAL).model_dump(exclude_unset=True)
        )
