import logging
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.exceptions import RequestValidationError

from core.exceptions import BaseCustomException

logger = logging.getLogger("token_events")


def error_response(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "message": message, **extra}
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handler for request validation errors.

    Parameters
    ----------
    request : Request
        FastAPI request
    exc : RequestValidationError
        Validation error

    Returns
    -------
    JSONResponse
        Error response with one entry per invalid field
    """
    errors = []
    for error in exc.errors():
        field_path = ".".join(
            str(x) for x in error["loc"] if not isinstance(x, int) and x != "body"
        )
        errors.append({
            "field": field_path or "body",
            "message": error["msg"],
            "type": error["type"]
        })

    return error_response(422, "Validation error", errors=errors)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Handler for FastAPI and Starlette HTTP exceptions.

    Parameters
    ----------
    request : Request
        FastAPI request
    exc : StarletteHTTPException
        HTTP exception

    Returns
    -------
    JSONResponse
        Error response
    """
    return error_response(exc.status_code, exc.detail)


async def custom_exception_handler(request: Request, exc: Exception):
    """
    Handler for custom and unexpected exceptions.

    Parameters
    ----------
    request : Request
        FastAPI request
    exc : Exception
        Exception

    Returns
    -------
    JSONResponse
        Error response, 500 for anything not derived from BaseCustomException
    """
    if isinstance(exc, BaseCustomException):
        return error_response(exc.get_status_code(), exc.message)

    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return error_response(500, "Internal server error")


def register_exception_handlers(app) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(BaseCustomException, custom_exception_handler)
    app.add_exception_handler(Exception, custom_exception_handler)
