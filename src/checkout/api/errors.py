"""Response mapping for checkout failures.

Each failure kind maps to exactly one HTTP status. Internal failures are
reported with a fixed, opaque message.
"""

from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from checkout.api.schemas import ErrorResponse
from checkout.exceptions import (
    CheckoutError,
    CheckoutInternalError,
    ExcessiveDiscount,
    InsufficientStock,
    InvalidDiscount,
    ProductNotFound,
    UnauthorizedAccess,
)
from checkout.utils.logging import get_logger

logger = get_logger(__name__)

_STATUS_BY_ERROR = {
    UnauthorizedAccess: HTTPStatus.FORBIDDEN,
    ProductNotFound: HTTPStatus.NOT_FOUND,
    InvalidDiscount: HTTPStatus.BAD_REQUEST,
    ExcessiveDiscount: HTTPStatus.BAD_REQUEST,
    InsufficientStock: HTTPStatus.BAD_REQUEST,
    CheckoutInternalError: HTTPStatus.INTERNAL_SERVER_ERROR,
}


def status_for(exc: CheckoutError) -> HTTPStatus:
    for cls in type(exc).__mro__:
        if cls in _STATUS_BY_ERROR:
            return _STATUS_BY_ERROR[cls]
    return HTTPStatus.INTERNAL_SERVER_ERROR


def error_response(request: Request, status: HTTPStatus, message: str, **extra) -> JSONResponse:
    body = ErrorResponse(
        status=status.value,
        error=status.phrase,
        message=message,
        path=request.url.path,
        **extra,
    )
    return JSONResponse(status_code=status.value, content=body.model_dump(exclude_none=True))


async def handle_checkout_error(request: Request, exc: CheckoutError) -> JSONResponse:
    status = status_for(exc)
    if status == HTTPStatus.INTERNAL_SERVER_ERROR:
        return error_response(request, status, CheckoutInternalError().message)

    extra = {}
    if isinstance(exc, InvalidDiscount):
        extra = {"code": exc.code, "reason": exc.reason}
    return error_response(request, status, exc.message, **extra)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error", path=request.url.path, error_type=type(exc).__name__)
    return error_response(request, HTTPStatus.INTERNAL_SERVER_ERROR, CheckoutInternalError().message)


def register_checkout_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CheckoutError, handle_checkout_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
