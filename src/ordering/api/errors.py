"""Exception handlers mapping ordering errors to HTTP responses.

Every error body is ``{"detail": <readable message>, "errors": <messages>}``
where ``errors`` keeps the field/step keyed messages from the exception.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError

from ordering.errors import OrderingError

logger = structlog.get_logger(__name__)


def _flatten(messages) -> list[str]:
    if isinstance(messages, dict):
        flat = []
        for value in messages.values():
            flat.extend(_flatten(value))
        return flat
    if isinstance(messages, (list, tuple)):
        return [str(message) for message in messages]
    return [str(messages)]


def _error_response(status_code: int, messages) -> JSONResponse:
    flat = _flatten(messages)
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": "; ".join(flat) if flat else "Request failed",
            "errors": messages if isinstance(messages, dict) else {"_error": flat},
        },
    )


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return _error_response(400, exc.messages)


async def not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return _error_response(404, getattr(exc, "messages", None) or {"_entity": [str(exc)]})


async def ordering_error_handler(request: Request, exc: OrderingError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Request failed", path=request.url.path, errors=exc.messages)
    return _error_response(exc.status_code, exc.messages)


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(ObjectNotFoundError, not_found_handler)
    app.add_exception_handler(OrderingError, ordering_error_handler)
