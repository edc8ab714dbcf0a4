# Error taxonomy shared by the three services and the handlers that render it.
# Every failure leaves a service as {"result": false, "errors": [...]}.

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from marketplace.core.envelope import error_response


log = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base error carrying the HTTP status and client-facing messages."""

    status_code: int = 500

    def __init__(self, *messages: str) -> None:
        self.messages = [m for m in messages if m] or ["internal error"]
        super().__init__("; ".join(self.messages))


class ValidationError(ServiceError):
    """Bad input shape or a domain rule violation."""

    status_code = 400


class NotFoundError(ServiceError):
    status_code = 404


class StorageError(ServiceError):
    status_code = 500


class UpstreamError(ServiceError):
    """
    A downstream service call failed.

    `upstream_status` is the HTTP status the downstream answered with (None on
    transport errors). `from_envelope` is set when the downstream produced a
    proper `result=false` envelope; its raw error strings are kept in
    `upstream_errors` so they can be relayed verbatim.
    """

    status_code = 500

    def __init__(
        self,
        *messages: str,
        upstream_status: int | None = None,
        from_envelope: bool = False,
        upstream_errors: list[str] | None = None,
    ) -> None:
        super().__init__(*messages)
        self.upstream_status = upstream_status
        self.from_envelope = from_envelope
        self.upstream_errors = list(upstream_errors or [])

    @property
    def is_validation(self) -> bool:
        return self.from_envelope and self.upstream_status == 400


def _request_validation_messages(exc: RequestValidationError) -> list[str]:
    messages: list[str] = []
    for err in exc.errors():
        loc = err.get("loc") or ()
        if loc and loc[0] == "body":
            msg = "invalid request body"
        else:
            msg = f"invalid {loc[-1]}" if loc else "invalid request"
        if msg not in messages:
            messages.append(msg)
    return messages or ["invalid request"]


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        if exc.status_code >= 500:
            log.warning("%s %s failed: %s", request.method, request.url.path, exc)
        return error_response(exc.status_code, exc.messages)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return error_response(400, _request_validation_messages(exc))

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return error_response(exc.status_code, [str(exc.detail).lower()])

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        log.exception("%s %s crashed", request.method, request.url.path)
        return error_response(500, ["internal server error"])
