from __future__ import annotations

from typing import Any

from fastapi.responses import JSONResponse


def success_body(data: Any) -> dict[str, Any]:
    return {"result": True, "data": data}


def error_body(messages: list[str]) -> dict[str, Any]:
    return {"result": False, "errors": messages}


def error_response(status_code: int, messages: list[str]) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=error_body(messages))
