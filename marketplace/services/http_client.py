from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Mapping, Literal

import httpx


HttpMethod = Literal["GET", "POST"]


@dataclass(frozen=True)
class HttpResult:
    ok: bool
    status_code: int | None

    # parsed JSON body, None when the body was not JSON
    body: Any = None
    text: str = ""

    error_message: str | None = None

    elapsed_ms: int | None = None


def _is_json_response(resp: httpx.Response) -> bool:
    ct = (resp.headers.get("content-type") or "").lower()
    return "application/json" in ct or ct.endswith("+json")


def _cap_text(s: str, *, max_chars: int) -> str:
    if len(s) <= max_chars:
        return s
    return s[:max_chars] + f"...(truncated, {len(s)} chars)"


class ServiceHttpClient:
    """
    Shared HTTP client wrapper for calls to the downstream services.

    - Uses one AsyncClient instance (connection pooling).
    - No timeout and no retries: a hung downstream hangs the request.
    - Never raises on transport or HTTP errors, returns a structured result.
    """

    def __init__(
        self,
        *,
        base_url: str,
        transport: httpx.AsyncBaseTransport | None = None,
        max_response_body_chars: int = 20_000,
    ):
        self.base_url = base_url.rstrip("/")
        self._max_body = max_response_body_chars
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=None,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        *,
        method: HttpMethod,
        path: str,
        params: Mapping[str, str] | None = None,
        form: Mapping[str, str] | None = None,
    ) -> HttpResult:
        started = time.perf_counter()
        try:
            resp = await self._client.request(
                method=method,
                url=path,
                params=dict(params or {}),
                data=dict(form) if form is not None else None,
            )
        except httpx.RequestError as e:
            # DNS errors, connection refused, TLS, etc.
            return HttpResult(
                ok=False,
                status_code=None,
                error_message=str(e) or type(e).__name__,
            )

        text = _cap_text(resp.text, max_chars=self._max_body)
        body: Any = None
        if _is_json_response(resp):
            try:
                body = resp.json()
            except ValueError:
                body = None

        elapsed_ms = int((time.perf_counter() - started) * 1000)

        if 200 <= resp.status_code < 300:
            return HttpResult(
                ok=True,
                status_code=resp.status_code,
                body=body,
                text=text,
                elapsed_ms=elapsed_ms,
            )

        return HttpResult(
            ok=False,
            status_code=resp.status_code,
            body=body,
            text=text,
            error_message=f"HTTP {resp.status_code}",
            elapsed_ms=elapsed_ms,
        )

    # helpers
    async def get(self, path: str, *, params: Mapping[str, str] | None = None) -> HttpResult:
        return await self.request(method="GET", path=path, params=params)

    async def post_form(self, path: str, *, form: Mapping[str, str]) -> HttpResult:
        return await self.request(method="POST", path=path, form=form)
