"""
Unwrapping of downstream `{"result", "data", "errors"}` envelopes.

Decoding happens in two steps: the body is first read into the untyped
`ServiceResponse`, the expected key is looked up in `data`, and only then is
that fragment re-serialized and decoded into its typed model. A fragment with
the wrong shape therefore fails loudly instead of defaulting.
"""
from __future__ import annotations

import json
from typing import Any, TypeVar

import pydantic
from pydantic import TypeAdapter

from marketplace.core.errors import UpstreamError
from marketplace.schemas.envelope import Empty, EnvelopeResult, Failure, Payload, ServiceResponse
from marketplace.services.http_client import HttpResult


T = TypeVar("T")


def unwrap_envelope(service: str, res: HttpResult, key: str) -> EnvelopeResult:
    if res.status_code is None:
        return Failure(service=service, status_code=None, errors=[f"{service} unreachable: {res.error_message}"])

    envelope: ServiceResponse | None = None
    if isinstance(res.body, dict):
        try:
            envelope = ServiceResponse.model_validate(res.body)
        except pydantic.ValidationError:
            envelope = None

    if envelope is not None and not envelope.result:
        # result=false is a failure whatever the HTTP status says
        return Failure(
            service=service,
            status_code=res.status_code,
            errors=list(envelope.errors or []),
            from_envelope=True,
        )

    if not res.ok:
        return Failure(
            service=service,
            status_code=res.status_code,
            errors=[f"{service} returned status {res.status_code}: {res.text.strip()}"],
        )

    if envelope is None:
        return Failure(
            service=service,
            status_code=res.status_code,
            errors=[f"failed to decode {service} response"],
        )

    data = envelope.data or {}
    if key not in data:
        return Empty(key=key)
    return Payload(key=key, value=data[key])


def decode_fragment(value: Any, adapter: TypeAdapter[T], *, what: str) -> T:
    try:
        raw = json.dumps(value)
    except (TypeError, ValueError) as e:
        raise UpstreamError(f"failed to marshal {what}: {e}") from e

    try:
        return adapter.validate_json(raw, strict=True)
    except pydantic.ValidationError as e:
        raise UpstreamError(f"failed to unmarshal {what}: {e.error_count()} invalid field(s)") from e


def _raise_failure(failure: Failure) -> None:
    if failure.from_envelope:
        messages = [f"{failure.service} error: {err}" for err in failure.errors] or [f"{failure.service} error"]
        raise UpstreamError(
            *messages,
            upstream_status=failure.status_code,
            from_envelope=True,
            upstream_errors=failure.errors,
        )
    raise UpstreamError(*failure.errors, upstream_status=failure.status_code)


def expect_one(service: str, res: HttpResult, key: str, adapter: TypeAdapter[T]) -> T:
    """Single-entity endpoints: a missing key is an error."""
    out = unwrap_envelope(service, res, key)
    if isinstance(out, Failure):
        _raise_failure(out)
    if isinstance(out, Empty):
        raise UpstreamError(f"no {key} in response", upstream_status=res.status_code)
    return decode_fragment(out.value, adapter, what=key)


def expect_many(service: str, res: HttpResult, key: str, adapter: TypeAdapter[list[T]]) -> list[T]:
    """List endpoints: a missing key means an empty page."""
    out = unwrap_envelope(service, res, key)
    if isinstance(out, Failure):
        _raise_failure(out)
    if isinstance(out, Empty):
        return []
    return decode_fragment(out.value, adapter, what=key)
