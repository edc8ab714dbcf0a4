from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from pydantic import BaseModel, ConfigDict


class ServiceResponse(BaseModel):
    """Wire shape of every downstream service response."""

    # "false", 0 or "1" are not booleans on the wire
    model_config = ConfigDict(strict=True)

    result: bool
    data: dict[str, Any] | None = None
    errors: list[str] | None = None


@dataclass(frozen=True)
class Payload:
    """Success envelope whose data carries the expected key."""

    key: str
    value: Any


@dataclass(frozen=True)
class Empty:
    """Success envelope without the expected key."""

    key: str


@dataclass(frozen=True)
class Failure:
    service: str
    status_code: int | None
    errors: list[str] = field(default_factory=list)
    from_envelope: bool = False


EnvelopeResult = Union[Payload, Empty, Failure]
