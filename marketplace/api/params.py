import re

from marketplace.core.errors import ValidationError


_INT_RE = re.compile(r"[+-]?[0-9]+")

# storage columns are 64-bit signed
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def parse_int(raw: str, message: str) -> int:
    if not _INT_RE.fullmatch(raw):
        raise ValidationError(message)
    value = int(raw)
    if not INT64_MIN <= value <= INT64_MAX:
        raise ValidationError(message)
    return value


def optional_int(raw: str | None, message: str) -> int | None:
    if raw is None or raw == "":
        return None
    return parse_int(raw, message)


def required_int(raw: str | None, field: str) -> int:
    if raw is None or raw == "":
        raise ValidationError(f"{field} is required")
    return parse_int(raw, f"{field} must be a valid integer")


def positive_int(raw: str | None, field: str, default: int) -> int:
    if raw is None or raw == "":
        return default
    value = parse_int(raw, f"{field} must be a positive integer")
    if value < 1:
        raise ValidationError(f"{field} must be a positive integer")
    return value
