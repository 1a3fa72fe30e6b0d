"""
Small parsers for path and body parameters.
"""
from typing import Any

from xcroller_backend.shared import ErrorCode, Result
from xcroller_backend.utils import parse_bool, parse_int


def _parse_id(raw: Any) -> Result[int]:
    value = parse_int(raw)
    if value is None or value <= 0:
        return Result.Err(ErrorCode.INVALID_INPUT, f"Invalid id: {raw!r}")
    return Result.Ok(value)


def _parse_page(body: dict, default_limit: int = 100) -> tuple[int, int]:
    limit = parse_int(body.get("limit"))
    offset = parse_int(body.get("offset"))
    return (default_limit if limit is None else limit), (0 if offset is None else offset)


def _parse_flag(body: dict, key: str, default: bool) -> bool:
    return parse_bool(body.get(key), default)
