"""Backend-facing alias for shared utilities."""
from __future__ import annotations

from xcroller_shared import (
    ErrorCode,
    Result,
    classify_file,
    get_logger,
    is_supported_extension,
    log_structured,
    log_success,
    ms,
    request_id_var,
    sanitize_error_message,
    timer,
)

__all__ = [
    "Result",
    "ErrorCode",
    "classify_file",
    "is_supported_extension",
    "get_logger",
    "log_success",
    "log_structured",
    "request_id_var",
    "sanitize_error_message",
    "ms",
    "timer",
]
