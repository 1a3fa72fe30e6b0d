"""Shared utilities for Xcroller."""
from .errors import sanitize_error_message
from .log import get_logger, log_structured, log_success, request_id_var
from .result import Result
from .time import ms, timer
from .types import (
    EXTENSIONS,
    ErrorCode,
    FileKind,
    SUPPORTED_EXTENSIONS,
    classify_file,
    is_supported_extension,
)

__all__ = [
    "Result",
    "get_logger",
    "log_success",
    "log_structured",
    "request_id_var",
    "ms",
    "timer",
    "FileKind",
    "ErrorCode",
    "EXTENSIONS",
    "SUPPORTED_EXTENSIONS",
    "classify_file",
    "is_supported_extension",
    "sanitize_error_message",
]
