"""
Canonical path form used as the catalog key for folders and media.
"""

from __future__ import annotations

import os
import posixpath
import re

_UNC_PREFIX = "//?/"
_DRIVE_ONLY_RE = re.compile(r"^[A-Za-z]:$")
_DRIVE_ROOT_RE = re.compile(r"^[A-Za-z]:/")


def normalize_path(value: str | None) -> str:
    """
    Return the canonical string form of a filesystem path.

    Backslashes become forward slashes, surrounding whitespace is trimmed,
    a leading `//?/` extended-length prefix is stripped, redundant separators
    and `.`/`..` segments are collapsed and a drive letter is upper-cased.
    Applying it twice gives the same result.
    """
    if not value:
        return ""
    out = str(value).replace("\\", "/").strip()
    if out.startswith(_UNC_PREFIX):
        out = out[len(_UNC_PREFIX):]
    if not out:
        return ""
    out = posixpath.normpath(out)
    if _DRIVE_ONLY_RE.match(out):
        out += "/"
    if len(out) >= 2 and out[1] == ":" and out[0].isalpha():
        out = out[0].upper() + out[1:]
    return out


def is_absolute_path(value: str) -> bool:
    """True for a normalized POSIX, UNC or drive-letter absolute path."""
    return value.startswith("/") or bool(_DRIVE_ROOT_RE.match(value))


def canonical_path(value: str | None) -> str:
    """
    Normalized absolute form of a user-supplied folder path.

    Relative input is resolved against the working directory, so the same
    folder always maps to one catalog key.
    """
    out = normalize_path(value)
    if out and not is_absolute_path(out):
        out = normalize_path(os.path.abspath(out))
    return out


def has_null_byte(value: str | None) -> bool:
    return bool(value) and "\x00" in str(value)
