"""
FilterOptions: the structured query request used by ad-hoc queries and feeds.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from ...path_utils import canonical_path
from ...utils import parse_bool, parse_float, parse_int

SORT_KEYS = frozenset({"created_at", "size_bytes", "resolution", "duration_sec", "filename", "random"})
SORT_ALIASES = {
    "size": "size_bytes",
    "duration": "duration_sec",
    "path": "filename",
    "created": "created_at",
}
DEFAULT_SORT = "created_at"


def normalize_sort_key(value: Any) -> str:
    key = str(value or "").strip().lower()
    key = SORT_ALIASES.get(key, key)
    return key if key in SORT_KEYS else DEFAULT_SORT


def normalize_sort_order(value: Any) -> str:
    return "asc" if str(value or "").strip().lower() == "asc" else "desc"


def normalize_extension(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip().lstrip(".").lower()


def _str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple, set, frozenset)):
        return []
    return [str(v).strip() for v in value if v is not None and str(v).strip()]


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip().lower()
    return text or None


@dataclass
class FilterOptions:
    """
    Optional constraints plus sort order. A None field means "no constraint".

    `media_type` and `orientation` accept "all" as an explicit no-op.
    """
    media_type: Optional[str] = None
    orientation: Optional[str] = None
    min_width: Optional[int] = None
    min_height: Optional[int] = None
    min_duration: Optional[float] = None
    max_duration: Optional[float] = None
    min_size: Optional[int] = None
    max_size: Optional[int] = None
    extensions: List[str] = field(default_factory=list)
    folder_paths: List[str] = field(default_factory=list)
    favorites_only: bool = False
    sort_by: str = DEFAULT_SORT
    sort_order: str = "desc"

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "FilterOptions":
        """Build from loosely typed input. Unknown keys are ignored."""
        if not isinstance(data, Mapping):
            return cls()
        extensions = [e for e in (normalize_extension(x) for x in _str_list(data.get("extensions"))) if e]
        folders = [p for p in (canonical_path(x) for x in _str_list(data.get("folder_paths"))) if p]
        return cls(
            media_type=_optional_str(data.get("media_type")),
            orientation=_optional_str(data.get("orientation")),
            min_width=parse_int(data.get("min_width")),
            min_height=parse_int(data.get("min_height")),
            min_duration=parse_float(data.get("min_duration")),
            max_duration=parse_float(data.get("max_duration")),
            min_size=parse_int(data.get("min_size")),
            max_size=parse_int(data.get("max_size")),
            extensions=extensions,
            folder_paths=folders,
            favorites_only=parse_bool(data.get("favorites_only"), False),
            sort_by=normalize_sort_key(data.get("sort_by")),
            sort_order=normalize_sort_order(data.get("sort_order")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def scoped_to(self, folder_paths: List[str]) -> "FilterOptions":
        """Copy with the folder scope replaced."""
        data = self.to_dict()
        data["folder_paths"] = list(folder_paths)
        return FilterOptions.from_dict(data)
