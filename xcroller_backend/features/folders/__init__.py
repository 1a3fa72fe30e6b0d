"""Watched folder registry."""
from .registry import Folder, FolderRegistry

__all__ = ["Folder", "FolderRegistry"]
