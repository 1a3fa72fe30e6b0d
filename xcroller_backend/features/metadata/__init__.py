"""Metadata probing for media files."""
from .prober import Metadata, probe

__all__ = ["Metadata", "probe"]
