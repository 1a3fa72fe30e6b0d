"""Xcroller backend: media index, query engine and HTTP API."""
