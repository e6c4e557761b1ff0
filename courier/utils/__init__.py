"""Shared helpers."""

from courier.utils.lookup import get_path

__all__ = ["get_path"]
