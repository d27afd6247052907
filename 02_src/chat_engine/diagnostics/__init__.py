"""Diagnostics module."""

from .diagnostics import (
    DEFAULT_CONNECTIVITY_TARGETS,
    collect_diagnostics,
    get_client_info,
    check_connectivity,
)

__all__ = [
    "DEFAULT_CONNECTIVITY_TARGETS",
    "collect_diagnostics",
    "get_client_info",
    "check_connectivity",
]
