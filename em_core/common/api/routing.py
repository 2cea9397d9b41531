# em_core/common/api/routing.py
from __future__ import annotations

from django.urls import path


def route(pattern: str, view, *, name: str) -> list:
    """
    Register `pattern` with and without a trailing slash (APPEND_SLASH is off).
    Only the bare form carries the name, so reverse() yields the bare path.
    """
    return [
        path(pattern, view, name=name),
        path(f"{pattern}/", view),
    ]
