"""Resolve the calling principal for request handlers."""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request

from .config import Settings, get_settings


def get_current_identity(request: Request, settings: Settings = Depends(get_settings)) -> Optional[str]:
    """Return the identity set by the upstream auth proxy, or ``None``.

    Services reject ``None`` as unauthorized; the dependency never raises.
    """
    value = request.headers.get(settings.identity_header)
    if value is None:
        return None
    return value.strip() or None


__all__ = ["get_current_identity"]
