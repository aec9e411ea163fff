"""Static admin API key verification."""

from __future__ import annotations

import hmac
from typing import Optional

from fastapi import Header, HTTPException, status

from .config import get_settings


async def require_admin(x_api_key: Optional[str] = Header(default=None)) -> None:
    """Guard admin routes; open when no ``API_KEY`` is configured."""

    settings = get_settings()
    expected = settings.api_key
    if not expected:
        return
    if x_api_key is None or not hmac.compare_digest(x_api_key, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
        )
