"""API key guard for the scoring endpoints."""

from __future__ import annotations

from fastapi import Header, HTTPException, status

from slpscoring.config import get_settings


def require_api_key(
    x_api_key: str | None = Header(default=None, alias="x-api-key"),
) -> str | None:
    """Require a matching ``x-api-key`` header when ``API_KEY`` is configured."""

    expected = get_settings().api_key
    if not expected:
        return x_api_key
    if x_api_key != expected:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid api key",
        )
    return x_api_key


__all__ = ["require_api_key"]
