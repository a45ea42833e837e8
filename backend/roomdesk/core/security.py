from __future__ import annotations

from jose import jwt

from roomdesk.core.config import get_settings


def decode_token(token: str) -> dict:
    """Verify a bearer token issued by the hosted auth provider."""
    settings = get_settings()
    options = {"verify_aud": settings.jwt_audience is not None}
    return jwt.decode(
        token,
        settings.jwt_secret_key,
        algorithms=[settings.jwt_algorithm],
        audience=settings.jwt_audience,
        options=options,
    )
