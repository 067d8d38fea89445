from __future__ import annotations

import secrets

from app.core.config import Settings


class ConfigError(RuntimeError):
    """Raised when a required setting is missing."""


class AuthError(RuntimeError):
    """Raised when the request's access token does not match."""


def check_request(settings: Settings, token: str | None) -> None:
    if not settings.finn_api_key:
        raise ConfigError("Missing ADSCREEN_FINN_API_KEY setting")
    if not settings.finn_org_id:
        raise ConfigError("Missing ADSCREEN_FINN_ORG_ID setting")

    if settings.access_token:
        supplied = token or ""
        if not secrets.compare_digest(supplied.encode("utf-8"), settings.access_token.encode("utf-8")):
            raise AuthError("Unauthorized")
