"""
Credentials for the news API.

Read endpoints take an X-API-KEY header; the sync trigger takes the cron
secret as a bearer token. Either check is skipped when its setting is
unset (dev mode).
"""

import hmac

from fastapi import HTTPException, Security, status
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer

from src.config.settings import get_settings

DEV_MODE_KEY = "dev-mode"

api_key_header = APIKeyHeader(name="X-API-KEY", auto_error=False)
cron_bearer = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def configured_api_keys() -> set[str]:
    """Keys from the comma-separated API_KEYS setting, blanks dropped."""
    raw = get_settings().api_keys or ""
    return {key.strip() for key in raw.split(",") if key.strip()}


async def verify_api_key(api_key: str | None = Security(api_key_header)) -> str:
    """
    Dependency guarding the read endpoints.

    Returns the presented key, or ``DEV_MODE_KEY`` when no keys are
    configured.

    Raises:
        HTTPException: 401 if the header is absent or not a configured key
    """
    allowed = configured_api_keys()
    if not allowed:
        return DEV_MODE_KEY

    if api_key is None:
        raise _unauthorized("Missing API key. Provide X-API-KEY header.")
    if api_key not in allowed:
        raise _unauthorized("Invalid API key")
    return api_key


async def verify_cron_secret(
    credentials: HTTPAuthorizationCredentials | None = Security(cron_bearer),
) -> None:
    """Require ``Authorization: Bearer <CRON_SECRET>`` when a cron secret is set."""
    secret = get_settings().cron_secret
    if not secret:
        return

    token = credentials.credentials if credentials else ""
    if not hmac.compare_digest(token.encode(), secret.encode()):
        raise _unauthorized("Unauthorized")
