"""
HTTP boundary to the hosted platform's auth API.

Both calls go out with the elevated service-role key, which stays on the
server and is never echoed back to a caller.
"""

from typing import Any

import httpx

from shop_finance.config import Settings
from shop_finance.core.exceptions import (
    ConfigurationException,
    InvalidTokenException,
    InviteFailedException,
)
from shop_finance.core.log_config import get_logger
from shop_finance.models.principal import Principal

log = get_logger(__name__)


def _error_message(response: httpx.Response, fallback: str) -> str:
    # The auth API answers with one of several error shapes.
    try:
        body = response.json()
    except ValueError:
        return response.text or fallback
    if not isinstance(body, dict):
        return fallback
    for key in ("msg", "error_description", "message", "error"):
        value = body.get(key)
        if isinstance(value, str) and value:
            return value
    return fallback


class IdentityClient:
    """Identity collaborator: token exchange and invite-or-create"""

    def __init__(self, settings: Settings, http: httpx.AsyncClient):
        missing = settings.missing_platform_settings
        if missing:
            log.error("platform_misconfigured", missing=missing)
            raise ConfigurationException("Server misconfigured")

        self._base_url = settings.platform_base_url
        self._service_key = settings.SERVICE_ROLE_KEY
        self._redirect_to = settings.INVITE_REDIRECT_TO
        self._http = http

    def _headers(self, bearer: str) -> dict[str, str]:
        return {
            "apikey": self._service_key,
            "Authorization": f"Bearer {bearer}",
        }

    async def get_user(self, access_token: str) -> Principal:
        """
        Exchange a caller's access token for their identity.

        Raises:
            InvalidTokenException: If the auth API rejects the token or is unreachable
        """
        try:
            r = await self._http.get(
                f"{self._base_url}/auth/v1/user",
                headers=self._headers(access_token),
            )
            r.raise_for_status()
            payload = r.json()
        except httpx.HTTPStatusError as e:
            log.info("token_exchange_rejected", status=e.response.status_code)
            raise InvalidTokenException("Invalid token") from e
        except (httpx.HTTPError, ValueError) as e:
            log.warning("token_exchange_failed", error=str(e))
            raise InvalidTokenException("Invalid token") from e

        if not isinstance(payload, dict) or not payload.get("id"):
            raise InvalidTokenException("Invalid token")

        return Principal.from_user_payload(payload)

    async def invite_user_by_email(
        self, email: str, data: dict[str, Any] | None = None
    ) -> Principal:
        """
        Invite (or re-invite) a user by email.

        The auth API creates the user if needed and re-sends the invite for an
        unconfirmed address; an already-confirmed address is an error.

        Args:
            email: Address to invite
            data: User metadata attached to the invite

        Returns:
            The invited principal

        Raises:
            InviteFailedException: With the auth API's own message
        """
        params = {"redirect_to": self._redirect_to} if self._redirect_to else None
        try:
            r = await self._http.post(
                f"{self._base_url}/auth/v1/invite",
                headers=self._headers(self._service_key),
                params=params,
                json={"email": email, "data": data or {}},
            )
        except httpx.HTTPError as e:
            raise InviteFailedException(str(e) or "Invite failed") from e

        if r.is_error:
            raise InviteFailedException(_error_message(r, "Invite failed"))

        try:
            payload = r.json()
        except ValueError as e:
            raise InviteFailedException("Invite failed") from e

        # Some deployments wrap the user object, others return it bare.
        user = payload.get("user", payload) if isinstance(payload, dict) else None
        if not isinstance(user, dict) or not user.get("id"):
            raise InviteFailedException("Invite returned no user")

        return Principal.from_user_payload(user)
