"""
Google Workspace directory service.

Authenticates as a service account with domain-wide delegation, acting as a
domain administrator, and updates user passwords through the Admin SDK
Directory API.
"""

import logging
import time
from typing import Optional
from urllib.parse import quote

import httpx
from jose import jwt
from jose.exceptions import JOSEError

from src.app.services.directory_service import (
    DirectoryResult,
    DirectoryStatus,
    IDirectoryService,
)

logger = logging.getLogger(__name__)

TOKEN_URI = "https://oauth2.googleapis.com/token"
USERS_URI = "https://admin.googleapis.com/admin/directory/v1/users/{user_key}"
DIRECTORY_USER_SCOPE = "https://www.googleapis.com/auth/admin.directory.user"
JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"

ASSERTION_LIFETIME_SECONDS = 3600
# Refresh the cached access token this long before it expires
TOKEN_REFRESH_MARGIN_SECONDS = 60


class DirectoryAuthError(Exception):
    """Raised when the service account cannot obtain an access token"""


class GoogleDirectoryService(IDirectoryService):
    """
    Directory service backed by the Google Admin SDK.

    Business Rules:
    - Password updates use users.update with changePasswordAtNextLogin
    - 404 maps to not_found, 403 to forbidden, anything else to error
    - Never raises for upstream faults; no automatic retry
    """

    def __init__(
        self,
        service_account_email: str,
        private_key: str,
        admin_email: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not service_account_email or not private_key or not admin_email:
            raise ValueError("Google directory credentials are not configured")

        self.service_account_email = service_account_email
        self.private_key = private_key
        self.admin_email = admin_email
        self.timeout = timeout
        self.transport = transport

        self._access_token: Optional[str] = None
        self._access_token_expires_at = 0.0

    def _build_assertion(self, now: int) -> str:
        """Sign the JWT bearer assertion impersonating the domain admin"""
        claims = {
            "iss": self.service_account_email,
            "scope": DIRECTORY_USER_SCOPE,
            "aud": TOKEN_URI,
            "sub": self.admin_email,
            "iat": now,
            "exp": now + ASSERTION_LIFETIME_SECONDS,
        }
        try:
            return jwt.encode(claims, self.private_key, algorithm="RS256")
        except JOSEError as exc:
            raise DirectoryAuthError(f"Cannot sign service account assertion: {exc}") from exc

    async def _get_access_token(self, client: httpx.AsyncClient) -> str:
        now = int(time.time())
        if self._access_token and now < self._access_token_expires_at - TOKEN_REFRESH_MARGIN_SECONDS:
            return self._access_token

        response = await client.post(
            TOKEN_URI,
            data={"grant_type": JWT_BEARER_GRANT, "assertion": self._build_assertion(now)},
        )
        if response.status_code >= 400:
            raise DirectoryAuthError(
                f"Token exchange failed with status {response.status_code}"
            )

        try:
            payload = response.json()
            access_token = payload["access_token"]
            expires_in = int(payload.get("expires_in", 3600))
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise DirectoryAuthError("Token exchange returned an unusable response") from exc

        self._access_token = access_token
        self._access_token_expires_at = now + expires_in
        return self._access_token

    async def set_password(
        self, account_email: str, new_password: str, force_change_at_next_login: bool = True
    ) -> DirectoryResult:
        """Set a directory user's password"""
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                access_token = await self._get_access_token(client)
                response = await client.put(
                    USERS_URI.format(user_key=quote(account_email, safe="@")),
                    json={
                        "password": new_password,
                        "changePasswordAtNextLogin": force_change_at_next_login,
                    },
                    headers={"Authorization": f"Bearer {access_token}"},
                )
        except DirectoryAuthError as exc:
            logger.error(f"Directory authentication failed: {exc}")
            return DirectoryResult(
                status=DirectoryStatus.error,
                reason="directory service authentication failed",
            )
        except httpx.HTTPError as exc:
            logger.error(f"Directory request failed: {exc.__class__.__name__}: {exc}")
            return DirectoryResult(
                status=DirectoryStatus.error,
                reason="directory service unavailable",
            )

        if response.status_code < 400:
            return DirectoryResult(status=DirectoryStatus.success)

        if response.status_code == 404:
            return DirectoryResult(status=DirectoryStatus.not_found, reason="account not found")

        if response.status_code == 403:
            return DirectoryResult(
                status=DirectoryStatus.forbidden,
                reason="permission denied by directory service",
            )

        reason = _extract_error_message(response)
        logger.error(f"Directory password update failed with status {response.status_code}: {reason}")
        return DirectoryResult(status=DirectoryStatus.error, reason=reason)


def _extract_error_message(response: httpx.Response) -> str:
    """Pull the message out of a Google API error body"""
    try:
        return response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return f"directory service returned status {response.status_code}"
