"""Google OAuth 2.0 authorization-code flow used to connect a principal's Gmail and Calendar."""

import time
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import urlencode

import httpx

from ..agent_core.exceptions import IntegrationError
from ..agent_core.logger import get_logger
from .credentials import GOOGLE_TOKEN_URI

logger = get_logger(__name__)

GOOGLE_AUTH_URI = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_USERINFO_URI = "https://www.googleapis.com/oauth2/v2/userinfo"

GOOGLE_SCOPES: List[str] = [
    "https://www.googleapis.com/auth/gmail.readonly",
    "https://www.googleapis.com/auth/gmail.send",
    "https://www.googleapis.com/auth/gmail.modify",
    "https://www.googleapis.com/auth/calendar.readonly",
    "https://www.googleapis.com/auth/calendar.events",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
]


class GoogleOAuthClient:
    """Builds the consent URL and exchanges authorization codes for tokens.

    Exchanged tokens are returned in the shape ``TokenStore`` persists: ``access_token``,
    ``refresh_token``, ``scope``, ``token_type`` and ``expiry_date`` (epoch milliseconds).
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        scopes: Sequence[str] = GOOGLE_SCOPES,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ) -> None:
        """
        Args:
            client_id: OAuth client id.
            client_secret: OAuth client secret.
            redirect_uri: Callback URL registered for the client.
            scopes: Scopes requested on the consent page.
            transport: Optional transport for the HTTP client, e.g. ``httpx.MockTransport``.
            timeout: Timeout in seconds for token and userinfo requests.
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scopes = list(scopes)
        self._transport = transport
        self._timeout = timeout

    def authorization_url(self, state: Optional[str] = None) -> str:
        """Consent page URL requesting offline access, so Google issues a refresh token."""
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(self.scopes),
            "access_type": "offline",
            "prompt": "consent",
        }
        if state:
            params["state"] = state
        return f"{GOOGLE_AUTH_URI}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> Dict[str, Any]:
        """Exchange an authorization code for tokens.

        Raises:
            IntegrationError: If the token endpoint is unreachable or rejects the code.
        """
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
        }
        response = await self._request("POST", GOOGLE_TOKEN_URI, data=data)
        if response.status_code != 200:
            raise IntegrationError(f"Token exchange failed: {self._error_reason(response)}")

        body = response.json()
        if not body.get("access_token"):
            raise IntegrationError("Token exchange failed: no access token in response")

        kept = ("access_token", "refresh_token", "scope", "token_type", "id_token")
        tokens = {key: body[key] for key in kept if key in body}
        if body.get("expires_in"):
            tokens["expiry_date"] = int((time.time() + float(body["expires_in"])) * 1000)
        logger.info("Exchanged authorization code for tokens.")
        return tokens

    async def fetch_user_info(self, access_token: str) -> Dict[str, Any]:
        """Profile of the token's owner (``email``, ``name``, ``picture``).

        Raises:
            IntegrationError: If the userinfo request fails.
        """
        response = await self._request(
            "GET", GOOGLE_USERINFO_URI, headers={"Authorization": f"Bearer {access_token}"}
        )
        if response.status_code != 200:
            raise IntegrationError(f"Userinfo request failed: {self._error_reason(response)}")
        return response.json()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
            try:
                return await client.request(method, url, **kwargs)
            except httpx.HTTPError as e:
                logger.error(f"OAuth request to {url} failed: {e}")
                raise IntegrationError(f"OAuth request failed: {e}") from e

    @staticmethod
    def _error_reason(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return f"HTTP {response.status_code}"
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict):
                error = error.get("message")
            reason = body.get("error_description") or error
            if reason:
                return str(reason)
        return f"HTTP {response.status_code}"
