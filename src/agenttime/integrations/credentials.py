"""Credential provider: a process-wide, file-backed store of delegated Google access.

Tokens are keyed by principal (the user's email). Reads and writes for one principal are
serialized with a per-key lock; the backing file is rewritten under a single store lock.
"""

from __future__ import annotations

import asyncio
import json
from collections import defaultdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

import google.auth.exceptions
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

from ..agent_core.exceptions import IntegrationError
from ..agent_core.logger import get_logger

logger = get_logger(__name__)

GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"

# Opaque to the driver; handlers pass it straight to the provider clients.
Credential = Any


class CredentialProvider(Protocol):
    """Resolves a principal to a usable credential."""

    async def resolve(self, principal: str) -> Optional[Credential]:
        """Return a valid credential for the principal, or None when not connected."""
        ...

    async def invalidate(self, principal: str) -> bool:
        """Forget the principal's credential. Returns True if one was stored."""
        ...


class TokenStore:
    """File-backed implementation of ``CredentialProvider`` for Google OAuth tokens.

    Each record has the shape ``{"tokens": {...}, "userInfo": {...}}`` where ``tokens`` holds
    ``access_token``, ``refresh_token``, ``scope`` and ``expiry_date`` (epoch milliseconds).
    """

    def __init__(
        self,
        path: str | Path | None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        token_uri: str = GOOGLE_TOKEN_URI,
    ) -> None:
        """
        Args:
            path: JSON file to persist tokens in. ``None`` keeps tokens in memory only.
            client_id: OAuth client id, needed to refresh expired tokens.
            client_secret: OAuth client secret, needed to refresh expired tokens.
            token_uri: OAuth token endpoint.
        """
        self.path = Path(path) if path else None
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_uri = token_uri
        self._records: Dict[str, Dict[str, Any]] = self._load()
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._file_lock = asyncio.Lock()

    def _load(self) -> Dict[str, Dict[str, Any]]:
        if self.path is None or not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load tokens from '{self.path}': {e}")
            return {}
        if not isinstance(data, dict):
            logger.error(f"Ignoring malformed token file '{self.path}'.")
            return {}
        logger.info(f"Loaded {len(data)} stored credential(s) from '{self.path}'.")
        return data

    async def _persist(self) -> None:
        if self.path is None:
            return
        async with self._file_lock:
            snapshot = json.dumps(self._records, indent=2)
            try:
                await asyncio.to_thread(self.path.write_text, snapshot, encoding="utf-8")
            except OSError as e:
                msg = f"Failed to save tokens to '{self.path}': {e}"
                logger.error(msg)
                raise IntegrationError(msg) from e

    def has(self, principal: Optional[str]) -> bool:
        return bool(principal) and principal in self._records

    async def save(self, principal: str, tokens: Dict[str, Any], user_info: Optional[Dict[str, Any]] = None) -> None:
        """Store tokens for a principal, as returned by the OAuth code exchange."""
        async with self._locks[principal]:
            self._records[principal] = {"tokens": dict(tokens), "userInfo": dict(user_info or {"email": principal})}
            await self._persist()
        logger.info(f"Stored credential for '{principal}'.")

    async def invalidate(self, principal: str) -> bool:
        async with self._locks[principal]:
            if principal not in self._records:
                return False
            del self._records[principal]
            await self._persist()
        logger.info(f"Removed credential for '{principal}'.")
        return True

    async def status(self, principal: Optional[str]) -> Dict[str, Any]:
        """Connection status in the shape the calendar client expects."""
        if not principal or principal not in self._records:
            return {"authenticated": False}
        async with self._locks[principal]:
            record = self._records.get(principal)
        if record is None:
            return {"authenticated": False}
        info = record.get("userInfo", {})
        return {
            "authenticated": True,
            "email": info.get("email", principal),
            "name": info.get("name"),
            "picture": info.get("picture"),
        }

    async def resolve(self, principal: str) -> Optional[Credentials]:
        """Return non-expired Google credentials for the principal.

        Expired tokens are refreshed when a refresh token and client secrets are available;
        the refreshed token is persisted. Returns None when the principal is unknown or the
        token cannot be made valid.
        """
        if not principal:
            return None

        async with self._locks[principal]:
            record = self._records.get(principal)
            if record is None:
                return None

            credentials = self._build_credentials(record.get("tokens", {}))
            if not credentials.expired:
                return credentials

            if not (credentials.refresh_token and self.client_id and self.client_secret):
                logger.info(f"Credential for '{principal}' expired and cannot be refreshed.")
                return None

            try:
                await asyncio.to_thread(credentials.refresh, Request())
            except (google.auth.exceptions.RefreshError, google.auth.exceptions.TransportError) as e:
                logger.warning(f"Refreshing credential for '{principal}' failed: {e}")
                return None

            record["tokens"] = self._merge_refreshed(record.get("tokens", {}), credentials)
            await self._persist()
            logger.info(f"Refreshed credential for '{principal}'.")
            return credentials

    def _build_credentials(self, tokens: Dict[str, Any]) -> Credentials:
        scope = tokens.get("scope")
        credentials = Credentials(
            token=tokens.get("access_token"),
            refresh_token=tokens.get("refresh_token"),
            token_uri=self.token_uri,
            client_id=self.client_id,
            client_secret=self.client_secret,
            scopes=scope.split() if isinstance(scope, str) else scope,
        )
        expiry_ms = tokens.get("expiry_date")
        if expiry_ms:
            # google-auth compares against naive UTC datetimes
            credentials.expiry = datetime.fromtimestamp(expiry_ms / 1000, tz=timezone.utc).replace(tzinfo=None)
        return credentials

    @staticmethod
    def _merge_refreshed(tokens: Dict[str, Any], credentials: Credentials) -> Dict[str, Any]:
        merged = dict(tokens)
        merged["access_token"] = credentials.token
        if credentials.refresh_token:
            merged["refresh_token"] = credentials.refresh_token
        if credentials.expiry:
            merged["expiry_date"] = int(credentials.expiry.replace(tzinfo=timezone.utc).timestamp() * 1000)
        return merged
