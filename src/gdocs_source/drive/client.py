"""Google Drive API client authenticated with OAuth user credentials."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any
from urllib import request as urllib_request
from urllib.error import HTTPError
from urllib.parse import urlencode

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request as GoogleAuthRequest
from google.oauth2.credentials import Credentials

if TYPE_CHECKING:
    from gdocs_source.config import AppConfig

logger = logging.getLogger(__name__)

DRIVE_FILES_URL = "https://www.googleapis.com/drive/v3/files"
DRIVE_SCOPES = ["https://www.googleapis.com/auth/drive.readonly"]
TOKEN_URI = "https://oauth2.googleapis.com/token"


class DriveAuthError(Exception):
    """Raised when OAuth credentials cannot be refreshed."""


class DriveApiError(Exception):
    """Raised when the Drive API returns a non-2xx response."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"Drive API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class DriveClient:
    """Authenticated client for the Drive v3 ``files.list`` endpoint."""

    def __init__(self, credentials: Credentials) -> None:
        """Initialise the client.

        Args:
            credentials: OAuth user credentials. Refreshed on demand when
                expired, provided they carry a refresh token.
        """
        self._credentials = credentials

    def _acquire_token(self) -> str:
        """Return a valid Bearer token, refreshing the credentials if needed.

        Raises:
            DriveAuthError: If the credentials cannot be refreshed.
        """
        if not self._credentials.valid:
            try:
                self._credentials.refresh(GoogleAuthRequest())
            except RefreshError as exc:
                logger.error("[_acquire_token] token refresh failed; error:%s", exc)
                raise DriveAuthError(f"Token refresh failed: {exc}") from exc
        return str(self._credentials.token)

    def list_files(
        self,
        query: str,
        fields: str,
        page_token: str | None = None,
    ) -> dict[str, Any]:
        """List one page of files matching a Drive search query.

        Args:
            query: Drive search query (``q`` parameter).
            fields: Partial-response field mask.
            page_token: Continuation token from the previous page, if any.

        Returns:
            Parsed JSON response body with ``files`` and, when more results
            remain, ``nextPageToken``.

        Raises:
            DriveAuthError: If token refresh fails.
            DriveApiError: If the API returns a non-2xx status code.
        """
        params: dict[str, str] = {
            "q": query,
            "fields": fields,
            "supportsAllDrives": "true",
            "includeItemsFromAllDrives": "true",
        }
        if page_token:
            params["pageToken"] = page_token

        token = self._acquire_token()
        req = urllib_request.Request(
            f"{DRIVE_FILES_URL}?{urlencode(params)}",
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
            },
            method="GET",
        )
        try:
            with urllib_request.urlopen(req) as resp:
                return json.loads(resp.read())  # type: ignore[no-any-return]
        except HTTPError as exc:
            raw = exc.read()
            try:
                detail = json.loads(raw).get("error", {}).get("message", exc.reason)
            except (ValueError, AttributeError):
                detail = exc.reason
            logger.error("[list_files] listing failed; status:%d", exc.code)
            raise DriveApiError(exc.code, detail) from exc


def credentials_from_token(token_json: str, client_id: str, client_secret: str) -> Credentials:
    """Build OAuth credentials from a stored token document.

    Args:
        token_json: JSON object with ``access_token``, ``refresh_token`` and
            optionally ``expiry_date`` (epoch milliseconds).
        client_id: OAuth client ID the token was issued to.
        client_secret: OAuth client secret.

    Returns:
        Credentials ready to be refreshed by the Drive client.
    """
    info = json.loads(token_json)
    expiry = None
    if info.get("expiry_date"):
        # google-auth compares expiry against naive UTC datetimes.
        expiry = datetime.fromtimestamp(info["expiry_date"] / 1000, tz=UTC).replace(tzinfo=None)
    return Credentials(
        token=info.get("access_token"),
        refresh_token=info.get("refresh_token"),
        token_uri=TOKEN_URI,
        client_id=client_id,
        client_secret=client_secret,
        scopes=DRIVE_SCOPES,
        expiry=expiry,
    )


def drive_client_from_config(config: AppConfig) -> DriveClient:
    """Construct a DriveClient from application configuration.

    Args:
        config: Application configuration instance.

    Returns:
        Configured DriveClient instance.
    """
    credentials = credentials_from_token(
        config.token_json,
        client_id=config.client_id,
        client_secret=config.client_secret,
    )
    return DriveClient(credentials)
