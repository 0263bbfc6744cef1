"""App Store Connect client.

Obtains a bearer token from a signed-claims credential (ES256 JWT, 20
minute lifetime) and reads app metadata. The Connect API does not expose
download totals, so those fields stay None rather than reporting a fake
zero.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any

import jwt
import requests

from protostats.models.types import AppInfo

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.appstoreconnect.apple.com/v1"
TOKEN_AUDIENCE = "appstoreconnect-v1"
TOKEN_LIFETIME_SECONDS = 20 * 60
TIMEOUT_SECONDS = 30


class AppStoreError(RuntimeError):
    """Raised when the App Store Connect API returns an error."""


class AppStoreClient:
    """Minimal App Store Connect API client."""

    def __init__(
        self,
        issuer_id: str,
        key_id: str,
        private_key: str,
        app_id: str,
        session: requests.Session | None = None,
        base_url: str = API_BASE_URL,
    ):
        """Initialize client.

        Args:
            issuer_id: API key issuer id.
            key_id: API key id (JWT `kid` header).
            private_key: PEM-encoded EC private key (.p8 contents).
            app_id: Numeric Apple app id.
            session: Optional requests session (injected in tests).
            base_url: API base URL.
        """
        self.issuer_id = issuer_id
        self.key_id = key_id
        self.private_key = private_key
        self.app_id = app_id
        self.session = session or requests.Session()
        self.base_url = base_url.rstrip("/")

    @classmethod
    def from_key_file(
        cls,
        issuer_id: str,
        key_id: str,
        private_key_path: Path,
        app_id: str,
        session: requests.Session | None = None,
    ) -> AppStoreClient:
        """Build a client from a .p8 key file.

        Raises:
            FileNotFoundError: If the key file does not exist.
        """
        private_key = Path(private_key_path).read_text(encoding="utf-8")
        return cls(issuer_id, key_id, private_key, app_id, session=session)

    def generate_token(self, now: float | None = None) -> str:
        """Sign a short-lived bearer token.

        Args:
            now: Issue time as epoch seconds. Defaults to the current time.

        Returns:
            Encoded JWT.
        """
        issued_at = int(now if now is not None else time.time())
        payload = {
            "iss": self.issuer_id,
            "iat": issued_at,
            "exp": issued_at + TOKEN_LIFETIME_SECONDS,
            "aud": TOKEN_AUDIENCE,
        }
        return jwt.encode(
            payload,
            self.private_key,
            algorithm="ES256",
            headers={"kid": self.key_id, "typ": "JWT"},
        )

    def _get(self, path: str, token: str) -> requests.Response:
        return self.session.get(
            f"{self.base_url}{path}",
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
            },
            timeout=TIMEOUT_SECONDS,
        )

    def fetch_app_info(self) -> AppInfo:
        """Fetch app name, bundle id and version count.

        Raises:
            AppStoreError: If the app lookup fails.
        """
        token = self.generate_token()

        try:
            response = self._get(f"/apps/{self.app_id}", token)
        except requests.RequestException as e:
            raise AppStoreError(f"App Store API request failed: {e}") from e

        if response.status_code != 200:
            raise AppStoreError(f"App Store API error: {response.status_code} {response.reason}")

        attributes: dict[str, Any] = response.json().get("data", {}).get("attributes", {})
        app_name = attributes.get("name") or ""
        logger.info(f"Found app: {app_name}")

        return AppInfo(
            app_name=app_name,
            bundle_id=attributes.get("bundleId"),
            version_count=self._fetch_version_count(token),
        )

    def _fetch_version_count(self, token: str) -> int | None:
        """Count App Store versions; None when the listing is unavailable."""
        try:
            response = self._get(f"/apps/{self.app_id}/appStoreVersions", token)
        except requests.RequestException as e:
            logger.warning(f"Could not fetch App Store versions: {e}")
            return None

        if response.status_code != 200:
            logger.warning(f"Could not fetch App Store versions: HTTP {response.status_code}")
            return None

        return len(response.json().get("data", []))
