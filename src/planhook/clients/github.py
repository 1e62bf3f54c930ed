"""GitHub App client: App JWT generation and installation token exchange.

Installation tokens are minted fresh for every enqueue attempt and never
cached, so a job never carries a token that is close to expiry.
"""

import logging
import time
from datetime import datetime

import httpx
import jwt
from pydantic import SecretStr

from planhook.config import AppConfig, DEFAULT_GITHUB_API_BASE_URL
from planhook.errors import (
    ApiResponseError,
    AuthenticationError,
    CredentialsNotConfiguredError,
    MissingInstallationError,
    NotFoundError,
)
from planhook.models.job import InstallationCredential

log = logging.getLogger(__name__)


class GitHubAppClient:
    """GitHub API client with App authentication."""

    service_name: str = "github"

    def __init__(
        self,
        app_id: str,
        private_key: str,
        base_url: str = DEFAULT_GITHUB_API_BASE_URL,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._app_id = app_id
        self._private_key = private_key
        self._client = http_client or httpx.AsyncClient(base_url=base_url, timeout=30)

    @classmethod
    def from_config(cls, config: AppConfig) -> "GitHubAppClient":
        return cls(
            app_id=config.app_id,
            private_key=config.private_key.get_secret_value(),
            base_url=config.github_api_base_url,
        )

    @property
    def configured(self) -> bool:
        return bool(self._app_id and self._private_key)

    def _generate_jwt(self) -> str:
        """Generate a short-lived JWT for GitHub App authentication."""
        now = int(time.time())
        payload = {
            "iat": now - 60,   # 60s in the past for clock skew
            "exp": now + 600,  # 10 minute expiry
            "iss": self._app_id,
        }
        return jwt.encode(payload, self._private_key, algorithm="RS256")

    def _handle_response(self, response: httpx.Response) -> None:
        """Raise typed errors for non-success responses."""
        if response.status_code in (401, 403):
            raise AuthenticationError(
                self.service_name,
                f"failed to get installation token: HTTP {response.status_code}",
            )
        if response.status_code == 404:
            raise NotFoundError(self.service_name, "installation not found")
        if response.status_code != 201:
            raise ApiResponseError(self.service_name, response.status_code, response.text)

    async def mint_installation_token(self, installation_id: int | None) -> InstallationCredential:
        """Exchange the App identity for a token scoped to one installation.

        Raises CredentialsNotConfiguredError or MissingInstallationError before
        any network I/O. Upstream failures propagate without retry.
        """
        if not self.configured:
            raise CredentialsNotConfiguredError()
        if installation_id is None:
            raise MissingInstallationError()

        app_jwt = self._generate_jwt()
        response = await self._client.post(
            f"/app/installations/{installation_id}/access_tokens",
            headers={
                "Authorization": f"Bearer {app_jwt}",
                "Accept": "application/vnd.github+json",
            },
        )
        self._handle_response(response)

        data = response.json()
        if not data.get("token"):
            raise ApiResponseError(self.service_name, response.status_code, "no token returned")
        expires_at = data.get("expires_at")
        log.debug("Minted installation token for %d", installation_id)
        return InstallationCredential(
            installation_id=installation_id,
            token=SecretStr(data["token"]),
            expires_at=datetime.fromisoformat(expires_at.replace("Z", "+00:00")) if expires_at else None,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
