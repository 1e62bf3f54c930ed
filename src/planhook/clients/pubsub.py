"""Google Cloud Pub/Sub publisher over the REST API.

Authenticates with the service account key file when present, otherwise with
Application Default Credentials. Against an emulator no credentials are used.
"""

import asyncio
import base64
import logging
from pathlib import Path

import google.auth
import httpx
from google.auth.credentials import Credentials
from google.auth.exceptions import DefaultCredentialsError
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from planhook.config import AppConfig, DEFAULT_PUBSUB_API_BASE_URL
from planhook.errors import ApiResponseError, AuthenticationError, ConfigError, NotFoundError

log = logging.getLogger(__name__)

PUBSUB_SCOPES = ["https://www.googleapis.com/auth/pubsub"]


def _load_credentials(sa_key_file: str) -> Credentials | None:
    """Load GCP credentials for Pub/Sub."""
    if sa_key_file and Path(sa_key_file).exists():
        return service_account.Credentials.from_service_account_file(
            sa_key_file, scopes=PUBSUB_SCOPES,
        )
    try:
        creds, _ = google.auth.default(scopes=PUBSUB_SCOPES)
    except DefaultCredentialsError as e:
        log.warning("No GCP credentials available, publishing unauthenticated: %s", e)
        return None
    return creds


class PubSubClient:
    """Minimal Pub/Sub publisher: one HTTP call per publish, no batching, no retry."""

    service_name: str = "pubsub"

    def __init__(
        self,
        project_id: str,
        credentials: Credentials | None = None,
        base_url: str = DEFAULT_PUBSUB_API_BASE_URL,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._project_id = project_id
        self._credentials = credentials
        self._client = http_client or httpx.AsyncClient(base_url=base_url, timeout=30)

    @classmethod
    def from_config(cls, config: AppConfig) -> "PubSubClient":
        if config.pubsub_emulator_host:
            return cls(
                project_id=config.gcp_project_id,
                base_url=f"http://{config.pubsub_emulator_host}",
            )
        return cls(
            project_id=config.gcp_project_id,
            credentials=_load_credentials(config.gcp_sa_key_file),
            base_url=config.pubsub_api_base_url,
        )

    async def _auth_headers(self) -> dict[str, str]:
        if self._credentials is None:
            return {}
        if not self._credentials.valid:
            # google-auth refresh is blocking
            await asyncio.to_thread(self._credentials.refresh, Request())
        return {"Authorization": f"Bearer {self._credentials.token}"}

    def _handle_response(self, response: httpx.Response) -> None:
        """Raise typed errors for non-success responses."""
        if response.status_code in (401, 403):
            raise AuthenticationError(self.service_name, f"HTTP {response.status_code}")
        if response.status_code == 404:
            raise NotFoundError(self.service_name, "topic not found")
        if response.status_code != 200:
            raise ApiResponseError(self.service_name, response.status_code, response.text)

    async def publish(
        self, topic: str, data: bytes, attributes: dict[str, str] | None = None,
    ) -> str:
        """Publish one message and return its server-assigned message id."""
        if not self._project_id:
            raise ConfigError("GCP project id is not configured")

        message: dict = {"data": base64.b64encode(data).decode("ascii")}
        if attributes:
            message["attributes"] = attributes

        response = await self._client.post(
            f"/v1/projects/{self._project_id}/topics/{topic}:publish",
            headers=await self._auth_headers(),
            json={"messages": [message]},
        )
        self._handle_response(response)

        message_ids = response.json().get("messageIds") or []
        if not message_ids:
            raise ApiResponseError(self.service_name, response.status_code, "no message id returned")
        return message_ids[0]

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
