"""Centralized configuration via Pydantic BaseSettings.

Each concern has its own settings class with an env_prefix. ``AppConfig``
collects them once at startup into a single immutable value that is passed
explicitly to every component.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, SecretStr, model_validator
from pydantic_settings import BaseSettings

from planhook.errors import ConfigError

DEFAULT_GITHUB_API_BASE_URL = "https://api.github.com"
DEFAULT_PUBSUB_API_BASE_URL = "https://pubsub.googleapis.com"


def _read_secret(path: str | Path, default: str = "") -> str:
    """Read a secret from a file, returning default if missing."""
    p = Path(path)
    if p.exists():
        return p.read_text().strip()
    return default


class GithubSettings(BaseSettings):
    """GitHub App authentication settings."""

    app_id: str = ""
    private_key: str = ""
    webhook_secret: str = ""
    api_base_url: str = DEFAULT_GITHUB_API_BASE_URL

    # Mounted secret files, read when the direct values are empty
    app_id_file: str = "/secrets/app-id"
    private_key_file: str = "/secrets/private-key.pem"
    webhook_secret_file: str = "/secrets/webhook-secret"

    model_config = {"env_prefix": "GITHUB_"}

    @model_validator(mode="after")
    def _load_file_secrets(self) -> "GithubSettings":
        """Load secrets from files if the direct values are empty."""
        if not self.app_id:
            self.app_id = _read_secret(self.app_id_file)
        if not self.private_key:
            self.private_key = _read_secret(self.private_key_file)
        if not self.webhook_secret:
            self.webhook_secret = _read_secret(self.webhook_secret_file)
        return self


class GcpSettings(BaseSettings):
    """GCP service account settings."""

    sa_key_file: str = "/secrets/gcp-service-account.json"
    project_id: str = ""
    project_file: str = "/secrets/gcp-project"

    model_config = {"env_prefix": "GCP_"}

    @model_validator(mode="after")
    def _load_project_id(self) -> "GcpSettings":
        if not self.project_id:
            self.project_id = _read_secret(self.project_file)
        return self


class PubSubSettings(BaseSettings):
    """Plan queue settings."""

    topic: str = "plan"
    api_base_url: str = DEFAULT_PUBSUB_API_BASE_URL
    # PUBSUB_EMULATOR_HOST, same variable the Google client libraries honour
    emulator_host: str = ""

    model_config = {"env_prefix": "PUBSUB_"}


class PlanhookSettings(BaseSettings):
    """Top-level planhook app settings."""

    port: int = 8080
    log_level: str = "INFO"
    log_buffer_size: int = 200
    tool_version: str = Field(default="")

    model_config = {"env_prefix": "PLANHOOK_"}


class AppConfig(BaseModel):
    """Process-wide configuration, read-only after startup."""

    model_config = ConfigDict(frozen=True)

    webhook_secret: SecretStr
    app_id: str = ""
    private_key: SecretStr = SecretStr("")
    github_api_base_url: str = DEFAULT_GITHUB_API_BASE_URL

    gcp_project_id: str = ""
    gcp_sa_key_file: str = ""
    pubsub_topic: str = "plan"
    pubsub_api_base_url: str = DEFAULT_PUBSUB_API_BASE_URL
    pubsub_emulator_host: str = ""

    port: int = 8080
    log_level: str = "INFO"
    log_buffer_size: int = 200
    tool_version: str = ""

    @property
    def has_app_credentials(self) -> bool:
        return bool(self.app_id and self.private_key.get_secret_value())

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Load every settings class and freeze the result.

        Raises ConfigError when the webhook secret is missing; the process
        must not accept traffic without it.
        """
        gh = GithubSettings()
        if not gh.webhook_secret:
            raise ConfigError("GITHUB_WEBHOOK_SECRET is required")
        gcp = GcpSettings()
        pubsub = PubSubSettings()
        app = PlanhookSettings()
        return cls(
            webhook_secret=SecretStr(gh.webhook_secret),
            app_id=gh.app_id,
            private_key=SecretStr(gh.private_key),
            github_api_base_url=gh.api_base_url.rstrip("/") or DEFAULT_GITHUB_API_BASE_URL,
            gcp_project_id=gcp.project_id,
            gcp_sa_key_file=gcp.sa_key_file,
            pubsub_topic=pubsub.topic or "plan",
            pubsub_api_base_url=pubsub.api_base_url.rstrip("/"),
            pubsub_emulator_host=pubsub.emulator_host,
            port=app.port,
            log_level=app.log_level.upper(),
            log_buffer_size=app.log_buffer_size,
            tool_version=app.tool_version,
        )
