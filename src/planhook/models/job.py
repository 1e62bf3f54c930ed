"""Plan job message placed on the queue, and the credential it embeds."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, SecretStr, field_serializer


class InstallationCredential(BaseModel):
    """Short-lived installation token. Minted per enqueue attempt, never cached."""

    model_config = ConfigDict(frozen=True)

    installation_id: int
    token: SecretStr
    expires_at: datetime | None = None


class JobRepository(BaseModel):
    model_config = ConfigDict(frozen=True)

    full_name: str
    clone_url: str
    default_branch: str


class JobPullRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    number: int
    head_sha: str | None = None
    head_ref: str | None = None
    base_ref: str | None = None


class JobInstallation(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    token: SecretStr

    @field_serializer("token", when_used="json")
    def _reveal_token(self, token: SecretStr) -> str:
        # Only the queue encoding sees the raw token; repr and dicts stay masked.
        return token.get_secret_value()


class JobWork(BaseModel):
    model_config = ConfigDict(frozen=True)

    dir: str = "."
    tool_version: str = ""
    plan_id: str


class PlanJob(BaseModel):
    """Work order for one infrastructure plan run of one PR commit."""

    model_config = ConfigDict(frozen=True)

    request_id: str
    plan_id: str
    repo: JobRepository
    pull_request: JobPullRequest
    installation: JobInstallation
    work: JobWork
    github_api_base_url: str
