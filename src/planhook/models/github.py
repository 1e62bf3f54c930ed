"""Pydantic models for GitHub webhook payloads."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, ValidationError

from planhook.errors import InvalidPayloadError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WebhookDelivery(BaseModel):
    """One authenticated webhook delivery.

    ``delivery_id`` is unique per delivery attempt, not per logical event:
    GitHub redeliveries of the same event carry new ids.
    """

    model_config = ConfigDict(frozen=True)

    delivery_id: str | None = None
    event_name: str
    action: str | None = None
    body: dict[str, Any] = Field(default_factory=dict)
    received_at: datetime = Field(default_factory=_utcnow)

    @classmethod
    def from_request(
        cls, event_name: str, delivery_id: str | None, body: dict[str, Any],
    ) -> "WebhookDelivery":
        action = body.get("action") if isinstance(body, dict) else None
        return cls(
            delivery_id=delivery_id or None,
            event_name=event_name,
            action=action if isinstance(action, str) else None,
            body=body if isinstance(body, dict) else {},
        )

    @property
    def key(self) -> str:
        """``event.action`` routing key, or the bare event name."""
        if self.action:
            return f"{self.event_name}.{self.action}"
        return self.event_name


class RepositoryRef(BaseModel):
    """Repository fields used by a plan job, with GitHub fallbacks applied."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    owner_login: str = Field(min_length=1)
    name: str = Field(min_length=1)
    clone_url: str
    default_branch: str = "main"

    @property
    def full_name(self) -> str:
        return f"{self.owner_login}/{self.name}"

    @classmethod
    def from_payload(cls, repository: dict[str, Any] | None) -> "RepositoryRef":
        """Build from ``event.repository``.

        A missing ``clone_url`` is derived from owner and name, a missing
        ``default_branch`` becomes ``main``.
        """
        repository = repository or {}
        owner = (repository.get("owner") or {}).get("login") or ""
        name = repository.get("name") or ""
        try:
            return cls(
                id=repository.get("id"),
                owner_login=owner,
                name=name,
                clone_url=repository.get("clone_url") or f"https://github.com/{owner}/{name}.git",
                default_branch=repository.get("default_branch") or "main",
            )
        except ValidationError as e:
            raise InvalidPayloadError(f"invalid repository: {e.errors()[0]['msg']}") from e


class PullRequestRef(BaseModel):
    """Pull request fields used by a plan job.

    ``head_sha`` may be absent on some lifecycle edges; consumers treat it as
    possibly empty.
    """

    model_config = ConfigDict(frozen=True)

    number: PositiveInt
    head_sha: str | None = None
    head_ref: str | None = None
    base_ref: str | None = None

    @classmethod
    def from_payload(cls, pull_request: dict[str, Any] | None) -> "PullRequestRef":
        pull_request = pull_request or {}
        head = pull_request.get("head") or {}
        base = pull_request.get("base") or {}
        try:
            return cls(
                number=pull_request.get("number"),
                head_sha=head.get("sha") or None,
                head_ref=head.get("ref") or None,
                base_ref=base.get("ref") or None,
            )
        except ValidationError as e:
            error = e.errors()[0]
            field = ".".join(str(part) for part in error["loc"])
            raise InvalidPayloadError(f"invalid pull request {field}: {error['msg']}") from e


def installation_id_from(body: dict[str, Any]) -> int | None:
    """Return ``installation.id`` from an event body, or None."""
    installation = body.get("installation")
    if not isinstance(installation, dict):
        return None
    installation_id = installation.get("id")
    if isinstance(installation_id, int) and not isinstance(installation_id, bool):
        return installation_id
    return None
