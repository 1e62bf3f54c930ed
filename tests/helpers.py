"""Webhook payload builders for tests."""

from typing import Any

from planhook.models.github import WebhookDelivery

WEBHOOK_SECRET = "s3cret"


def pr_payload(
    action: str = "opened",
    number: int = 42,
    head_sha: str | None = "abcdef1234567",
    owner: str = "acme",
    name: str = "widgets",
    installation_id: int | None = 99,
    **repository_extra: Any,
) -> dict[str, Any]:
    """Build a minimal pull_request webhook body."""
    head: dict[str, Any] = {"ref": "feature/x"}
    if head_sha is not None:
        head["sha"] = head_sha
    body: dict[str, Any] = {
        "action": action,
        "repository": {"id": 555, "owner": {"login": owner}, "name": name, **repository_extra},
        "pull_request": {"number": number, "head": head, "base": {"ref": "main"}},
    }
    if installation_id is not None:
        body["installation"] = {"id": installation_id}
    return body


def pr_delivery(delivery_id: str | None = "d-1", **kwargs: Any) -> WebhookDelivery:
    return WebhookDelivery.from_request("pull_request", delivery_id, pr_payload(**kwargs))
