"""Plan job construction.

Everything here is pure: no I/O and no clock reads. Identical inputs give an
identical job, so redeliveries of one PR commit always share a ``plan_id``.
"""

from planhook.config import AppConfig, DEFAULT_GITHUB_API_BASE_URL
from planhook.models.github import PullRequestRef, RepositoryRef, WebhookDelivery
from planhook.models.job import (
    InstallationCredential,
    JobInstallation,
    JobPullRequest,
    JobRepository,
    JobWork,
    PlanJob,
)

SHA_PREFIX_LENGTH = 7


def plan_id_for(pr_number: int, head_sha: str | None) -> str:
    """Idempotency key for a plan of one PR commit.

    >>> plan_id_for(42, "abcdef1234567")
    'pr-42-abcdef1'
    >>> plan_id_for(42, None)
    'pr-42-'
    """
    return f"pr-{pr_number}-{(head_sha or '')[:SHA_PREFIX_LENGTH]}"


def request_id_for(delivery: WebhookDelivery, repository: RepositoryRef) -> str:
    """Correlation id: the delivery id, else ``<repo id>-<received ms>``."""
    if delivery.delivery_id:
        return delivery.delivery_id
    received_ms = int(delivery.received_at.timestamp() * 1000)
    return f"{repository.id if repository.id is not None else 0}-{received_ms}"


def build_plan_job(
    delivery: WebhookDelivery,
    repository: RepositoryRef,
    pull_request: PullRequestRef,
    credential: InstallationCredential,
    config: AppConfig,
) -> PlanJob:
    plan_id = plan_id_for(pull_request.number, pull_request.head_sha)
    return PlanJob(
        request_id=request_id_for(delivery, repository),
        plan_id=plan_id,
        repo=JobRepository(
            full_name=repository.full_name,
            clone_url=repository.clone_url,
            default_branch=repository.default_branch,
        ),
        pull_request=JobPullRequest(
            number=pull_request.number,
            head_sha=pull_request.head_sha,
            head_ref=pull_request.head_ref,
            base_ref=pull_request.base_ref,
        ),
        installation=JobInstallation(
            id=credential.installation_id,
            token=credential.token,
        ),
        work=JobWork(dir=".", tool_version=config.tool_version, plan_id=plan_id),
        github_api_base_url=config.github_api_base_url or DEFAULT_GITHUB_API_BASE_URL,
    )
