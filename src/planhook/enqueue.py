"""The enqueue chain: mint credential, build job, publish.

``PlanEnqueuer.enqueue`` never raises. Every failure comes back as a failed
``EnqueueResult`` so the router is the one place that turns it into a log
record.
"""

from dataclasses import dataclass
from typing import Protocol

from planhook.config import AppConfig
from planhook.models.github import (
    PullRequestRef,
    RepositoryRef,
    WebhookDelivery,
    installation_id_from,
)
from planhook.models.job import InstallationCredential
from planhook.plan_job import build_plan_job
from planhook.queue import PlanQueue


class CredentialMinter(Protocol):
    async def mint_installation_token(self, installation_id: int | None) -> InstallationCredential: ...


@dataclass(frozen=True)
class EnqueueResult:
    plan_id: str | None = None
    message_id: str | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def succeeded(cls, plan_id: str, message_id: str) -> "EnqueueResult":
        return cls(plan_id=plan_id, message_id=message_id)

    @classmethod
    def failed(cls, error: Exception, plan_id: str | None = None) -> "EnqueueResult":
        return cls(plan_id=plan_id, error=error)


class PlanEnqueuer:
    def __init__(self, config: AppConfig, minter: CredentialMinter, queue: PlanQueue) -> None:
        self._config = config
        self._minter = minter
        self._queue = queue

    async def enqueue(self, delivery: WebhookDelivery) -> EnqueueResult:
        """Run mint -> build -> publish strictly in order for one delivery."""
        plan_id = None
        try:
            repository = RepositoryRef.from_payload(delivery.body.get("repository"))
            pull_request = PullRequestRef.from_payload(delivery.body.get("pull_request"))
            credential = await self._minter.mint_installation_token(
                installation_id_from(delivery.body),
            )
            job = build_plan_job(delivery, repository, pull_request, credential, self._config)
            plan_id = job.plan_id
            message_id = await self._queue.publish(job)
        except Exception as e:  # noqa: BLE001 - converted to a failed result
            return EnqueueResult.failed(e, plan_id=plan_id)
        return EnqueueResult.succeeded(plan_id, message_id)
