"""Plan job serialization and publication to the plan topic."""

import logging
from typing import Protocol

from planhook.models.job import PlanJob

log = logging.getLogger(__name__)


class MessagePublisher(Protocol):
    async def publish(
        self, topic: str, data: bytes, attributes: dict[str, str] | None = None,
    ) -> str: ...


def encode_plan_job(job: PlanJob) -> bytes:
    """Compact UTF-8 JSON in declaration order; absent optional fields are omitted."""
    return job.model_dump_json(exclude_none=True).encode("utf-8")


class PlanQueue:
    """Hands plan jobs to the queue transport, one publish call per job."""

    def __init__(self, publisher: MessagePublisher, topic: str = "plan") -> None:
        self._publisher = publisher
        self._topic = topic

    @property
    def topic(self) -> str:
        return self._topic

    async def publish(self, job: PlanJob) -> str:
        message_id = await self._publisher.publish(
            self._topic,
            encode_plan_job(job),
            attributes={"plan_id": job.plan_id, "request_id": job.request_id},
        )
        log.debug("Published %s to %s as %s", job.plan_id, self._topic, message_id)
        return message_id
