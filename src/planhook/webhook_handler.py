"""Webhook event routing for planhook."""

import enum
import logging
from typing import Protocol

from planhook.enqueue import EnqueueResult
from planhook.eventlog import EventLog
from planhook.models.github import WebhookDelivery, installation_id_from

logger = logging.getLogger(__name__)

PLAN_ACTIONS = ("opened", "synchronize", "reopened")
INSTALLATION_ACTIONS = ("created", "deleted")
INSTALLATION_REPOSITORIES_ACTIONS = ("added", "removed")


class RouteOutcome(enum.Enum):
    PLAN_ENQUEUED = "plan_enqueued"
    PLAN_FAILED = "plan_failed"
    PING = "ping"
    OBSERVED = "observed"
    IGNORED = "ignored"


class Enqueuer(Protocol):
    async def enqueue(self, delivery: WebhookDelivery) -> EnqueueResult: ...


class WebhookRouter:
    """Dispatch authenticated deliveries by ``(event, action)``.

    Holds no per-delivery state, so concurrent ``route`` calls are safe.
    Nothing raised on the plan path escapes ``route``.
    """

    def __init__(self, enqueuer: Enqueuer, events: EventLog | None = None) -> None:
        self._enqueuer = enqueuer
        self._events = events or EventLog()

    async def route(self, delivery: WebhookDelivery) -> RouteOutcome:
        event, action = delivery.event_name, delivery.action

        if event == "pull_request" and action in PLAN_ACTIONS:
            return await self._handle_plan(delivery)
        if event == "ping":
            self._events.info("ping", delivery=delivery.delivery_id)
            return RouteOutcome.PING
        if event == "installation" and action in INSTALLATION_ACTIONS:
            self._handle_installation(delivery)
            return RouteOutcome.OBSERVED
        if event == "installation_repositories" and action in INSTALLATION_REPOSITORIES_ACTIONS:
            self._handle_installation_repositories(delivery)
            return RouteOutcome.OBSERVED

        logger.debug("Ignoring event: %s/%s", event, action)
        return RouteOutcome.IGNORED

    async def _handle_plan(self, delivery: WebhookDelivery) -> RouteOutcome:
        fields = _pull_request_fields(delivery)
        self._events.info(delivery.key, **fields)

        try:
            result = await self._enqueuer.enqueue(delivery)
        except Exception as e:  # noqa: BLE001 - fail soft, GitHub must see a 2xx
            result = EnqueueResult.failed(e)

        if not result.ok:
            self._events.error("enqueue failed", result.error, plan_id=result.plan_id, **fields)
            return RouteOutcome.PLAN_FAILED
        return RouteOutcome.PLAN_ENQUEUED

    def _handle_installation(self, delivery: WebhookDelivery) -> None:
        account = _as_dict(_as_dict(delivery.body.get("installation")).get("account"))
        self._events.info(
            delivery.key,
            delivery=delivery.delivery_id,
            installation_id=installation_id_from(delivery.body),
            account=account.get("login"),
        )

    def _handle_installation_repositories(self, delivery: WebhookDelivery) -> None:
        key = f"repositories_{delivery.action}"
        repositories = [
            r.get("full_name")
            for r in delivery.body.get(key) or []
            if isinstance(r, dict) and r.get("full_name")
        ]
        self._events.info(
            delivery.key,
            delivery=delivery.delivery_id,
            installation_id=installation_id_from(delivery.body),
            repositories=repositories,
        )


def _as_dict(value: object) -> dict:
    return value if isinstance(value, dict) else {}


def _pull_request_fields(delivery: WebhookDelivery) -> dict:
    """Best-effort log fields; never raises on a malformed payload."""
    repository = _as_dict(delivery.body.get("repository"))
    pull_request = _as_dict(delivery.body.get("pull_request"))
    owner = _as_dict(repository.get("owner")).get("login")
    name = repository.get("name")
    return {
        "delivery": delivery.delivery_id,
        "repo": f"{owner}/{name}" if owner and name else repository.get("full_name"),
        "pr_number": pull_request.get("number"),
        "head_sha": _as_dict(pull_request.get("head")).get("sha"),
    }
