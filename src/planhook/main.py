"""planhook GitHub App: FastAPI webhook endpoint with signature verification."""

import hashlib
import hmac
import json
import logging
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.responses import PlainTextResponse

from planhook.clients.github import GitHubAppClient
from planhook.clients.pubsub import PubSubClient
from planhook.config import AppConfig
from planhook.enqueue import PlanEnqueuer
from planhook.errors import ConfigError
from planhook.eventlog import configure_logging, recent_logs
from planhook.models.github import WebhookDelivery
from planhook.queue import PlanQueue
from planhook.webhook_handler import WebhookRouter

log = logging.getLogger(__name__)


def verify_signature(secret: bytes, payload: bytes, signature: str | None) -> bool:
    """Verify GitHub webhook HMAC-SHA256 signature."""
    if not signature or not signature.startswith("sha256="):
        return False
    expected = hmac.new(secret, payload, hashlib.sha256).hexdigest()
    return hmac.compare_digest(f"sha256={expected}", signature)


def create_app(config: AppConfig, router: WebhookRouter | None = None) -> FastAPI:
    """Build the app. Without an explicit router, clients are built from config."""
    clients: list = []
    if router is None:
        github = GitHubAppClient.from_config(config)
        pubsub = PubSubClient.from_config(config)
        clients = [github, pubsub]
        enqueuer = PlanEnqueuer(config, github, PlanQueue(pubsub, topic=config.pubsub_topic))
        router = WebhookRouter(enqueuer)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        for client in clients:
            await client.close()

    app = FastAPI(title="planhook", description="Pull request plan job dispatcher", lifespan=lifespan)
    secret = config.webhook_secret.get_secret_value().encode()

    @app.get("/healthz", response_class=PlainTextResponse)
    async def healthz() -> str:
        return "ok"

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/debug/logs")
    async def debug_logs() -> dict[str, list]:
        return {"logs": recent_logs()}

    @app.post("/webhook")
    async def webhook(
        request: Request,
        x_hub_signature_256: str = Header(None),
        x_github_event: str = Header(None),
        x_github_delivery: str = Header(None),
    ) -> dict[str, str]:
        payload = await request.body()

        if not verify_signature(secret, payload, x_hub_signature_256):
            raise HTTPException(status_code=401, detail="Invalid signature")
        if not x_github_event:
            raise HTTPException(status_code=400, detail="Missing event header")

        try:
            body = json.loads(payload)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid JSON payload")
        if not isinstance(body, dict):
            raise HTTPException(status_code=400, detail="Invalid JSON payload")

        delivery = WebhookDelivery.from_request(x_github_event, x_github_delivery, body)
        await router.route(delivery)
        return {"status": "ok"}

    return app


def run() -> None:
    """Process entry point: load config, fail fast without a webhook secret, serve."""
    configure_logging()
    try:
        config = AppConfig.from_env()
    except ConfigError as e:
        log.error("%s", e)
        sys.exit(1)

    configure_logging(config.log_level, config.log_buffer_size)
    if not config.has_app_credentials:
        log.warning("GitHub App credentials not configured; plan jobs will not be enqueued")

    app = create_app(config)
    log.info("app listening on :%d", config.port)
    uvicorn.run(app, host="0.0.0.0", port=config.port, log_config=None)


if __name__ == "__main__":
    run()
