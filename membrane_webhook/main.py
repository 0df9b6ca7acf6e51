import logging

from fastapi import FastAPI

from membrane_webhook.config import settings
from membrane_webhook.email.sender import EmailSender, MembraneEmailSender
from membrane_webhook.logging_config import configure_logging
from membrane_webhook.routes.health import router as health_router
from membrane_webhook.routes.webhooks import router as webhooks_router

logger = logging.getLogger(__name__)

def create_app(email_sender: EmailSender | None = None) -> FastAPI:
    configure_logging(settings.log_level, settings.service_name)

    if not settings.WEBHOOK_SECRET:
        # open mode: any caller can trigger emails
        log = logger.error if settings.app_env == "prod" else logger.warning
        log("WEBHOOK_SECRET is not set, webhook signature verification is disabled")

    app = FastAPI(title="membrane-webhook", version="0.1.0")
    # one long-lived sender per process, shared across requests
    app.state.email_sender = email_sender or MembraneEmailSender(settings)
    app.include_router(health_router)
    app.include_router(webhooks_router)
    return app

app = create_app()
