from __future__ import annotations

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from membrane_webhook.config import settings
from membrane_webhook.email.sender import EmailSender
from membrane_webhook.services.dispatcher import WebhookDispatcher

router = APIRouter(prefix="/webhooks", tags=["webhooks"])

def get_email_sender(request: Request) -> EmailSender:
    return request.app.state.email_sender

def get_dispatcher(email_sender: EmailSender = Depends(get_email_sender)) -> WebhookDispatcher:
    return WebhookDispatcher(email_sender, settings.WEBHOOK_SECRET)

@router.post("/membrane")
async def membrane_webhook(
    request: Request,
    dispatcher: WebhookDispatcher = Depends(get_dispatcher),
    x_signature: str | None = Header(default=None, alias="x-signature"),
):
    # signature is checked against these exact bytes, before any json decoding
    raw = await request.body()

    # email sends block on http, keep them off the event loop
    result = await run_in_threadpool(dispatcher.handle, raw, x_signature)
    return JSONResponse(status_code=result.status_code, content=result.body)
