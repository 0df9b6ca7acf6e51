from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from membrane_webhook.auth.signature import verify_signature
from membrane_webhook.email.messages import (
    EmailMessage,
    access_request_emails,
    invitation_email,
    welcome_email,
)
from membrane_webhook.email.sender import EmailSender, SendResult
from membrane_webhook.schemas.events import (
    InvalidEventError,
    MembraneEvent,
    OrgAccessRequested,
    OrgCreated,
    UnknownEvent,
    UserInvitedToOrg,
    parse_event,
)

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class DispatchResult:
    status_code: int
    body: dict[str, Any]
    sends: list[SendResult] = field(default_factory=list)

def error_result(status_code: int, message: str) -> DispatchResult:
    # fresh body per response, never shared between requests
    return DispatchResult(status_code, {"error": message})

class WebhookDispatcher:
    """Verify, parse and act on one Membrane webhook request.

    Email sends are best effort: Membrane does not retry webhooks, so a
    failed send is logged and the event is still acknowledged with 200.
    """

    def __init__(self, email_sender: EmailSender, secret: str | None):
        self.email_sender = email_sender
        self.secret = secret

    def handle(self, raw_body: bytes, signature: str | None) -> DispatchResult:
        if not verify_signature(raw_body, signature, self.secret):
            logger.warning("Invalid X-Signature for Membrane webhook")
            return error_result(401, "Invalid signature")

        try:
            event = parse_event(raw_body)
        except InvalidEventError as e:
            logger.error("Failed to parse webhook JSON", extra={"reason": str(e)})
            return error_result(400, "Invalid JSON")

        try:
            sends = self.dispatch(event)
        except Exception:
            logger.exception("Error processing Membrane webhook")
            return error_result(500, "Processing error")

        return DispatchResult(200, {"ok": True}, sends)

    def dispatch(self, event: MembraneEvent) -> list[SendResult]:
        if isinstance(event, UserInvitedToOrg):
            logger.info(
                "User invited to org",
                extra={
                    "invitationUrl": event.invitation_url,
                    "userEmail": str(event.user.email),
                    "orgId": event.org.id,
                    "orgName": event.org.name,
                },
            )
            return [self._send(invitation_email(event), "invitation")]

        if isinstance(event, OrgAccessRequested):
            logger.info(
                "Org access requested",
                extra={
                    "requesterId": event.user.id,
                    "requesterEmail": str(event.user.email),
                    "adminCount": len(event.org_admins),
                },
            )
            # one failure scope per admin
            return [self._send(msg, "access request notification") for msg in access_request_emails(event)]

        if isinstance(event, OrgCreated):
            logger.info(
                "Org created",
                extra={
                    "orgId": event.org.id,
                    "orgName": event.org.name,
                    "workspaceName": event.workspace_name,
                    "creatorEmail": str(event.user.email),
                },
            )
            return [self._send(welcome_email(event), "welcome")]

        if isinstance(event, UnknownEvent):
            logger.info("Unhandled Membrane event type", extra={"eventType": event.type})
            return []

        raise TypeError(f"unsupported event: {type(event).__name__}")

    def _send(self, message: EmailMessage, kind: str) -> SendResult:
        try:
            result = self.email_sender.deliver(message)
        except Exception as e:
            result = SendResult.failure(message.to, e)

        if result.ok:
            logger.info("Sent %s email", kind, extra={"kind": kind, "to": message.to})
        else:
            logger.error("Failed to send %s email", kind, extra={"kind": kind, "to": message.to, "error": result.error})
        return result
