"""Outbound email through a Membrane (integration.app) Gmail connection.

The webhook never raises on a failed send: every operation that talks to
Membrane returns a ``SendResult`` and the caller decides what to log.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Protocol

import requests

from membrane_webhook.auth.tokens import WorkspaceToken, issue_workspace_token
from membrane_webhook.config import Settings
from membrane_webhook.email.messages import EmailMessage

logger = logging.getLogger(__name__)

class MembraneError(Exception):
    pass

class MembraneConfigError(MembraneError):
    pass

class ConnectionNotFoundError(MembraneError):
    pass

class MembraneApiError(MembraneError):
    def __init__(self, status_code: int, detail: str):
        super().__init__(f"membrane api returned {status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail

@dataclass(frozen=True)
class SendResult:
    ok: bool
    to: str
    error: str | None = None
    response: Any = None

    @classmethod
    def success(cls, to: str, response: Any = None) -> "SendResult":
        return cls(ok=True, to=to, response=response)

    @classmethod
    def failure(cls, to: str, error: BaseException | str) -> "SendResult":
        if isinstance(error, BaseException):
            msg = str(error).strip()
            error = f"{error.__class__.__name__}{(': ' + msg) if msg else ''}"
        return cls(ok=False, to=to, error=error)

class EmailSender(Protocol):
    def send_email(self, connection_id: str, message: EmailMessage) -> SendResult: ...

    def find_default_connection(self, integration_key: str) -> str: ...

    def deliver(self, message: EmailMessage) -> SendResult: ...

class MembraneEmailSender:
    """Email Sender backed by the Membrane REST API.

    The HTTP session and workspace token are created on first use and shared
    by every request the process serves. A lock keeps concurrent first use
    (FastAPI threadpool) down to a single token.
    """

    def __init__(self, settings: Settings, session: requests.Session | None = None):
        self.settings = settings
        self._session = session
        self._token: WorkspaceToken | None = None
        self._lock = threading.Lock()

    @property
    def configured(self) -> bool:
        return bool(self.settings.membrane_workspace_key and self.settings.membrane_workspace_secret)

    def _client(self) -> tuple[requests.Session, str]:
        margin = self.settings.membrane_token_refresh_margin_seconds
        session, token = self._session, self._token
        if session is not None and token is not None and token.is_fresh(margin):
            return session, token.value

        with self._lock:
            if self._token is None or not self._token.is_fresh(margin):
                if not self.configured:
                    raise MembraneConfigError("membrane workspace key/secret not configured")
                logger.info("Issuing Membrane workspace token", extra={"customerId": self.settings.customer_id})
                self._token = issue_workspace_token(self.settings)
            if self._session is None:
                self._session = requests.Session()
            return self._session, self._token.value

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        session, token = self._client()
        url = f"{self.settings.membrane_api_uri.rstrip('/')}{path}"
        r = session.request(
            method,
            url,
            headers={"authorization": f"Bearer {token}"},
            timeout=self.settings.membrane_request_timeout_seconds,
            **kwargs,
        )
        if not r.ok:
            raise MembraneApiError(r.status_code, r.text[:500])
        if not r.content:
            return None
        return r.json()

    def find_default_connection(self, integration_key: str) -> str:
        data = self._request(
            "GET",
            "/connections",
            params={"integrationKey": integration_key, "limit": 1},
        )
        items = (data or {}).get("items") or []
        if not items:
            raise ConnectionNotFoundError(
                f"no {integration_key} connection found, set up the integration first"
            )
        return items[0]["id"]

    def send_email(self, connection_id: str, message: EmailMessage) -> SendResult:
        action = self.settings.email_action_key
        try:
            resp = self._request(
                "POST",
                f"/connections/{connection_id}/actions/{action}/run",
                json={"to": [message.to], "subject": message.subject, "body": message.body},
            )
        except (MembraneError, requests.RequestException, ValueError) as e:
            return SendResult.failure(message.to, e)

        logger.info("Email sent via Membrane", extra={"connectionId": connection_id, "action": action})
        return SendResult.success(message.to, resp)

    def deliver(self, message: EmailMessage) -> SendResult:
        connection_id = self.settings.gmail_connection_id
        if not connection_id:
            try:
                connection_id = self.find_default_connection(self.settings.email_integration_key)
            except (MembraneError, requests.RequestException, ValueError, KeyError) as e:
                return SendResult.failure(message.to, e)

        return self.send_email(connection_id, message)
