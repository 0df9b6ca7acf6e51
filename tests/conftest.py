
import pytest
from fastapi.testclient import TestClient

from membrane_webhook.config import settings
from membrane_webhook.email.messages import EmailMessage
from membrane_webhook.email.sender import SendResult
from membrane_webhook.main import create_app

WEBHOOK_SECRET = "whsec_membrane_test"

class FakeEmailSender:
    """Records every delivered message; addresses in fail_for raise."""

    configured = True

    def __init__(self, fail_for: set[str] | None = None, connection_id: str = "conn_test"):
        self.fail_for = fail_for or set()
        self.connection_id = connection_id
        self.sent: list[EmailMessage] = []

    def find_default_connection(self, integration_key: str) -> str:
        return self.connection_id

    def send_email(self, connection_id: str, message: EmailMessage) -> SendResult:
        if message.to in self.fail_for:
            raise RuntimeError(f"smtp down for {message.to}")
        self.sent.append(message)
        return SendResult.success(message.to)

    def deliver(self, message: EmailMessage) -> SendResult:
        return self.send_email(self.connection_id, message)

@pytest.fixture(autouse=True)
def webhook_secret(monkeypatch) -> str:
    monkeypatch.setattr(settings, "WEBHOOK_SECRET", WEBHOOK_SECRET)
    return WEBHOOK_SECRET

@pytest.fixture()
def email_sender() -> FakeEmailSender:
    return FakeEmailSender()

@pytest.fixture()
def client(email_sender) -> TestClient:
    app = create_app(email_sender=email_sender)
    return TestClient(app)

@pytest.fixture()
def org_created_event() -> dict:
    return {
        "type": "org-created",
        "name": "Acme",
        "workspaceName": "ws1",
        "orgId": "o1",
        "org": {"id": "o1", "name": "Acme Inc"},
        "user": {"email": "a@x.com"},
    }

@pytest.fixture()
def invite_event() -> dict:
    return {
        "type": "user-invited-to-org",
        "invitationUrl": "https://app.example.com/invite/abc123",
        "issuer": {"name": "Ada", "email": "ada@example.com"},
        "user": {"email": "new.user@example.com"},
        "org": {"id": "org_1", "name": "Acme Inc"},
    }

@pytest.fixture()
def access_requested_event() -> dict:
    return {
        "type": "org-access-requested",
        "user": {"id": "usr_9", "email": "req@example.com"},
        "orgAdmins": [
            {"email": "admin1@example.com", "orgs": [{"id": "o1", "name": "Acme"}]},
            {"email": "admin2@example.com", "orgs": [{"id": "o1", "name": "Acme"}, {"id": "o2", "name": "Beta"}]},
            {"email": "admin3@example.com", "orgs": []},
        ],
    }
