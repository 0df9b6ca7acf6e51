import hmac
import hashlib
import json

from membrane_webhook.config import settings

def sign(raw: bytes, secret: str | None = None) -> str:
    secret = secret or settings.WEBHOOK_SECRET
    return hmac.new(secret.encode("utf-8"), raw, hashlib.sha256).hexdigest()

def post(client, raw: bytes, signature: str | None):
    headers = {"content-type": "application/json"}
    if signature is not None:
        headers["x-signature"] = signature
    return client.post("/webhooks/membrane", content=raw, headers=headers)

def test_org_created_example(client, email_sender, org_created_event):
    raw = json.dumps(org_created_event).encode("utf-8")
    r = post(client, raw, sign(raw))
    assert r.status_code == 200, r.text
    assert r.json() == {"ok": True}

    assert len(email_sender.sent) == 1
    msg = email_sender.sent[0]
    assert msg.to == "a@x.com"
    assert "Acme Inc" in msg.subject
    assert "Domains" not in msg.body
    assert "Trial" not in msg.body

def test_invitation_sends_one_email(client, email_sender, invite_event):
    raw = json.dumps(invite_event).encode("utf-8")
    r = post(client, raw, sign(raw))
    assert r.status_code == 200
    assert [m.to for m in email_sender.sent] == ["new.user@example.com"]

def test_access_request_sends_per_admin(client, email_sender, access_requested_event):
    raw = json.dumps(access_requested_event).encode("utf-8")
    r = post(client, raw, sign(raw))
    assert r.status_code == 200
    assert len(email_sender.sent) == len(access_requested_event["orgAdmins"])

def test_access_request_without_admins_sends_nothing(client, email_sender, access_requested_event):
    access_requested_event["orgAdmins"] = []
    raw = json.dumps(access_requested_event).encode("utf-8")
    r = post(client, raw, sign(raw))
    assert r.status_code == 200
    assert email_sender.sent == []

def test_one_admin_failure_does_not_block_others(client, email_sender, access_requested_event):
    email_sender.fail_for = {"admin2@example.com"}
    raw = json.dumps(access_requested_event).encode("utf-8")
    r = post(client, raw, sign(raw))
    assert r.status_code == 200
    assert r.json() == {"ok": True}
    assert [m.to for m in email_sender.sent] == ["admin1@example.com", "admin3@example.com"]

def test_unknown_type_is_acknowledged(client, email_sender):
    raw = b'{"type": "flow-run-finished", "id": "fr_1"}'
    r = post(client, raw, sign(raw))
    assert r.status_code == 200
    assert r.json() == {"ok": True}
    assert email_sender.sent == []

def test_missing_signature_is_401(client, email_sender, invite_event):
    raw = json.dumps(invite_event).encode("utf-8")
    r = post(client, raw, None)
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid signature"}
    assert email_sender.sent == []

def test_invalid_signature_on_valid_json_is_401(client, email_sender, invite_event):
    raw = json.dumps(invite_event).encode("utf-8")
    r = post(client, raw, sign(raw, "wrong-secret"))
    assert r.status_code == 401
    assert email_sender.sent == []

def test_invalid_json_with_valid_signature_is_400(client):
    raw = b'{"type": "org-created",'
    r = post(client, raw, sign(raw))
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid JSON"}

def test_invalid_json_with_invalid_signature_is_401(client):
    r = post(client, b"{broken", "00" * 32)
    assert r.status_code == 401

def test_missing_required_field_is_400(client, email_sender, org_created_event):
    del org_created_event["user"]
    raw = json.dumps(org_created_event).encode("utf-8")
    r = post(client, raw, sign(raw))
    assert r.status_code == 400
    assert email_sender.sent == []

def test_signature_covers_exact_bytes(client, org_created_event):
    compact = json.dumps(org_created_event, separators=(",", ":")).encode("utf-8")
    pretty = json.dumps(org_created_event, indent=2).encode("utf-8")
    r = post(client, pretty, sign(compact))
    assert r.status_code == 401

    r = post(client, pretty, sign(pretty))
    assert r.status_code == 200

def test_open_mode_accepts_unsigned(client, email_sender, invite_event, monkeypatch):
    monkeypatch.setattr(settings, "WEBHOOK_SECRET", None)
    raw = json.dumps(invite_event).encode("utf-8")
    r = post(client, raw, None)
    assert r.status_code == 200
    assert len(email_sender.sent) == 1

def test_get_not_allowed(client):
    r = client.get("/webhooks/membrane")
    assert r.status_code == 405

def test_odd_admin_address_still_notifies_others(client, email_sender, access_requested_event):
    access_requested_event["orgAdmins"][2]["email"] = "ops@intranet"
    email_sender.fail_for = {"ops@intranet"}
    raw = json.dumps(access_requested_event).encode("utf-8")
    r = post(client, raw, sign(raw))
    assert r.status_code == 200
    assert r.json() == {"ok": True}
    assert [m.to for m in email_sender.sent] == ["admin1@example.com", "admin2@example.com"]

def test_deeply_nested_json_returns_json_400(client, email_sender):
    depth = 100000
    raw = b'{"type": "x", "a": ' + b"[" * depth + b"]" * depth + b"}"
    r = post(client, raw, sign(raw))
    assert r.status_code == 400
    assert r.headers["content-type"].startswith("application/json")
    assert r.json() == {"error": "Invalid JSON"}
    assert email_sender.sent == []
