from __future__ import annotations

import json
import os
import sys
import time

import requests
from rich import print

from membrane_webhook.auth.signature import compute_signature

BASE = os.getenv("API_BASE_URL", "http://127.0.0.1:8000")
SECRET = os.getenv("WEBHOOK_SECRET", "")
TO = os.getenv("DEMO_EMAIL", "demo@example.com")

SAMPLES: dict[str, dict] = {
    "user-invited-to-org": {
        "type": "user-invited-to-org",
        "invitationUrl": "https://app.example.com/invite/demo",
        "issuer": {"name": "Demo Admin", "email": "admin@example.com"},
        "user": {"email": TO},
        "org": {"id": "org_demo", "name": "Demo Org", "trialEndDate": "2030-01-01"},
    },
    "org-access-requested": {
        "type": "org-access-requested",
        "user": {"id": "usr_demo", "email": "requester@example.com", "name": "Requester"},
        "orgAdmins": [{"email": TO, "orgs": [{"id": "org_demo", "name": "Demo Org"}]}],
    },
    "org-created": {
        "type": "org-created",
        "name": "Demo Org",
        "workspaceName": "demo-ws",
        "orgId": "org_demo",
        "org": {"id": "org_demo", "name": "Demo Org", "domains": ["example.com"]},
        "user": {"name": "Demo", "email": TO},
    },
    "unknown": {"type": "something-new"},
}

def wait_ready(timeout_s: float = 30.0) -> None:
    deadline = time.time() + timeout_s
    last_err: Exception | None = None

    while time.time() < deadline:
        try:
            r = requests.get(f"{BASE}/health", timeout=10)
            if r.status_code == 200:
                return
        except Exception as e:
            last_err = e
        time.sleep(0.5)

    if last_err:
        raise RuntimeError(f"api not reachable after {timeout_s}s (last error: {last_err})")
    raise RuntimeError(f"api not reachable after {timeout_s}s")

def send(event_type: str) -> requests.Response:
    raw = json.dumps(SAMPLES[event_type]).encode("utf-8")
    headers = {"content-type": "application/json"}
    if SECRET:
        headers["x-signature"] = compute_signature(raw, SECRET)
    # send the exact signed bytes
    return requests.post(f"{BASE}/webhooks/membrane", data=raw, headers=headers, timeout=30)

def main(argv: list[str]) -> None:
    types = argv or list(SAMPLES)
    unknown = [t for t in types if t not in SAMPLES]
    if unknown:
        raise SystemExit(f"unknown sample(s): {', '.join(unknown)}; choose from {', '.join(SAMPLES)}")

    wait_ready()
    print(f"[green]api up at {BASE}[/green]")
    if not SECRET:
        print("[yellow]WEBHOOK_SECRET unset, sending unsigned[/yellow]")

    for t in types:
        r = send(t)
        color = "green" if r.status_code == 200 else "red"
        print(f"[{color}]{t}: {r.status_code} {r.text}[/{color}]")

if __name__ == "__main__":
    main(sys.argv[1:])
