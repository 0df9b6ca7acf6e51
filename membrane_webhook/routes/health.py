from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from membrane_webhook.config import settings

router = APIRouter(tags=["health"])

@router.get("/health")
def health() -> dict:
    return {"status": "ok"}

# readiness probe
@router.get("/ready")
def ready(request: Request):
    sender = request.app.state.email_sender
    checks: dict[str, bool] = {
        "membrane_credentials": bool(getattr(sender, "configured", True)),
    }
    ok = all(checks.values())

    body: dict = {"status": "ok" if ok else "unready", "checks": checks}
    if not settings.WEBHOOK_SECRET:
        body["warnings"] = ["WEBHOOK_SECRET unset, signature verification disabled"]

    # 503 when emails could never be sent
    return JSONResponse(status_code=200 if ok else 503, content=body)
