import jwt
from datetime import datetime, timedelta, timezone
from dataclasses import dataclass

from membrane_webhook.config import Settings

ALGORITHM = "HS512"

def now_utc() -> datetime:
    return datetime.now(timezone.utc)

@dataclass(frozen=True)
class WorkspaceToken:
    value: str
    expires_at: datetime

    def is_fresh(self, margin_seconds: int = 0) -> bool:
        return now_utc() + timedelta(seconds=margin_seconds) < self.expires_at

def issue_workspace_token(settings: Settings) -> WorkspaceToken:
    iat = now_utc()
    exp = iat + timedelta(seconds=settings.membrane_token_expires_seconds)
    payload = {
        "id": settings.customer_id,
        "name": settings.customer_name,
        "iss": settings.membrane_workspace_key,
        "iat": int(iat.timestamp()),
        "exp": int(exp.timestamp()),
    }
    token = jwt.encode(payload, settings.membrane_workspace_secret, algorithm=ALGORITHM)
    return WorkspaceToken(value=token, expires_at=exp)
