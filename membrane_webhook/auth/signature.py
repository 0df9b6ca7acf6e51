from __future__ import annotations

import hashlib
import hmac

def compute_signature(raw_body: bytes, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()

def verify_signature(raw_body: bytes, signature: str | None, secret: str | None) -> bool:
    """Check an X-Signature header against the exact raw request body.

    An empty secret disables verification entirely (open mode). That is only
    acceptable outside production; the app logs a warning at startup.
    """
    if not secret:
        return True

    if not signature:
        return False

    expected = compute_signature(raw_body, secret).encode("utf-8")
    supplied = signature.encode("utf-8")

    # constant-time on content only
    if len(supplied) != len(expected):
        return False

    return hmac.compare_digest(supplied, expected)
