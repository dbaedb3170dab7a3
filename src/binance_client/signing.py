from __future__ import annotations

import hashlib
import hmac


def signature_payload(query: str, form: str) -> str:
    # no separator: an empty part contributes nothing
    return f"{query}{form}"


def sign(secret_key: str, message: str) -> str:
    """HMAC-SHA256 of `message` keyed with `secret_key`, as lowercase hex."""
    mac = hmac.new(secret_key.encode("utf-8"), message.encode("utf-8"), hashlib.sha256)
    return mac.hexdigest()
