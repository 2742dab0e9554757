"""HMAC-SHA256 signature check for Exotel callbacks."""
from __future__ import annotations

import hashlib
import hmac
import re

SIGNATURE_HEADER = "X-Exotel-Signature"
_HEX_RE = re.compile(r"[0-9a-fA-F]{64}")


def compute_signature(body: bytes, secret: str) -> str:
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def verify_signature(body: bytes, signature: str | None, secret: str) -> bool:
    """Hex digest, optionally prefixed with ``sha256=``."""
    if not signature:
        return False
    provided = signature.strip()
    if provided.lower().startswith("sha256="):
        provided = provided[7:]
    if not _HEX_RE.fullmatch(provided):
        return False
    return hmac.compare_digest(compute_signature(body, secret).encode(), provided.lower().encode())
