"""Unified API error envelope (compatible with legacy clients)."""
from __future__ import annotations

from typing import Any


def error_envelope(
    *,
    code: str,
    message: str,
    trace_id: str,
    details: Any = None,
    legacy_error: bool = True,
) -> dict:
    out = {
        "code": code,
        "message": message,
        "trace_id": trace_id,
    }
    if details is not None:
        out["details"] = details
    # Backward compatibility: the admin UI reads `error` as a display string.
    if legacy_error:
        out["error"] = message
    return out
