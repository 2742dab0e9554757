"""Request trace_id stored on the ASGI scope; reuses a caller-supplied X-Trace-Id."""
import re
import uuid

SCOPE_KEY = "trace_id"
_INBOUND_HEADER = b"x-trace-id"
_SAFE_RE = re.compile(r"^[A-Za-z0-9._-]{4,64}$")


def _inbound_trace_id(scope: dict) -> str | None:
    for raw_k, raw_v in scope.get("headers") or []:
        if raw_k.lower() != _INBOUND_HEADER:
            continue
        value = raw_v.decode("latin-1").strip()
        return value if _SAFE_RE.match(value) else None
    return None


def ensure_trace_id(scope: dict) -> str:
    tid = scope.get(SCOPE_KEY)
    if tid and isinstance(tid, str):
        return tid
    tid = _inbound_trace_id(scope) or str(uuid.uuid4())[:16]
    scope[SCOPE_KEY] = tid
    return tid
