"""Ordered response-path rules for Exotel payloads.

Exotel returns the same logical field at different depths depending on the
endpoint and API revision. Each table below lists candidate paths in priority
order; `first_present` returns the value at the first path that resolves to a
non-empty value.
"""
from __future__ import annotations

from typing import Any, Sequence

Path = tuple[str | int, ...]

EXTERNAL_MESSAGE_ID_PATHS: tuple[Path, ...] = (
    ("id",),
    ("sid",),
    ("data", "id"),
    ("data", "sid"),
    ("response", "whatsapp", "messages", 0, "data", "sid"),
    ("response", "whatsapp", "messages", 0, "data", "id"),
    ("messages", 0, "id"),
)

TEMPLATE_ID_PATHS: tuple[Path, ...] = (
    ("id",),
    ("data", "id"),
    ("response", "whatsapp", "templates", 0, "data", "id"),
)

ONBOARDING_URL_PATHS: tuple[Path, ...] = (
    ("url",),
    ("onboarding_url",),
    ("data", "url"),
    ("data", "onboarding_url"),
    ("response", "whatsapp", "isv", "data", "url"),
    ("response", "whatsapp", "isv", "data", "onboarding_url"),
)

ONBOARDING_TOKEN_PATHS: tuple[Path, ...] = (
    ("token",),
    ("access_token",),
    ("data", "token"),
    ("data", "access_token"),
    ("response", "whatsapp", "isv", "data", "token"),
    ("response", "whatsapp", "isv", "data", "access_token"),
)

ERROR_MESSAGE_PATHS: tuple[Path, ...] = (
    ("message",),
    ("error", "message"),
    ("error",),
    ("response", "whatsapp", "messages", 0, "error_data", "message"),
    ("response", "whatsapp", "messages", 0, "error_data", "description"),
    ("response", "whatsapp", "templates", 0, "error_data", "message"),
    ("response", "whatsapp", "isv", "error_data", "message"),
)


def dig(data: Any, path: Path) -> Any:
    cur = data
    for step in path:
        if isinstance(step, int):
            if not isinstance(cur, list) or step >= len(cur) or step < -len(cur):
                return None
            cur = cur[step]
        else:
            if not isinstance(cur, dict) or step not in cur:
                return None
            cur = cur[step]
    return cur


def first_present(data: Any, paths: Sequence[Path]) -> Any:
    for path in paths:
        value = dig(data, path)
        if value is None or value == "":
            continue
        if isinstance(value, (dict, list)):
            continue
        return value
    return None


def extract_external_id(response: Any) -> str | None:
    value = first_present(response, EXTERNAL_MESSAGE_ID_PATHS)
    return str(value) if value is not None else None


def extract_template_id(response: Any) -> str | None:
    value = first_present(response, TEMPLATE_ID_PATHS)
    return str(value) if value is not None else None


def extract_onboarding(response: Any) -> tuple[str | None, str | None]:
    """Return (url, token) from an ISV onboarding response."""
    url = first_present(response, ONBOARDING_URL_PATHS)
    token = first_present(response, ONBOARDING_TOKEN_PATHS)
    return (str(url) if url is not None else None, str(token) if token is not None else None)


def extract_error_message(body: Any) -> str | None:
    value = first_present(body, ERROR_MESSAGE_PATHS)
    return str(value) if value is not None else None
