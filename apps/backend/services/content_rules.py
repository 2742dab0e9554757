"""Per-type WhatsApp content checks applied to every message of a batch."""
from __future__ import annotations

from typing import Any, Callable
from urllib.parse import urlparse

from apps.backend.errors import ValidationError

MEDIA_TYPES = ("image", "audio", "video", "document", "sticker")
INTERACTIVE_TYPES = ("button", "list", "flow")


class ContentRuleViolation(Exception):
    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"{field} {reason}")
        self.field = field
        self.reason = reason


def _section(content: dict, name: str) -> dict:
    value = content.get(name)
    if not isinstance(value, dict):
        raise ContentRuleViolation(f"content.{name}", "is required and must be an object")
    return value


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _is_http_url(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    parsed = urlparse(value.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _check_text(content: dict) -> None:
    text = _section(content, "text")
    if not _non_empty_str(text.get("body")):
        raise ContentRuleViolation("content.text.body", "is required and must be a non-empty string")


def _check_media(content: dict) -> None:
    kind = content["type"]
    media = _section(content, kind)
    if not _is_http_url(media.get("link")):
        raise ContentRuleViolation(f"content.{kind}.link", "is required and must be an http(s) URL")


def _check_location(content: dict) -> None:
    location = _section(content, "location")
    for key in ("latitude", "longitude"):
        if not _non_empty_str(location.get(key)):
            raise ContentRuleViolation(f"content.location.{key}", "is required and must be a string")


def _check_contacts(content: dict) -> None:
    contacts = content.get("contacts")
    if not isinstance(contacts, list) or not contacts:
        raise ContentRuleViolation("content.contacts", "is required and must be a non-empty array")
    for i, contact in enumerate(contacts):
        if not isinstance(contact, dict):
            raise ContentRuleViolation(f"content.contacts[{i}]", "must be an object")


def _check_interactive(content: dict) -> None:
    interactive = _section(content, "interactive")
    if interactive.get("type") not in INTERACTIVE_TYPES:
        raise ContentRuleViolation(
            "content.interactive.type", f"must be one of {', '.join(INTERACTIVE_TYPES)}"
        )
    body = interactive.get("body")
    if not isinstance(body, dict) or not _non_empty_str(body.get("text")):
        raise ContentRuleViolation("content.interactive.body.text", "is required and must be a non-empty string")
    if not isinstance(interactive.get("action"), dict):
        raise ContentRuleViolation("content.interactive.action", "is required and must be an object")


def _check_template(content: dict) -> None:
    template = _section(content, "template")
    for key in ("namespace", "name"):
        if not _non_empty_str(template.get(key)):
            raise ContentRuleViolation(f"content.template.{key}", "is required and must be a non-empty string")
    if not template.get("language"):
        raise ContentRuleViolation("content.template.language", "is required")
    if not isinstance(template.get("components"), list):
        raise ContentRuleViolation("content.template.components", "is required and must be an array")


CONTENT_RULES: dict[str, Callable[[dict], None]] = {
    "text": _check_text,
    "location": _check_location,
    "contacts": _check_contacts,
    "interactive": _check_interactive,
    "template": _check_template,
    **{kind: _check_media for kind in MEDIA_TYPES},
}


def check_content(content: dict) -> None:
    """Raise ContentRuleViolation for the first broken rule. Unknown types pass."""
    rule = CONTENT_RULES.get(content.get("type"))
    if rule:
        rule(content)


def validate_messages(messages: list[dict]) -> None:
    """All-or-nothing: the first bad message rejects the whole batch."""
    for index, message in enumerate(messages):
        try:
            check_content(message.get("content") or {})
        except ContentRuleViolation as v:
            raise ValidationError(
                f"whatsapp.messages[{index}].{v.field} {v.reason}",
                details={"index": index, "field": v.field, "reason": v.reason},
            ) from None
