"""Message submission payloads: canonical and legacy shapes.

Two request shapes are accepted by POST /messages:

* canonical: ``{credentialId, custom_data?, status_callback?, whatsapp: {messages: [...]}}``
  with 1-100 ``{from, to, content}`` entries;
* legacy: ``{credentialId, to, from?, type, body, custom_data?, status_callback?}``,
  a single message whose content lives in ``body`` or ``body.content``.

``parse_submission`` turns a raw body into one of the two variants (canonical
is tried first). ``normalize_payload`` then produces the canonical dict that
is stored on the message and sent to Exotel as-is.
"""
from __future__ import annotations

import re
from typing import Annotated, Any, Union
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator
from pydantic import ValidationError as PydanticValidationError

from apps.backend.errors import ValidationError
from apps.backend.services.content_rules import validate_messages

E164_PATTERN = r"^\+[1-9][0-9]{6,14}$"
_E164_RE = re.compile(r"\+[1-9][0-9]{6,14}")

E164Phone = Annotated[str, StringConstraints(pattern=E164_PATTERN)]
NonEmptyStr = Annotated[str, StringConstraints(min_length=1)]

MAX_BATCH = 100


def is_e164(value: Any) -> bool:
    return isinstance(value, str) and bool(_E164_RE.fullmatch(value))


class MessageContent(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: NonEmptyStr


class OutboundMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    from_: E164Phone = Field(alias="from")
    to: E164Phone
    content: MessageContent


class WhatsAppBatch(BaseModel):
    messages: list[OutboundMessage] = Field(min_length=1, max_length=MAX_BATCH)


class _SubmissionBase(BaseModel):
    credentialId: NonEmptyStr
    custom_data: Union[str, dict[str, Any], None] = None
    status_callback: str | None = None

    @field_validator("status_callback")
    @classmethod
    def _absolute_url(cls, v: str | None) -> str | None:
        if v is None:
            return v
        parsed = urlparse(v)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError("status_callback must be an absolute URL")
        return v


class CanonicalSubmission(_SubmissionBase):
    whatsapp: WhatsAppBatch


class LegacySubmission(_SubmissionBase):
    to: E164Phone
    from_: E164Phone | None = Field(default=None, alias="from")
    type: NonEmptyStr
    body: dict[str, Any]


Submission = Union[CanonicalSubmission, LegacySubmission]


def _flatten(err: PydanticValidationError) -> list[dict]:
    return [
        {"loc": ".".join(str(p) for p in e.get("loc", ())), "msg": e.get("msg", "")}
        for e in err.errors()
    ]


def parse_submission(raw: Any) -> Submission:
    try:
        return CanonicalSubmission.model_validate(raw)
    except PydanticValidationError as canonical_err:
        try:
            return LegacySubmission.model_validate(raw)
        except PydanticValidationError as legacy_err:
            raise ValidationError(
                "Invalid payload",
                details={"canonical": _flatten(canonical_err), "legacy": _flatten(legacy_err)},
            ) from None


def _envelope(sub: Submission, messages: list[dict]) -> dict:
    out: dict[str, Any] = {"credentialId": sub.credentialId}
    if sub.custom_data is not None:
        out["custom_data"] = sub.custom_data
    if sub.status_callback is not None:
        out["status_callback"] = sub.status_callback
    out["whatsapp"] = {"messages": messages}
    return out


def normalize_legacy(sub: LegacySubmission) -> dict:
    raw_body = dict(sub.body or {})
    body_from = raw_body.get("from")
    sender = sub.from_ or (body_from if isinstance(body_from, str) else None)
    if not is_e164(sender):
        raise ValidationError("`from` is required and must be E.164 format for legacy payloads")

    nested = raw_body.get("content")
    if isinstance(nested, dict):
        content = dict(nested)
    else:
        content = {k: v for k, v in raw_body.items() if k != "from"}
    if not (isinstance(content.get("type"), str) and content["type"]):
        content["type"] = sub.type

    return _envelope(sub, [{"from": sender, "to": sub.to, "content": content}])


def normalize_submission(sub: Submission) -> dict:
    if isinstance(sub, LegacySubmission):
        return normalize_legacy(sub)
    messages = [m.model_dump(by_alias=True) for m in sub.whatsapp.messages]
    return _envelope(sub, messages)


def normalize_payload(raw: Any) -> dict:
    """Raw request body -> canonical payload, or ValidationError."""
    payload = normalize_submission(parse_submission(raw))
    validate_messages(payload["whatsapp"]["messages"])
    return payload
