"""Per-type content validation."""
import pytest

from apps.backend.errors import ValidationError
from apps.backend.services.content_rules import ContentRuleViolation, check_content, validate_messages

VALID_CONTENT = [
    {"type": "text", "text": {"body": "hello"}},
    {"type": "image", "image": {"link": "https://cdn.example/a.png"}},
    {"type": "audio", "audio": {"link": "http://cdn.example/a.ogg"}},
    {"type": "video", "video": {"link": "https://cdn.example/a.mp4"}},
    {"type": "document", "document": {"link": "https://cdn.example/a.pdf", "filename": "a.pdf"}},
    {"type": "sticker", "sticker": {"link": "https://cdn.example/a.webp"}},
    {"type": "location", "location": {"latitude": "12.97", "longitude": "77.59"}},
    {"type": "contacts", "contacts": [{"name": {"formatted_name": "Asha"}}]},
    {
        "type": "interactive",
        "interactive": {"type": "button", "body": {"text": "Pick"}, "action": {"buttons": []}},
    },
    {
        "type": "template",
        "template": {
            "namespace": "ns",
            "name": "order_update",
            "language": {"policy": "deterministic", "code": "en"},
            "components": [],
        },
    },
    {"type": "reaction", "reaction": {"emoji": "+1"}},
]

INVALID_CONTENT = [
    ({"type": "text", "text": {"body": ""}}, "content.text.body"),
    ({"type": "text", "text": {"body": "   "}}, "content.text.body"),
    ({"type": "text", "text": "hello"}, "content.text"),
    ({"type": "image", "image": {"link": "ftp://cdn.example/a.png"}}, "content.image.link"),
    ({"type": "document", "document": {}}, "content.document.link"),
    ({"type": "location", "location": {"latitude": 12.9, "longitude": "77.5"}}, "content.location.latitude"),
    ({"type": "location", "location": {"latitude": "12.9"}}, "content.location.longitude"),
    ({"type": "contacts", "contacts": []}, "content.contacts"),
    (
        {"type": "interactive", "interactive": {"type": "carousel", "body": {"text": "x"}, "action": {}}},
        "content.interactive.type",
    ),
    (
        {"type": "interactive", "interactive": {"type": "list", "body": {}, "action": {}}},
        "content.interactive.body.text",
    ),
    (
        {"type": "interactive", "interactive": {"type": "flow", "body": {"text": "x"}}},
        "content.interactive.action",
    ),
    (
        {"type": "template", "template": {"name": "n", "language": "en", "components": []}},
        "content.template.namespace",
    ),
    (
        {"type": "template", "template": {"namespace": "ns", "name": "n", "components": []}},
        "content.template.language",
    ),
    (
        {"type": "template", "template": {"namespace": "ns", "name": "n", "language": "en"}},
        "content.template.components",
    ),
]


@pytest.mark.parametrize("content", VALID_CONTENT, ids=lambda c: c["type"])
def test_valid_content_passes(content):
    check_content(content)


@pytest.mark.parametrize("content,field", INVALID_CONTENT)
def test_invalid_content_names_field(content, field):
    with pytest.raises(ContentRuleViolation) as exc:
        check_content(content)
    assert exc.value.field == field


def test_validate_messages_rejects_whole_batch():
    messages = [
        {"from": "+14155550000", "to": "+14155550001", "content": {"type": "text", "text": {"body": "ok"}}},
        {"from": "+14155550000", "to": "+14155550002", "content": {"type": "text", "text": {}}},
    ]
    with pytest.raises(ValidationError) as exc:
        validate_messages(messages)
    assert exc.value.details == {
        "index": 1,
        "field": "content.text.body",
        "reason": "is required and must be a non-empty string",
    }
