"""Send worker: one delivery attempt per RQ job."""
import pytest
from sqlalchemy.orm import sessionmaker

from apps.backend.database import Base, get_test_engine
from apps.backend.errors import CredentialNotFound, UpstreamError
from apps.backend.models.credential import Credential
from apps.backend.models.message import Message
from apps.backend.models.tenant import Tenant
from apps.backend.services import message_store
from apps.backend.services.send_queue import SendJob
from apps.backend.services.send_worker import run_send_job
from apps.backend.services.token_crypto import encrypt_token
from apps.worker import jobs

SENDER = "+14155550000"


class FakeGateway:
    def __init__(self, response=None, error=None):
        self.response = response if response is not None else {
            "response": {"whatsapp": {"messages": [{"code": 202, "data": {"sid": "wamid-1"}}]}}
        }
        self.error = error
        self.calls = []

    def send_message(self, cred, payload):
        self.calls.append((cred, payload))
        if self.error:
            raise self.error
        return self.response


@pytest.fixture
def session_factory():
    engine = get_test_engine()
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine)
    with factory() as db:
        db.add(Tenant(id="t1", name="Acme"))
        db.add(Credential(
            id="c1", tenant_id="t1", label="main", api_key="key", api_token_encrypted=encrypt_token("secret"),
            subdomain="acme", sid="acme1", region="api.in.exotel.com",
        ))
        db.commit()
    return factory


def _queued(factory, status="QUEUED", **payload_extra) -> str:
    payload = {
        "credentialId": "c1",
        "whatsapp": {"messages": [
            {"from": SENDER, "to": "+14155550001", "content": {"type": "text", "text": {"body": "hi"}}}
        ]},
    }
    payload.update(payload_extra)
    with factory() as db:
        msg = message_store.create_message(db, tenant_id="t1", credential_id="c1", payload=payload)
        msg.status = status
        db.commit()
        return msg.id


def _load(factory, message_id) -> Message:
    with factory() as db:
        msg = db.get(Message, message_id)
        db.expunge(msg)
        return msg


@pytest.mark.timeout(10)
def test_successful_send_marks_sent(session_factory):
    message_id = _queued(session_factory)
    gateway = FakeGateway()

    result = run_send_job(SendJob(message_id, "c1"), session_factory, gateway)

    assert result == "sent"
    msg = _load(session_factory, message_id)
    assert msg.status == "SENT"
    assert msg.external_id == "wamid-1"
    assert msg.sent_at is not None

    cred, payload = gateway.calls[0]
    assert (cred.api_key, cred.api_token, cred.subdomain, cred.sid) == ("key", "secret", "acme", "acme1")
    assert cred.region == "api.in.exotel.com"
    # None-valued envelope keys are not sent upstream
    assert set(payload) == {"whatsapp"}


@pytest.mark.timeout(10)
def test_optional_envelope_fields_are_forwarded(session_factory):
    message_id = _queued(session_factory, custom_data={"order": 7}, status_callback="https://cb.example/x")
    gateway = FakeGateway()
    run_send_job(SendJob(message_id, "c1"), session_factory, gateway)
    payload = gateway.calls[0][1]
    assert payload["custom_data"] == {"order": 7}
    assert payload["status_callback"] == "https://cb.example/x"


@pytest.mark.timeout(10)
def test_missing_external_id_still_marks_sent(session_factory):
    message_id = _queued(session_factory)
    result = run_send_job(SendJob(message_id, "c1"), session_factory, FakeGateway(response={"ok": True}))
    assert result == "sent"
    msg = _load(session_factory, message_id)
    assert msg.status == "SENT"
    assert msg.external_id is None


@pytest.mark.timeout(10)
def test_cancelled_message_is_not_sent(session_factory):
    message_id = _queued(session_factory, status="CANCELLED")
    gateway = FakeGateway()
    assert run_send_job(SendJob(message_id, "c1"), session_factory, gateway) == "cancelled"
    assert gateway.calls == []
    assert _load(session_factory, message_id).status == "CANCELLED"


@pytest.mark.timeout(10)
def test_missing_message_is_ignored(session_factory):
    gateway = FakeGateway()
    assert run_send_job(SendJob("nope", "c1"), session_factory, gateway) == "missing"
    assert gateway.calls == []


@pytest.mark.timeout(10)
def test_already_sent_message_is_not_resent(session_factory):
    message_id = _queued(session_factory, status="SENT")
    gateway = FakeGateway()
    assert run_send_job(SendJob(message_id, "c1"), session_factory, gateway) == "already_sent"
    assert gateway.calls == []


@pytest.mark.timeout(10)
def test_in_flight_message_is_skipped(session_factory):
    message_id = _queued(session_factory, status="SENDING")
    gateway = FakeGateway()
    assert run_send_job(SendJob(message_id, "c1"), session_factory, gateway) == "skipped"
    assert gateway.calls == []


@pytest.mark.timeout(10)
def test_upstream_error_marks_failed_and_reraises(session_factory):
    message_id = _queued(session_factory)
    gateway = FakeGateway(error=UpstreamError("Invalid number", upstream_status=400))

    with pytest.raises(UpstreamError):
        run_send_job(SendJob(message_id, "c1"), session_factory, gateway)

    msg = _load(session_factory, message_id)
    assert msg.status == "FAILED"
    assert msg.failed_reason == "Invalid number"


@pytest.mark.timeout(10)
def test_unknown_credential_marks_failed(session_factory):
    message_id = _queued(session_factory)
    gateway = FakeGateway()

    with pytest.raises(CredentialNotFound):
        run_send_job(SendJob(message_id, "c-gone"), session_factory, gateway)

    assert gateway.calls == []
    msg = _load(session_factory, message_id)
    assert msg.status == "FAILED"
    assert "c-gone" in msg.failed_reason


@pytest.mark.timeout(10)
def test_credential_of_other_tenant_is_not_used(session_factory):
    with session_factory() as db:
        db.add(Tenant(id="t2", name="Globex"))
        db.add(Credential(
            id="c2", tenant_id="t2", label="x", api_key="k2", api_token_encrypted=encrypt_token("s2"),
            subdomain="globex", sid="g1",
        ))
        db.commit()
    message_id = _queued(session_factory)

    with pytest.raises(CredentialNotFound):
        run_send_job(SendJob(message_id, "c2"), session_factory, FakeGateway())


@pytest.mark.timeout(10)
def test_retry_after_failure_clears_reason(session_factory):
    message_id = _queued(session_factory)
    with pytest.raises(UpstreamError):
        run_send_job(SendJob(message_id, "c1"), session_factory, FakeGateway(error=UpstreamError("timeout")))

    assert run_send_job(SendJob(message_id, "c1"), session_factory, FakeGateway()) == "sent"
    msg = _load(session_factory, message_id)
    assert msg.status == "SENT"
    assert msg.failed_reason is None


@pytest.mark.timeout(10)
def test_rq_entry_point_wires_dependencies(session_factory, monkeypatch):
    message_id = _queued(session_factory)
    gateway = FakeGateway()
    monkeypatch.setattr(jobs, "get_session_factory", lambda: session_factory)
    monkeypatch.setattr(jobs.ExotelClient, "from_settings", classmethod(lambda cls, settings: gateway))

    assert jobs.process_send_job({"messageId": message_id, "credentialId": "c1"}) == "sent"
    assert len(gateway.calls) == 1
