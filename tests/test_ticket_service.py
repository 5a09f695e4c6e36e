import pytest

from model.api import UploadTicketRequest
from service.ticket_service import TicketService
from tests.fakes import FakeStorage
from util.enums import Slot
from util.errors import AuthorizationFailed


def _request(payload: dict) -> UploadTicketRequest:
    return UploadTicketRequest.model_validate(payload)


@pytest.mark.asyncio
async def test_ticket_has_one_upload_per_slot(storage, fixed_clock, ticket_payload):
    svc = TicketService(storage, ttl_seconds=900, clock=fixed_clock)

    ticket = await svc.issue_ticket(_request(ticket_payload))

    assert len(ticket.uploads) == 4 + 1 + 1
    assert len(storage.write_calls) == len(ticket.uploads)
    assert ticket.expires_in_seconds == 900
    assert all(ttl == 900 for _, _, ttl in storage.write_calls)


@pytest.mark.asyncio
async def test_ticket_count_scales_with_declared_files(storage, fixed_clock, ticket_payload):
    ticket_payload["request"]["files"] = [
        {"filename": f"f{i}.bin", "bytes": 1} for i in range(5)
    ]
    svc = TicketService(storage, ttl_seconds=60, clock=fixed_clock)

    ticket = await svc.issue_ticket(_request(ticket_payload))

    assert len(ticket.uploads) == 4 + 1 + 5
    assert [u.filename for u in ticket.by_slot(Slot.FILE)] == [
        f"f{i}.bin" for i in range(5)
    ]


@pytest.mark.asyncio
async def test_ticket_keys_share_the_identity_prefix(storage, fixed_clock, ticket_payload):
    svc = TicketService(storage, ttl_seconds=900, clock=fixed_clock)

    ticket = await svc.issue_ticket(_request(ticket_payload))

    bid = ticket.identity.bundle_id
    assert ticket.key_prefix == f"failures/myapp/prod/2024/03/15/{bid}/"
    assert all(u.key.startswith(ticket.key_prefix) for u in ticket.uploads)
    assert ticket.single(Slot.ENVELOPE).key == ticket.key_prefix + "envelope.json"
    assert ticket.by_slot(Slot.FILE)[0].key == ticket.key_prefix + "files/photo.jpg"


@pytest.mark.asyncio
async def test_content_types_per_slot(storage, fixed_clock, ticket_payload):
    svc = TicketService(storage, ttl_seconds=900, clock=fixed_clock)

    ticket = await svc.issue_ticket(_request(ticket_payload))

    assert ticket.single(Slot.ENVELOPE).content_type == "application/json"
    assert ticket.single(Slot.REQUEST_RAW).content_type == "application/json"
    assert ticket.single(Slot.REQUEST_HEADERS).content_type == "application/json"
    assert ticket.single(Slot.CHECKSUMS).content_type == "application/json"
    assert ticket.single(Slot.RESPONSE_RAW).content_type == "application/octet-stream"
    assert ticket.by_slot(Slot.FILE)[0].content_type == "image/jpeg"


@pytest.mark.asyncio
async def test_missing_content_types_fall_back_to_binary(storage, fixed_clock, ticket_payload):
    ticket_payload["request"]["contentType"] = ""
    ticket_payload["request"]["files"][0]["contentType"] = ""
    svc = TicketService(storage, ttl_seconds=900, clock=fixed_clock)

    ticket = await svc.issue_ticket(_request(ticket_payload))

    assert ticket.single(Slot.REQUEST_RAW).content_type == "application/octet-stream"
    assert ticket.by_slot(Slot.FILE)[0].content_type == "application/octet-stream"


@pytest.mark.asyncio
async def test_each_ticket_gets_a_fresh_bundle_id(storage, fixed_clock, ticket_payload):
    svc = TicketService(storage, ttl_seconds=900, clock=fixed_clock)

    a = await svc.issue_ticket(_request(ticket_payload))
    b = await svc.issue_ticket(_request(ticket_payload))

    assert a.identity.bundle_id != b.identity.bundle_id
    assert a.key_prefix != b.key_prefix


@pytest.mark.asyncio
async def test_any_capability_failure_fails_the_whole_ticket(fixed_clock, ticket_payload):
    storage = FakeStorage(fail_write=lambda key: key.endswith("checksums.json"))
    svc = TicketService(storage, ttl_seconds=900, clock=fixed_clock)

    with pytest.raises(AuthorizationFailed) as exc_info:
        await svc.issue_ticket(_request(ticket_payload))

    assert exc_info.value.status_code == 500
    assert exc_info.value.code == "presign_failed"
    # No storage detail leaks into the client-facing message.
    assert "checksums" not in exc_info.value.message
