"""End-to-end HTTP tests: ticket -> (simulated upload) -> completion."""

from config.settings import settings
from util.constants import InternalURIs, REQUEST_ID_HEADER


def _issue(client, payload) -> dict:
    res = client.post(InternalURIs.UPLOAD_TICKET, json=payload)
    assert res.status_code == 200, res.text
    return res.json()


def _uploaded_keys(ticket: dict) -> list[str]:
    u = ticket["uploads"]
    keys = [u[s]["key"] for s in ("envelope", "requestRaw", "requestHeaders", "responseRaw", "checksums")]
    return keys + [f["key"] for f in u["files"]]


def _complete_body(ticket: dict, keys: list[str]) -> dict:
    return {
        "failureId": ticket["failureId"],
        "project": "myapp",
        "env": "prod",
        "uploadedKeys": keys,
        "sha256": {k: "0" * 64 for k in keys},
        "request": {"method": "post", "url": "https://api.example.com/v1/orders"},
        "client": {"appVersion": "3.2.1", "platform": "ios"},
    }


def test_health(client):
    res = client.get(InternalURIs.HEALTH)

    assert res.status_code == 200
    body = res.json()
    assert body["ok"] is True
    assert body["status"] == "healthy"
    assert body["time"].endswith("Z")


def test_request_id_is_echoed(client):
    res = client.get(InternalURIs.HEALTH, headers={REQUEST_ID_HEADER: "rid-1"})
    assert res.headers[REQUEST_ID_HEADER] == "rid-1"

    res = client.get(InternalURIs.HEALTH)
    assert res.headers[REQUEST_ID_HEADER]


def test_ticket_response_shape(client, ticket_payload, storage):
    ticket = _issue(client, ticket_payload)

    assert len(ticket["failureId"]) == 32
    assert ticket["s3Prefix"].startswith("failures/myapp/prod/")
    assert ticket["s3Prefix"].endswith(f"/{ticket['failureId']}/")
    assert ticket["expiresInSeconds"] == settings.PRESIGN_TTL_SECONDS
    assert ticket["uploads"]["envelope"]["key"] == ticket["s3Prefix"] + "envelope.json"
    files = ticket["uploads"]["files"]
    assert len(files) == 1
    assert files[0]["key"] == ticket["s3Prefix"] + "files/photo.jpg"
    assert files[0]["filename"] == "photo.jpg"
    assert files[0]["putUrl"].startswith("https://storage.test/")
    assert len(storage.write_calls) == 4 + 1 + 1


def test_full_round_trip_notifies_once(client, ticket_payload, storage, notifier):
    ticket = _issue(client, ticket_payload)
    keys = _uploaded_keys(ticket)
    storage.present.update(keys)

    res = client.post(InternalURIs.UPLOAD_COMPLETE, json=_complete_body(ticket, keys))

    assert res.status_code == 200, res.text
    assert res.json() == {"status": "ok"}
    assert len(notifier.sent) == 1
    sent = notifier.sent[0]
    assert sent.bundle_id == ticket["failureId"]
    assert sent.request_method == "POST"
    assert sent.platform == "ios"
    assert sent.envelope_url


def test_missing_objects_lists_every_absent_key(client, ticket_payload, storage, notifier):
    ticket = _issue(client, ticket_payload)
    keys = _uploaded_keys(ticket)
    storage.present.update(keys[:2])

    res = client.post(InternalURIs.UPLOAD_COMPLETE, json=_complete_body(ticket, keys))

    assert res.status_code == 400
    body = res.json()
    assert body["ok"] is False
    assert body["error"] == "missing_objects"
    assert sorted(body["details"]) == sorted(keys[2:])
    assert notifier.sent == []


def test_notifier_failure_is_hidden_from_the_caller(client, ticket_payload, storage, notifier):
    notifier.fail = True
    ticket = _issue(client, ticket_payload)
    keys = _uploaded_keys(ticket)
    storage.present.update(keys)

    res = client.post(InternalURIs.UPLOAD_COMPLETE, json=_complete_body(ticket, keys))

    assert res.status_code == 200
    assert res.json() == {"status": "ok"}
    assert len(notifier.sent) == 1


def test_verification_error_is_internal(client, ticket_payload, storage):
    ticket = _issue(client, ticket_payload)
    keys = _uploaded_keys(ticket)
    storage.present.update(keys)
    storage.fail_exists.add(keys[0])

    res = client.post(InternalURIs.UPLOAD_COMPLETE, json=_complete_body(ticket, keys))

    assert res.status_code == 500
    assert res.json()["error"] == "verification_failed"
    assert keys[0] not in res.text


def test_presign_failure_is_internal_and_opaque(client, ticket_payload, storage):
    storage.fail_write = lambda key: True

    res = client.post(InternalURIs.UPLOAD_TICKET, json=ticket_payload)

    assert res.status_code == 500
    body = res.json()
    assert body == {
        "ok": False,
        "error": "presign_failed",
        "message": "Failed to generate upload URLs",
    }


def test_oversized_file_never_reaches_storage(client, ticket_payload, storage):
    ticket_payload["request"]["files"][0]["bytes"] = 60 * 1024 * 1024

    res = client.post(InternalURIs.UPLOAD_TICKET, json=ticket_payload)

    assert res.status_code == 400
    body = res.json()
    assert body["error"] == "validation_error"
    assert [d["field"] for d in body["details"]] == ["request.files[0].bytes"]
    assert storage.write_calls == []


def test_wrong_json_types_are_validation_errors(client, storage):
    res = client.post(
        InternalURIs.UPLOAD_TICKET,
        json={"project": "myapp", "env": "prod", "request": {"bodyBytes": "lots"}},
    )

    assert res.status_code == 400
    body = res.json()
    assert body["error"] == "validation_error"
    assert body["details"][0]["field"] == "request.bodyBytes"
    assert storage.write_calls == []


def test_malformed_json_is_rejected(client):
    res = client.post(
        InternalURIs.UPLOAD_TICKET,
        content=b"{not json",
        headers={"content-type": "application/json"},
    )

    assert res.status_code == 400
    assert res.json()["error"] == "validation_error"


def test_completion_rejects_keys_outside_the_bundle(client, ticket_payload, storage):
    ticket = _issue(client, ticket_payload)
    body = _complete_body(ticket, ["failures/otherapp/prod/2024/03/15/x/envelope.json"])

    res = client.post(InternalURIs.UPLOAD_COMPLETE, json=body)

    assert res.status_code == 400
    assert res.json()["details"] == [
        {"field": "uploadedKeys[0]", "message": "not part of this bundle"}
    ]
    assert storage.exists_calls == []


def test_api_key_enforced_outside_dev(client, ticket_payload, monkeypatch):
    monkeypatch.setattr(settings, "STAGE", "prod")
    monkeypatch.setattr(settings, "API_KEY", "s3cret")

    missing = client.post(InternalURIs.UPLOAD_TICKET, json=ticket_payload)
    wrong = client.post(
        InternalURIs.UPLOAD_TICKET, json=ticket_payload, headers={"X-Api-Key": "nope"}
    )
    ok = client.post(
        InternalURIs.UPLOAD_TICKET, json=ticket_payload, headers={"X-Api-Key": "s3cret"}
    )

    assert missing.status_code == 401
    assert missing.json()["message"] == "Missing API key"
    assert wrong.status_code == 401
    assert wrong.json()["message"] == "Invalid API key"
    assert ok.status_code == 200


def test_health_needs_no_api_key(client, monkeypatch):
    monkeypatch.setattr(settings, "STAGE", "prod")
    monkeypatch.setattr(settings, "API_KEY", "s3cret")

    assert client.get(InternalURIs.HEALTH).status_code == 200


def test_error_envelope_is_documented_on_upload_routes(client):
    spec = client.get("/openapi.json").json()

    for path in (InternalURIs.UPLOAD_TICKET, InternalURIs.UPLOAD_COMPLETE):
        responses = spec["paths"][path]["post"]["responses"]
        for code in ("400", "401", "500"):
            schema = responses[code]["content"]["application/json"]["schema"]
            assert schema == {"$ref": "#/components/schemas/ErrorResponse"}
