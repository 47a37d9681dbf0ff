from __future__ import annotations


def test_preserves_incoming_request_id_header(client):
    incoming_id = "test-request-id-123"
    resp = client.get("/health", headers={"X-Request-ID": incoming_id})

    assert resp.status_code == 200
    assert resp.headers.get("X-Request-ID") == incoming_id


def test_generates_request_id_when_missing(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    generated = resp.headers.get("X-Request-ID")
    assert generated
    assert resp.headers.get("X-Request-Duration-ms") is not None


def test_error_bodies_carry_the_request_id(client):
    resp = client.post(
        "/api/send-otp",
        json={"phone": "0712345678", "action": "verify", "otp": "123456"},
        headers={"X-Request-ID": "req-otp-1"},
    )

    assert resp.status_code == 400
    assert resp.json()["request_id"] == "req-otp-1"
