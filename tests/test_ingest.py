import json

import httpx
import pytest
from fastapi.testclient import TestClient

from app.core.exceptions import ConfigurationError
from app.core.middleware import RateLimiter
from app.main import create_app

VALID_BODY = {"phone": "+14155552671", "authCode": "8842"}


def test_health_is_public(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["ok"] is True
    assert isinstance(data["ts"], int)
    assert data["ts"] > 1_600_000_000_000


def test_root_is_public(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "running"


def test_missing_token_is_rejected(client):
    response = client.post("/ingest", json=VALID_BODY)
    assert response.status_code == 401
    assert response.json() == {"error": "UNAUTHORIZED"}


@pytest.mark.parametrize("header", ["Bearer wrong", "test-entry-token", "bearer test-entry-token", "Bearer  test-entry-token"])
def test_wrong_token_is_rejected(client, header):
    response = client.post("/ingest", json=VALID_BODY, headers={"Authorization": header})
    assert response.status_code == 401
    assert response.json() == {"error": "UNAUTHORIZED"}


def test_auth_runs_before_body_validation(client):
    response = client.post("/ingest", json={"phone": 5, "extra": True})
    assert response.status_code == 401
    assert response.json() == {"error": "UNAUTHORIZED"}


def test_unknown_route_requires_auth(client, auth_headers):
    assert client.get("/nope").status_code == 401

    response = client.get("/nope", headers=auth_headers)
    assert response.status_code == 404
    assert response.json() == {"error": "NOT_FOUND"}


@pytest.mark.respx(assert_all_called=False)
@pytest.mark.parametrize("phone", ["0123", "123", "+0123456789", "14155 552671", "+1415555267a", ""])
def test_invalid_phone(client, auth_headers, destinations, respx_mock, phone):
    route = respx_mock.post(destinations[0].url)
    response = client.post("/ingest", json={"phone": phone, "authCode": "8842"}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "PHONE_INVALID"}
    assert not route.called


@pytest.mark.parametrize(
    "body",
    [
        {"phone": "+14155552671"},
        {"authCode": "8842"},
        {"phone": "+14155552671", "authCode": "123"},
        {"phone": "+14155552671", "authCode": "x" * 17},
        {"phone": "+14155552671", "authCode": None},
        {"phone": ["+14155552671"], "authCode": "8842"},
    ],
)
def test_malformed_body(client, auth_headers, body):
    response = client.post("/ingest", json=body, headers=auth_headers)
    assert response.status_code == 400
    data = response.json()
    assert data["error"] == "BODY_INVALID"
    assert len(data["detail"]) > 0


def test_invalid_json(client, auth_headers):
    response = client.post(
        "/ingest",
        content=b"{not json",
        headers={**auth_headers, "Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "BODY_INVALID"


def test_forwarded(client, auth_headers, destinations, respx_mock):
    dest_a = destinations[0]
    route = respx_mock.post(dest_a.url).mock(return_value=httpx.Response(200, json={"result": True}))

    response = client.post("/ingest", json=VALID_BODY, headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"status": "FORWARDED", "dest": dest_a.url, "data": {"result": True}}

    request = route.calls.last.request
    assert request.headers["Authorization"] == "Bearer tok-a"
    assert json.loads(request.content) == {
        "template_name": "codigo_de_verificacion",
        "broadcast_name": "codigo_de_verificacion",
        "receivers": [
            {
                "whatsappNumber": "14155552671",
                "customParams": [{"name": "1", "value": "8842"}],
            }
        ],
        "channel_number": dest_a.channel,
    }


def test_round_robin_order(client, auth_headers, destinations, respx_mock):
    dest_a, dest_b, dest_c = destinations
    routes = {
        dest.url: respx_mock.post(dest.url).mock(return_value=httpx.Response(200, json={"via": dest.channel}))
        for dest in (dest_a, dest_b, dest_c)
    }

    used = []
    for _ in range(4):
        response = client.post("/ingest", json=VALID_BODY, headers=auth_headers)
        assert response.status_code == 200
        used.append(response.json()["dest"])

    assert used == [dest_a.url, dest_b.url, dest_c.url, dest_a.url]
    assert routes[dest_a.url].call_count == 2
    assert routes[dest_b.url].call_count == 1
    assert routes[dest_c.url].call_count == 1

    sent_channel = json.loads(routes[dest_b.url].calls.last.request.content)["channel_number"]
    assert sent_channel == dest_b.channel
    assert routes[dest_c.url].calls.last.request.headers["Authorization"] == "Bearer tok-c"


def test_destination_error(client, auth_headers, destinations, respx_mock):
    dest_a = destinations[0]
    respx_mock.post(dest_a.url).mock(return_value=httpx.Response(500, json={"msg": "bad"}))

    response = client.post("/ingest", json=VALID_BODY, headers=auth_headers)

    assert response.status_code == 502
    assert response.json() == {"error": "WATI_ERROR", "dest": dest_a.url, "detail": {"msg": "bad"}}


def test_destination_error_with_non_json_body(client, auth_headers, destinations, respx_mock):
    dest_a = destinations[0]
    respx_mock.post(dest_a.url).mock(return_value=httpx.Response(503, text="<html>down</html>"))

    response = client.post("/ingest", json=VALID_BODY, headers=auth_headers)

    assert response.status_code == 502
    assert response.json() == {"error": "WATI_ERROR", "dest": dest_a.url, "detail": {}}


def test_failed_destination_keeps_its_turn(client, auth_headers, destinations, respx_mock):
    dest_a, dest_b = destinations[0], destinations[1]
    respx_mock.post(dest_a.url).mock(return_value=httpx.Response(500, json={"msg": "bad"}))
    respx_mock.post(dest_b.url).mock(return_value=httpx.Response(200, json={}))

    assert client.post("/ingest", json=VALID_BODY, headers=auth_headers).status_code == 502
    response = client.post("/ingest", json=VALID_BODY, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["dest"] == dest_b.url


def test_destination_unreachable(client, auth_headers, destinations, respx_mock):
    dest_a = destinations[0]
    respx_mock.post(dest_a.url).mock(side_effect=httpx.ConnectError("Connection refused"))

    response = client.post("/ingest", json=VALID_BODY, headers=auth_headers)

    assert response.status_code == 500
    assert response.json() == {"error": "FETCH_FAILED"}


def test_success_with_empty_body(client, auth_headers, destinations, respx_mock):
    dest_a = destinations[0]
    respx_mock.post(dest_a.url).mock(return_value=httpx.Response(200))

    response = client.post("/ingest", json=VALID_BODY, headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"status": "FORWARDED", "dest": dest_a.url, "data": {}}


def test_rate_limit(relay_settings, destinations, auth_headers):
    limiter = RateLimiter(max_requests=2, window_ms=1000, clock=lambda: 100.0)
    app = create_app(config=relay_settings, destinations=destinations, limiter=limiter)

    with TestClient(app) as client:
        assert client.get("/health").status_code == 200
        assert client.get("/health").status_code == 200

        response = client.post("/ingest", json=VALID_BODY, headers=auth_headers)
        assert response.status_code == 429
        assert response.json() == {"error": "RATE_LIMITED"}
        assert response.headers["Retry-After"] == "1"


def test_startup_fails_without_destinations(relay_settings):
    app = create_app(config=relay_settings, destinations=[])

    with pytest.raises(ConfigurationError):
        with TestClient(app):
            pass


@pytest.mark.parametrize(
    "body",
    [
        {"phone": "+14155552671", "authCode": 8842},
        {"phone": 14155552671, "authCode": "8842"},
        {"phone": "+14155552671", "authCode": "8842", "source": "web"},
    ],
)
def test_numeric_values_and_unknown_fields_are_forwarded(client, auth_headers, destinations, respx_mock, body):
    dest_a = destinations[0]
    route = respx_mock.post(dest_a.url).mock(return_value=httpx.Response(200, json={"result": True}))

    response = client.post("/ingest", json=body, headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["status"] == "FORWARDED"

    sent = json.loads(route.calls.last.request.content)
    assert sent["receivers"] == [
        {"whatsappNumber": "14155552671", "customParams": [{"name": "1", "value": "8842"}]}
    ]
    assert "source" not in sent
