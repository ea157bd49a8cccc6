import pytest
from fastapi.testclient import TestClient

from gamestatus.main import app, get_status_service
from gamestatus.services import QueryErrorKind
from gamestatus.status_service import StatusService


@pytest.fixture
def client(cache, querier):
    service = StatusService(cache=cache, querier=querier, ttl_seconds=30, query_timeout=4.0)
    app.dependency_overrides[get_status_service] = lambda: service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_server_returns_status_and_caches_it(client, cache, querier):
    response = client.get("/server", params={"ip": "203.0.113.5", "port": "27015"})

    assert response.status_code == 200
    assert response.json() == {"name": "Dust Arena", "playerCount": 12, "maxPlayerCount": 24}
    assert [(key, ttl) for key, _, ttl in cache.puts] == [("server:203.0.113.5/27015", 30)]

    again = client.get("/server", params={"ip": "203.0.113.5", "port": "27015"})

    assert again.json() == response.json()
    assert len(querier.calls) == 1


def test_server_rejects_invalid_address_with_error_messages(client, cache, querier):
    response = client.get("/server", params={"ip": "not a host", "port": "70000"})

    assert response.status_code == 400
    body = response.json()
    assert body == {
        "errorMessages": [
            {"param": "ip", "msg": "Invalid ip address or url", "value": "not a host"},
            {"param": "port", "msg": "Invalid port number", "value": "70000"},
        ]
    }
    assert cache.gets == []
    assert querier.calls == []


def test_server_reports_missing_parameters(client, querier):
    response = client.get("/server")

    assert response.status_code == 400
    params = [error["param"] for error in response.json()["errorMessages"]]
    assert params == ["ip", "port"]
    assert querier.calls == []


def test_server_upstream_failure_is_plain_text(client, cache, querier):
    querier.error_kind = QueryErrorKind.UNREACHABLE

    response = client.get("/server", params={"ip": "203.0.113.5", "port": "27015"})

    assert response.status_code == 400
    assert response.headers["content-type"].startswith("text/plain")
    assert "Unreachable" in response.text
    assert "203.0.113.5:27015" in response.text
    assert cache.puts == []


def test_server_works_while_cache_is_down(client, cache):
    cache.fail_reads = True
    cache.fail_writes = True

    response = client.get("/server", params={"ip": "203.0.113.5", "port": "27015"})

    assert response.status_code == 200
    assert response.json()["name"] == "Dust Arena"


def test_healthz():
    response = TestClient(app).get("/healthz")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_no_wildcard_cors_header_by_default(client):
    response = client.get(
        "/server",
        params={"ip": "203.0.113.5", "port": "27015"},
        headers={"Origin": "https://example.com"},
    )

    assert response.headers.get("access-control-allow-origin") != "*"


def test_server_rejects_overlong_port_as_invalid_input(client, querier):
    response = client.get("/server", params={"ip": "203.0.113.5", "port": "9" * 5000})

    assert response.status_code == 400
    assert [error["param"] for error in response.json()["errorMessages"]] == ["port"]
    assert querier.calls == []
