import json
import logging
import random
import sys
from pathlib import Path

from fastapi import FastAPI
from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))
from api.lunch.middlewares.logging import LoggingMiddleware  # noqa: E402
from api.lunch.middlewares.request_id import RequestIdMiddleware  # noqa: E402
from api.lunch.obs.logging import JsonFormatter, RequestIdFilter  # noqa: E402


def _make_app():
    test_app = FastAPI()
    test_app.add_middleware(RequestIdMiddleware)
    test_app.add_middleware(LoggingMiddleware)

    @test_app.get("/health")
    async def health():
        return {"ok": True}

    @test_app.post("/echo")
    async def echo(data: dict):
        return data

    @test_app.get("/boom")
    async def boom():
        raise RuntimeError("kitchen offline")

    return test_app


def test_request_id_propagation(monkeypatch, caplog):
    monkeypatch.setattr("api.lunch.middlewares.logging.LOG_SAMPLE_2XX", 1)
    client = TestClient(_make_app())
    with caplog.at_level(logging.INFO, logger="api"):
        resp = client.get("/health", headers={"X-Request-ID": "abc"})
    assert resp.headers["X-Request-ID"] == "abc"
    data = json.loads(caplog.messages[1])
    assert data["req_id"] == "abc"
    assert data["status"] == 200


def test_request_id_generation(monkeypatch, caplog):
    monkeypatch.setattr("api.lunch.middlewares.logging.LOG_SAMPLE_2XX", 1)
    client = TestClient(_make_app())
    with caplog.at_level(logging.INFO, logger="api"):
        resp = client.get("/health")
    rid = resp.headers["X-Request-ID"]
    assert rid
    assert json.loads(caplog.messages[1])["req_id"] == rid


def test_wallet_redaction(monkeypatch, caplog):
    monkeypatch.setattr("api.lunch.middlewares.logging.LOG_SAMPLE_2XX", 1)
    client = TestClient(_make_app())
    payload = {"wallet_id": "w-1", "child_id": "c-1", "nested": {"wallet_id": "w-2"}}
    with caplog.at_level(logging.INFO, logger="api"):
        client.post("/echo", json=payload, params={"wallet_id": "w-3"})
    inbound = json.loads(caplog.messages[0])
    assert inbound["body"]["wallet_id"] == "***"
    assert inbound["body"]["nested"]["wallet_id"] == "***"
    assert inbound["body"]["child_id"] == "c-1"
    assert inbound["query"]["wallet_id"] == "***"


def test_2xx_sampling(monkeypatch, caplog):
    monkeypatch.setattr("api.lunch.middlewares.logging.LOG_SAMPLE_2XX", 0.1)
    random.seed(1)
    client = TestClient(_make_app())
    with caplog.at_level(logging.INFO, logger="api"):
        for _ in range(100):
            client.get("/health")
    logged = len(caplog.messages) // 2
    assert 5 <= logged <= 15


def test_unhandled_error_is_enveloped(monkeypatch, caplog):
    monkeypatch.setattr("api.lunch.middlewares.logging.LOG_SAMPLE_2XX", 0)
    client = TestClient(_make_app(), raise_server_exceptions=False)
    with caplog.at_level(logging.INFO, logger="api"):
        resp = client.get("/boom", headers={"X-Request-ID": "r-500"})
    assert resp.status_code == 500
    body = resp.json()
    assert body["ok"] is False
    assert body["error_id"]
    outbound = json.loads(caplog.messages[-1])
    assert outbound["level"] == "ERROR"
    assert outbound["error_id"] == body["error_id"]


def test_json_formatter_fields():
    formatter = JsonFormatter()
    record = logging.LogRecord(
        "api.lunch", logging.WARNING, __file__, 0, "order %s refused", ("o-1",), None
    )
    record.order_id = "o-1"
    RequestIdFilter().filter(record)
    data = json.loads(formatter.format(record))
    assert data["level"] == "WARNING"
    assert data["logger"] == "api.lunch"
    assert data["msg"] == "order o-1 refused"
    assert data["order_id"] == "o-1"
    assert data["req_id"] is None
    assert "exc" not in data


def test_malformed_request_id_replaced(monkeypatch, caplog):
    monkeypatch.setattr("api.lunch.middlewares.logging.LOG_SAMPLE_2XX", 1)
    client = TestClient(_make_app())
    with caplog.at_level(logging.INFO, logger="api"):
        resp = client.get("/health", headers={"X-Request-ID": "bad id!"})
    rid = resp.headers["X-Request-ID"]
    assert rid != "bad id!"
    assert len(rid) == 32
    assert json.loads(caplog.messages[1])["req_id"] == rid
