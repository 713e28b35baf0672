from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError

from main import app
from src.routers.quiz import get_result_cache

PROJECT_ROOT = Path(__file__).resolve().parents[1]


@pytest.fixture
def client(monkeypatch):
    # The default mappings path is relative to the project root
    monkeypatch.chdir(PROJECT_ROOT)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_root_reports_mappings_loaded(client):
    response = client.get("/")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["mappings_loaded"] is True
    assert "timestamp" in body


def test_generate_through_app_lifespan(client):
    cache = AsyncMock()
    cache.get.return_value = None
    app.dependency_overrides[get_result_cache] = lambda: cache

    response = client.post(
        "/api/v1/quiz/generate",
        json={"answers": {"activity": "Solving complex puzzles or math problems."}, "quizType": "standard"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["source"] in ("mappings", "fallback")
    assert 1 <= len(body["result"]) <= 3


def test_cache_health_unavailable(client):
    with patch("main.get_redis", AsyncMock(return_value=None)):
        response = client.get("/health/cache")
    assert response.status_code == 503


def test_cache_health_ping_failure(client):
    redis_conn = AsyncMock()
    redis_conn.ping.side_effect = RedisConnectionError("refused")
    with patch("main.get_redis", AsyncMock(return_value=redis_conn)):
        response = client.get("/health/cache")
    assert response.status_code == 503
    assert "Cache connection error" in response.json()["detail"]


def test_cache_health_ok(client):
    redis_conn = AsyncMock()
    with patch("main.get_redis", AsyncMock(return_value=redis_conn)):
        response = client.get("/health/cache")
    assert response.status_code == 200
    assert response.json()["cache_check"] == "ping_successful"
