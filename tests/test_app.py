"""Tests for the Flask JSON service."""

from unittest.mock import Mock

import pytest

from gitlytics_stats.app import create_app
from gitlytics_stats.config import Config
from gitlytics_stats.github import NetworkError, Repository


def make_client():
    client = Mock()
    client.list_repositories.return_value = [Repository("octocat", "alpha")]
    client.list_commits.return_value = [{"commit": {"author": {"date": "2024-05-01T10:00:00Z"}}}]
    client.get_languages.return_value = {"Python": 100}
    return client


@pytest.fixture
def config():
    return Config(token="tok", username="octocat", cache_ttl_seconds=600)


def test_healthz(config):
    app = create_app(config, client_factory=lambda c: make_client())
    resp = app.test_client().get("/healthz")
    assert resp.status_code == 200
    assert resp.get_json() == {"ok": True, "token_configured": True, "cache_ttl_seconds": 600}


def test_stats_is_cached(config):
    factory = Mock(side_effect=lambda c: make_client())
    client = create_app(config, client_factory=factory).test_client()

    first = client.get("/api/stats").get_json()
    second = client.get("/api/stats").get_json()

    assert first["cached"] is False
    assert second["cached"] is True
    assert factory.call_count == 1
    assert first["username"] == "octocat"
    assert first["streaks"]["total"] == 1
    assert first["yearly"] == [{"year": 2024, "active_days": 1, "contributions": 1}]
    assert first["languages"] == [{"name": "Python", "percentage": "100.0"}]


def test_fragments(config):
    client = create_app(config, client_factory=lambda c: make_client()).test_client()
    data = client.get("/api/fragments").get_json()
    assert set(data["fragments"]) == {"STREAK", "YEARLY", "LANGUAGES"}
    assert "| 2024 | 1 | 1 |" in data["fragments"]["YEARLY"]


def test_listing_failure_is_502(config):
    broken = make_client()
    broken.list_repositories.side_effect = NetworkError("unreachable")
    client = create_app(config, client_factory=lambda c: broken).test_client()

    resp = client.get("/api/stats")
    assert resp.status_code == 502
    assert "unreachable" in resp.get_json()["error"]
