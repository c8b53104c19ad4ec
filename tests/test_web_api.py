"""Tests for the JSON analytics endpoints."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from family_journal.web.app import app


@pytest.fixture
def client(sqlite_db: Path, tmp_path: Path, monkeypatch) -> TestClient:
    config_path = tmp_path / "app.toml"
    config_path.write_text(f'[app]\ndb_path = "{sqlite_db.as_posix()}"\n', encoding="utf-8")
    monkeypatch.setenv("FAMILY_JOURNAL_CONFIG", str(config_path))
    return TestClient(app)


class TestMonthlyPerformance:
    def test_member_scenario(self, client):
        response = client.get("/api/analytics/monthly-performance", params={"member_id": "1"})
        assert response.status_code == 200
        body = response.json()
        assert [row["month"] for row in body] == ["2024-02", "2024-01"]
        assert body[0]["net_profit"] == -40.0
        assert body[0]["total_investment"] == 200.0
        assert body[1]["roi"] == 20.0

    def test_ascending_order(self, client):
        response = client.get("/api/analytics/monthly-performance", params={"order": "asc"})
        assert [row["month"] for row in response.json()] == ["2024-01", "2024-02"]

    def test_malformed_date_is_bad_request(self, client):
        response = client.get("/api/analytics/monthly-performance", params={"start_date": "2024/01/01"})
        assert response.status_code == 400

    def test_unknown_member_is_bad_request(self, client):
        response = client.get("/api/analytics/monthly-performance", params={"member_id": "77"})
        assert response.status_code == 400

    def test_inverted_range_is_empty(self, client):
        response = client.get(
            "/api/analytics/monthly-performance",
            params={"start_date": "2024-03-01", "end_date": "2024-01-01"},
        )
        assert response.status_code == 200
        assert response.json() == []


class TestCapitalGrowth:
    def test_member_scenario(self, client):
        response = client.get("/api/analytics/capital-growth", params={"member_id": "1"})
        assert response.json() == [
            {"date": "2024-01-15", "value": 200.0},
            {"date": "2024-02-10", "value": 160.0},
        ]

    def test_window(self, client):
        response = client.get(
            "/api/analytics/capital-growth",
            params={"start_date": "2024-02-01", "end_date": "2024-02-29"},
        )
        assert response.json() == [
            {"date": "2024-02-10", "value": -40.0},
            {"date": "2024-02-20", "value": 10.5},
        ]


class TestTopSymbols:
    def test_ranked_and_limited(self, client):
        response = client.get("/api/analytics/top-symbols", params={"limit": "1"})
        assert response.json() == [
            {"symbol": "TCS", "trade_count": 2, "avg_profit": 125.25, "total_profit": 250.5},
        ]

    def test_invalid_limit(self, client):
        response = client.get("/api/analytics/top-symbols", params={"limit": "zero"})
        assert response.status_code == 400


class TestSummary:
    def test_month_range(self, client):
        response = client.get("/api/analytics/summary", params={"member_id": "1", "range": "2024-01"})
        body = response.json()
        assert body["filters"] == {"member_id": 1, "start_date": "2024-01-01", "end_date": "2024-01-31"}
        assert body["summary"]["total_trades"] == 1
        assert body["summary"]["net_profit"] == 200.0
        assert body["summary"]["current_capital"] == 200.0
        assert body["summary"]["win_rate"] == 100.0
        assert [symbol["symbol"] for symbol in body["top_symbols"]] == ["TCS", "HDFC"]

    def test_unknown_range(self, client):
        response = client.get("/api/analytics/summary", params={"range": "forever"})
        assert response.status_code == 400

    def test_explicit_dates_without_range(self, client):
        response = client.get(
            "/api/analytics/summary",
            params={"member_id": "1", "start_date": "2024-02-01", "end_date": "2024-02-28"},
        )
        body = response.json()
        assert body["filters"] == {"member_id": 1, "start_date": "2024-02-01", "end_date": "2024-02-28"}
        assert body["summary"]["total_trades"] == 1
        assert body["summary"]["net_profit"] == -40.0
        assert [row["month"] for row in body["monthly"]] == ["2024-02"]

    def test_malformed_explicit_date(self, client):
        response = client.get("/api/analytics/summary", params={"start_date": "garbage"})
        assert response.status_code == 400


def test_missing_database_is_not_found(tmp_path, monkeypatch):
    config_path = tmp_path / "app.toml"
    config_path.write_text(f'[app]\ndb_path = "{(tmp_path / "absent.sqlite").as_posix()}"\n', encoding="utf-8")
    monkeypatch.setenv("FAMILY_JOURNAL_CONFIG", str(config_path))
    client = TestClient(app)
    assert client.get("/api/analytics/capital-growth").status_code == 404
    assert client.get("/api/health").json() == {"status": "ok", "db_exists": False}


def test_startup_logs_database_path(client, sqlite_db, caplog):
    with caplog.at_level(logging.INFO, logger="family_journal.web.app"):
        with client:
            assert client.get("/api/health").json() == {"status": "ok", "db_exists": True}
    assert str(sqlite_db) in caplog.text
