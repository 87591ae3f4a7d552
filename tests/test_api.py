"""End-to-end tests for the trades and analytics routers."""

import pytest


def _trade_payload(**overrides):
    payload = {
        "pair": "BTC/USDT",
        "type": "BUY",
        "status": "CLOSED",
        "entry_price": 100,
        "exit_price": 110,
        "quantity": 2,
        "strategy": ["Breakout"],
        "indicators": ["RSI"],
        "mistakes": [],
        "notes": "Clean retest",
        "reason": "Range breakout on volume",
        "created_at": "2024-03-04T09:30:00Z",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def headers(auth_headers):
    return auth_headers("user-1")


# ---------------------------------------------------------------------------
# 1. Auth
# ---------------------------------------------------------------------------

def test_missing_token_is_rejected(client):
    resp = client.get("/api/trades")
    assert resp.status_code in (401, 403)


def test_bad_token_is_rejected(client):
    resp = client.get("/api/trades", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


def test_health_is_public(client):
    resp = client.get("/api/system/health")
    assert resp.status_code == 200


# ---------------------------------------------------------------------------
# 2. Trades
# ---------------------------------------------------------------------------

class TestTrades:
    def test_create_closed_trade_derives_fields(self, client, headers):
        resp = client.post("/api/trades", json=_trade_payload(), headers=headers)
        assert resp.status_code == 201
        body = resp.json()
        assert body["user_id"] == "user-1"
        assert body["profit_loss"] == 20
        assert body["profit_loss_percentage"] == pytest.approx(10)
        assert body["result"] == "WIN"
        assert body["closed_at"] is not None

    def test_create_open_trade(self, client, headers):
        resp = client.post(
            "/api/trades", json=_trade_payload(status="OPEN", exit_price=None), headers=headers
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["result"] == "UNKNOWN"
        assert body["profit_loss"] == 0
        assert body["closed_at"] is None

    @pytest.mark.parametrize("overrides", [
        {"exit_price": None},
        {"strategy": []},
        {"strategy": ["  "]},
        {"type": "HOLD"},
        {"entry_price": 0},
        {"reason": ""},
        {"status": "OPEN", "result": "WIN", "exit_price": None},
        {"closed_at": "2024-03-01T00:00:00Z"},
    ])
    def test_create_rejects_invalid_trades(self, client, headers, overrides):
        resp = client.post("/api/trades", json=_trade_payload(**overrides), headers=headers)
        assert resp.status_code == 422

    def test_list_only_returns_own_trades(self, client, headers, auth_headers):
        client.post("/api/trades", json=_trade_payload(), headers=headers)
        client.post("/api/trades", json=_trade_payload(pair="ETH/USDT"), headers=auth_headers("user-2"))

        resp = client.get("/api/trades", headers=headers)
        assert resp.status_code == 200
        assert [t["pair"] for t in resp.json()] == ["BTC/USDT"]

    def test_list_filters_by_status(self, client, headers):
        client.post("/api/trades", json=_trade_payload(), headers=headers)
        client.post("/api/trades", json=_trade_payload(status="OPEN", exit_price=None), headers=headers)

        resp = client.get("/api/trades", params={"status": "open"}, headers=headers)
        assert [t["status"] for t in resp.json()] == ["OPEN"]

    def test_other_users_trade_is_not_found(self, client, headers, auth_headers):
        trade_id = client.post("/api/trades", json=_trade_payload(), headers=headers).json()["id"]

        resp = client.get(f"/api/trades/{trade_id}", headers=auth_headers("user-2"))
        assert resp.status_code == 404
        assert resp.json()["code"] == "trade/not-found"

    def test_close_open_trade(self, client, headers):
        created = client.post(
            "/api/trades", json=_trade_payload(type="SELL", status="OPEN", exit_price=None), headers=headers
        ).json()

        resp = client.post(
            f"/api/trades/{created['id']}/close",
            json={"exit_price": 90, "mistakes": ["Late Entry"]},
            headers=headers,
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "CLOSED"
        assert body["profit_loss"] == 20
        assert body["result"] == "WIN"
        assert body["mistakes"] == ["Late Entry"]

    def test_close_twice_conflicts(self, client, headers):
        trade_id = client.post("/api/trades", json=_trade_payload(), headers=headers).json()["id"]

        resp = client.post(f"/api/trades/{trade_id}/close", json={"exit_price": 120}, headers=headers)
        assert resp.status_code == 409
        assert resp.json()["code"] == "trade/already-closed"

    def test_close_before_creation_is_rejected(self, client, headers):
        trade_id = client.post(
            "/api/trades", json=_trade_payload(status="OPEN", exit_price=None), headers=headers
        ).json()["id"]

        resp = client.post(
            f"/api/trades/{trade_id}/close",
            json={"exit_price": 120, "closed_at": "2024-01-01T00:00:00Z"},
            headers=headers,
        )
        assert resp.status_code == 409
        assert resp.json()["code"] == "trade/invalid-date-range"

    def test_update_recomputes_pnl(self, client, headers):
        trade_id = client.post("/api/trades", json=_trade_payload(), headers=headers).json()["id"]

        resp = client.put(f"/api/trades/{trade_id}", json={"exit_price": 95}, headers=headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["profit_loss"] == -10
        assert body["result"] == "LOSS"

    def test_update_reopening_clears_close(self, client, headers):
        trade_id = client.post("/api/trades", json=_trade_payload(), headers=headers).json()["id"]

        resp = client.put(f"/api/trades/{trade_id}", json={"status": "OPEN"}, headers=headers)
        body = resp.json()
        assert body["closed_at"] is None
        assert body["result"] == "UNKNOWN"

    def test_update_validation_errors_are_listed(self, client, headers):
        trade_id = client.post(
            "/api/trades", json=_trade_payload(status="OPEN", exit_price=None), headers=headers
        ).json()["id"]

        resp = client.put(f"/api/trades/{trade_id}", json={"status": "CLOSED"}, headers=headers)
        assert resp.status_code == 422

    def test_delete(self, client, headers):
        trade_id = client.post("/api/trades", json=_trade_payload(), headers=headers).json()["id"]

        assert client.delete(f"/api/trades/{trade_id}", headers=headers).status_code == 204
        assert client.get(f"/api/trades/{trade_id}", headers=headers).status_code == 404


# ---------------------------------------------------------------------------
# 3. Analytics
# ---------------------------------------------------------------------------

class TestAnalytics:
    def test_no_trades_gives_default_data(self, client, headers):
        resp = client.get("/api/analytics/metrics", headers=headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["is_default_data"] is True
        assert body["total_trades"] == 0
        assert body["common_mistakes"][0]["description"] == "No data"
        assert len(body["behavioral_patterns"]["time_of_day"]) == 24

    def test_write_invalidates_cached_metrics(self, client, headers):
        assert client.get("/api/analytics/metrics", headers=headers).json()["is_default_data"] is True

        client.post("/api/trades", json=_trade_payload(), headers=headers)
        body = client.get("/api/analytics/metrics", headers=headers).json()

        assert body["is_default_data"] is False
        assert body["total_pnl"] == 20
        assert body["win_rate"] == 100
        assert len(body["behavioral_patterns"]["time_of_day"]) == 24

    def test_unknown_period(self, client, headers):
        resp = client.get("/api/analytics/metrics", params={"period": "hourly"}, headers=headers)
        assert resp.status_code == 422

    def test_inverted_date_range(self, client, headers):
        resp = client.get(
            "/api/analytics/metrics",
            params={"start_date": "2024-02-01T00:00:00Z", "end_date": "2024-01-01T00:00:00Z"},
            headers=headers,
        )
        assert resp.status_code == 422
        assert resp.json()["code"] == "analytics/invalid-date-range"

    def test_status_reports_no_data(self, client, headers):
        client.post("/api/trades", json=_trade_payload(status="OPEN", exit_price=None), headers=headers)

        body = client.get("/api/analytics/metrics/status", headers=headers).json()
        assert body["status"] == "no_data"
        assert body["metrics"]["total_trades"] == 1

    def test_history_records_each_computation(self, client, headers):
        client.post("/api/trades", json=_trade_payload(), headers=headers)
        client.get("/api/analytics/metrics", headers=headers)
        client.get("/api/analytics/metrics", params={"refresh": True}, headers=headers)

        history = client.get("/api/analytics/history", headers=headers).json()
        assert len(history) == 2
        assert all(h["total_pnl"] == 20 for h in history)

    def test_export_csv(self, client, headers):
        client.post("/api/trades", json=_trade_payload(), headers=headers)

        resp = client.get("/api/analytics/export.csv", headers=headers)
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert "trading_analytics_" in resp.headers["content-disposition"]
        lines = resp.text.splitlines()
        assert lines[0] == "Metric,Value"
        assert "Total Trades,1" in lines
        assert "Win Rate,100.00%" in lines

    def test_insight_payload(self, client, headers):
        client.post("/api/trades", json=_trade_payload(), headers=headers)

        first = client.get("/api/analytics/insight-payload", headers=headers).json()
        assert first["metrics_changed"] is True
        assert first["performance"]["total_pnl"] == 20
        assert len(first["recent_trades"]) == 1

        second = client.get("/api/analytics/insight-payload", headers=headers).json()
        assert second["metrics_changed"] is False
