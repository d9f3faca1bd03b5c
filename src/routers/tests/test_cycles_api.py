"""Tests for the cycle API routes and the health endpoint."""

from __future__ import annotations

from fastapi.testclient import TestClient

from src.routers.tests.conftest import log_payload

V1 = "/api/v1/cycles"


# ---------------------------------------------------------------------------
# Health / middleware
# ---------------------------------------------------------------------------


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "healthy"
        assert body["cycle_config_version"] == "1.0"

    def test_security_headers(self, client: TestClient) -> None:
        resp = client.get("/health")
        assert resp.headers["X-Frame-Options"] == "DENY"
        assert resp.headers["Cache-Control"] == "no-store"
        # TestClient talks plain http.
        assert "Strict-Transport-Security" not in resp.headers


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestValidation:
    def test_inverted_log_rejected(self, client: TestClient) -> None:
        payload = {"logs": [{"start_date": "2024-01-05", "end_date": "2024-01-01"}]}
        resp = client.post(f"{V1}/statistics", json=payload)
        assert resp.status_code == 422

    def test_unknown_flow_rejected(self, client: TestClient) -> None:
        payload = {
            "logs": [
                {"start_date": "2024-01-01", "end_date": "2024-01-05", "flow_intensity": "extreme"}
            ]
        }
        assert client.post(f"{V1}/statistics", json=payload).status_code == 422


# ---------------------------------------------------------------------------
# Statistics / calendar / prediction
# ---------------------------------------------------------------------------


class TestStatistics:
    def test_two_logs(self, client: TestClient) -> None:
        resp = client.post(f"{V1}/statistics", json={"logs": log_payload([28])})
        assert resp.status_code == 200
        body = resp.json()
        assert body["average_cycle_length"] == 28
        assert body["average_period_length"] == 5
        assert body["cycle_count"] == 1
        assert body["flow_patterns"]["medium"]["frequency"] == 100

    def test_empty_logs_return_defaults(self, client: TestClient) -> None:
        body = client.post(f"{V1}/statistics", json={"logs": []}).json()
        assert body["average_cycle_length"] == 28
        assert body["regularity_score"] == 0.0


class TestCalendar:
    def test_projection(self, client: TestClient) -> None:
        resp = client.post(
            f"{V1}/calendar", json={"logs": log_payload([28]), "from_date": "2024-02-10"}
        )
        assert resp.status_code == 200
        days = resp.json()
        by_date = {d["date"]: d for d in days}
        assert by_date["2024-02-26"]["phase"] == "period"
        assert by_date["2024-02-26"]["is_prediction"] is True
        assert by_date["2024-01-01"]["is_prediction"] is False
        assert [d["date"] for d in days] == sorted(d["date"] for d in days)


class TestPrediction:
    def test_empty_logs_are_unprocessable(self, client: TestClient) -> None:
        resp = client.post(f"{V1}/prediction", json={"logs": []})
        assert resp.status_code == 422
        assert "period log" in resp.json()["detail"]

    def test_two_logs(self, client: TestClient) -> None:
        resp = client.post(
            f"{V1}/prediction", json={"logs": log_payload([28]), "from_date": "2024-02-10"}
        )
        body = resp.json()
        assert body["next_period_start"] == "2024-02-26"
        assert body["next_period_end"] == "2024-03-01"
        assert body["is_sufficient"] is False
        assert body["phases_prediction"]["ovulation"]["start"] == "2024-03-11"

    def test_regular_history(self, client: TestClient) -> None:
        body = client.post(f"{V1}/prediction", json={"logs": log_payload([28] * 6)}).json()
        assert body["confidence"] == 83
        assert body["is_sufficient"] is True


# ---------------------------------------------------------------------------
# Fertility / phase / insights
# ---------------------------------------------------------------------------


class TestFertility:
    def test_windows_and_status(self, client: TestClient) -> None:
        resp = client.post(
            f"{V1}/fertility", json={"logs": log_payload([28] * 6), "from_date": "2024-06-20"}
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["ovulation_date"] == "2024-07-01"
        assert [w["type"] for w in body["windows"]] == [
            "highly-fertile",
            "fertile",
            "less-fertile",
        ]
        assert body["is_fertile"] is False
        assert body["next_fertile_start"] == "2024-06-26"
        assert body["next_ovulation"] == "2024-07-01"
        assert len(body["daily"]) == 7
        assert body["daily"][0]["date"] == "2024-06-26"

    def test_custom_status_range(self, client: TestClient) -> None:
        body = client.post(
            f"{V1}/fertility",
            json={
                "logs": log_payload([28] * 6),
                "from_date": "2024-06-20",
                "status_from": "2024-06-20",
                "status_to": "2024-07-16",
            },
        ).json()
        assert len(body["daily"]) == 27

    def test_status_range_is_limited(self, client: TestClient) -> None:
        resp = client.post(
            f"{V1}/fertility",
            json={
                "logs": log_payload([28] * 6),
                "status_from": "2024-01-01",
                "status_to": "2024-12-31",
            },
        )
        assert resp.status_code == 422

    def test_empty_logs_are_unprocessable(self, client: TestClient) -> None:
        assert client.post(f"{V1}/fertility", json={"logs": []}).status_code == 422


class TestPhase:
    def test_both_models(self, client: TestClient) -> None:
        body = client.post(
            f"{V1}/phase", json={"logs": log_payload([28]), "from_date": "2024-02-12"}
        ).json()
        assert body["phase"] == "ovulation"
        assert body["is_prediction"] is True
        assert body["days_until_next_marked"] == 0
        assert body["cycle_phase"]["phase"] == "ovulation"
        assert body["cycle_phase"]["day_of_cycle"] == 15
        assert body["cycle_phase"]["info"]["name"] == "Ovulation Phase"

    def test_without_logs(self, client: TestClient) -> None:
        body = client.post(f"{V1}/phase", json={"logs": [], "from_date": "2024-02-12"}).json()
        assert body["phase"] == "unknown"
        assert body["cycle_phase"] is None

    def test_date_between_logged_periods(self, client: TestClient) -> None:
        body = client.post(
            f"{V1}/phase", json={"logs": log_payload([28]), "from_date": "2024-01-15"}
        ).json()
        assert body["phase"] == "ovulation"
        assert body["next_marked_phase"] == "ovulation"
        assert body["days_until_next_marked"] == 0

    def test_date_before_first_log(self, client: TestClient) -> None:
        body = client.post(
            f"{V1}/phase", json={"logs": log_payload([28]), "from_date": "2023-06-01"}
        ).json()
        assert body["phase"] == "unknown"
        assert body["cycle_phase"] is None


class TestInsights:
    def test_summary(self, client: TestClient) -> None:
        temperatures = [
            {"date": f"2024-01-{day:02d}", "value": 36.4 if day <= 7 else 36.8}
            for day in range(1, 15)
        ]
        payload = {
            "logs": log_payload([28]),
            "from_date": "2024-02-24",
            "symptom_days": [
                {"date": "2024-01-02", "symptoms": ["cramps", "fatigue"]},
                {"date": "2024-01-03", "symptoms": ["cramps"]},
            ],
            "temperatures": temperatures,
        }
        resp = client.post(f"{V1}/insights", json=payload)
        assert resp.status_code == 200
        body = resp.json()
        assert [i["title"] for i in body["insights"]] == [
            "Frequent cramps",
            "Keep Logging Your Periods",
            "Period Expected Soon",
            "Temperature Shift Detected",
        ]
        assert body["cycle"]["temperature_shift_detected"] is True
        assert body["correlations"][0]["phase_distribution"]["menstrual"] == 1.0
        assert body["prediction"]["next_period_start"] == "2024-02-26"

    def test_temperature_out_of_range_rejected(self, client: TestClient) -> None:
        payload = {"logs": [], "temperatures": [{"date": "2024-01-01", "value": 98.6}]}
        assert client.post(f"{V1}/insights", json=payload).status_code == 422
