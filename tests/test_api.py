"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from crime_forecast.main import app

API = "/api/v1"


@pytest.fixture
def client(monkeypatch):
    monkeypatch.delenv("FORECAST_SERVICE_URL", raising=False)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def cluster_data(sample_clusters):
    return [c.model_dump(mode="json", by_alias=True) for c in sample_clusters]


class TestServiceEndpoints:

    def test_root(self, client):
        assert client.get("/").json()["health"] == "/api/v1/health"

    def test_health(self, client):
        body = client.get(f"{API}/health").json()
        assert body["status"] == "healthy"
        assert body["estimatorsAvailable"] == 4
        assert body["remoteConfigured"] is False

    def test_models(self, client):
        body = client.get(f"{API}/models").json()
        assert body["total"] == 4
        assert {m["name"] for m in body["models"]} == {"linear", "polynomial", "seasonal", "arima"}
        assert [m["name"] for m in body["models"] if m["isDefault"]] == ["linear"]

    def test_lookups(self, client):
        body = client.get(f"{API}/lookups").json()
        assert body["precincts"]["1"] == "Bayanan"
        assert body["crimeTypes"]["18"] == "Theft"
        assert body["reliabilityThresholds"]["good"] == 0.6


class TestForecast:

    def test_predictions_and_metadata(self, client, cluster_data):
        response = client.post(f"{API}/forecast", json={
            "clusterData": cluster_data,
            "params": {"forecastPeriod": 3, "model": "polynomial"},
        })

        assert response.status_code == 200
        body = response.json()
        assert len(body["predictions"]) == 6
        assert body["metadata"]["source"] == "local"
        assert body["metadata"]["model"] == "polynomial"
        assert body["metadata"]["groups"] == 2
        prediction = body["predictions"][0]
        assert {"predictedCount", "riskLevel", "crimeType", "confidence", "trend"} <= set(prediction)

    def test_forecast_period_is_clamped(self, client, cluster_data):
        body = client.post(f"{API}/forecast", json={
            "clusterData": cluster_data,
            "params": {"forecastPeriod": 20},
        }).json()

        assert body["metadata"]["forecastPeriod"] == 12
        assert len(body["predictions"]) == 24

    def test_unknown_model_uses_linear(self, client, cluster_data):
        body = client.post(f"{API}/forecast", json={
            "clusterData": cluster_data,
            "params": {"forecastPeriod": 1, "model": "prophet"},
        }).json()
        assert body["metadata"]["model"] == "linear"

    def test_confidence_out_of_range_is_rejected(self, client, cluster_data):
        response = client.post(f"{API}/forecast", json={
            "clusterData": cluster_data,
            "params": {"confidence": 0.5},
        })
        assert response.status_code == 422

    def test_no_data_and_no_stored_analysis(self, client):
        response = client.post(f"{API}/forecast", json={})
        assert response.status_code == 400

    def test_stored_analysis_is_used(self, client, cluster_data):
        stored = client.post(f"{API}/analysis", json={"clusterData": cluster_data})
        assert stored.status_code == 200
        assert stored.json()["clusters"] == 2
        assert stored.json()["items"] == sum(len(c["clusterItems"]) for c in cluster_data)

        response = client.post(f"{API}/forecast", json={"params": {"forecastPeriod": 2}})
        assert response.status_code == 200
        assert len(response.json()["predictions"]) == 4

    def test_empty_cluster_list(self, client):
        body = client.post(f"{API}/forecast", json={"clusterData": []}).json()
        assert body["predictions"] == []
        assert body["metadata"]["historicalPoints"] == 0


class TestDerivedViews:

    def test_extended(self, client, cluster_data):
        body = client.post(f"{API}/forecast/extended", json={
            "clusterData": cluster_data,
            "params": {"forecastPeriod": 2},
        }).json()

        assert len(body["forecasts"]) == 4
        forecast = body["forecasts"][0]
        assert {"latitude", "longitude", "timeOfDayBreakdown", "primaryTimeOfDay", "reliability"} <= set(forecast)
        quality = body["quality"]
        assert quality["reliableCount"] + quality["unreliableCount"] == 4

    def test_map_default_limits(self, client, cluster_data):
        body = client.post(f"{API}/forecast/map", json={
            "clusterData": cluster_data,
            "params": {"forecastPeriod": 1},
        }).json()

        assert {p["precinct"] for p in body["points"]} == {1, 4}
        assert all(p["reliability"] >= 0.3 for p in body["points"])
        assert body["summary"]["totalPoints"] == len(body["points"])

    def test_map_sample_size_limit(self, client, cluster_data):
        body = client.post(f"{API}/forecast/map", json={
            "clusterData": cluster_data,
            "params": {"forecastPeriod": 1},
            "minSampleSize": 5,
        }).json()
        assert {p["precinct"] for p in body["points"]} == {1}

    def test_map_interactive_filters(self, client, cluster_data):
        body = client.post(f"{API}/forecast/map", json={
            "clusterData": cluster_data,
            "params": {"forecastPeriod": 1},
            "filters": {"precincts": [4]},
        }).json()

        assert [p["precinct"] for p in body["points"]] == [4]
        assert body["points"][0]["primaryTimeOfDay"] == "evening"
        assert body["summary"]["precinctCoverage"] == [4]

    def test_summary(self, client, cluster_data):
        forecast = client.post(f"{API}/forecast", json={
            "clusterData": cluster_data,
            "params": {"forecastPeriod": 3},
        }).json()
        body = client.post(f"{API}/forecast/summary", json={
            "clusterData": cluster_data,
            "params": {"forecastPeriod": 3},
        }).json()

        summary = body["summary"]
        assert summary["totalPredicted"] == sum(p["predictedCount"] for p in forecast["predictions"])
        assert sum(summary["riskLevels"].values()) == 6
        assert len(summary["monthlyTotals"]) == 3

    def test_export_csv(self, client, cluster_data):
        response = client.post(f"{API}/forecast/export", json={
            "clusterData": cluster_data,
            "params": {"forecastPeriod": 2},
        })

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert 'filename="crime-forecast-' in response.headers["content-disposition"]
        lines = response.text.splitlines()
        assert lines[0] == "Date,Precinct,Crime Type,Predicted Count,Confidence,Trend,Risk Level"
        assert len(lines) == 5

    def test_export_without_data(self, client):
        assert client.post(f"{API}/forecast/export", json={}).status_code == 400
