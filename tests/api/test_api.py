"""
HTTP contract tests for the AR dashboard API (FastAPI TestClient).
"""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from ar_api.app import create_app
from tests.conftest import make_csv, make_row

W1 = date(2024, 2, 5)
W2 = date(2024, 2, 12)


@pytest.fixture
def client(dashboard):
    with TestClient(create_app(service=dashboard)) as c:
        yield c


def _upload(client, data: bytes, filename: str = "weekly.csv"):
    return client.post("/api/upload-csv", files={"file": (filename, data, "text/csv")})


class TestUploadEndpoint:

    def test_upload_success(self, client):
        response = _upload(client, make_csv([make_row(W1), make_row(W2)]))

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["details"]["totalRecords"] == 2
        assert body["details"]["filename"] == "weekly.csv"

    def test_upload_rejected(self, client):
        response = _upload(client, make_csv([make_row(W1), make_row(W1)]))

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert len(body["errors"]) == 1

    def test_missing_file(self, client):
        response = client.post("/api/upload-csv")

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_status(self, client):
        assert client.get("/api/upload-csv").json()["status"] == "empty"

        _upload(client, make_csv([make_row(W1)]))
        body = client.get("/api/upload-csv").json()

        assert body["status"] == "ready"
        assert body["latestDataWeek"] == "2024-02-05"
        assert body["totalRecords"] == 1


class TestMetricsEndpoint:

    def test_empty_store_is_404(self, client):
        response = client.get("/api/ar-metrics")

        assert response.status_code == 404
        assert response.json()["error"] == "EMPTY_DATASET"
        assert response.json()["message"]

    def test_current_metrics(self, client):
        _upload(client, make_csv([make_row(W1), make_row(W2)]))
        body = client.get("/api/ar-metrics").json()

        assert body["currentWeek"] == "2024-02-12"
        assert body["dataPoints"] == 2
        assert body["metrics"]["dso"]["weekOverWeek"] == {"absolute": 0.0, "percentage": 0.0}

    def test_week_parameter(self, client):
        _upload(client, make_csv([make_row(W1), make_row(W2)]))
        body = client.get("/api/ar-metrics", params={"week": "2024-02-05"}).json()

        assert body["currentWeek"] == "2024-02-05"
        assert body["metrics"]["dso"]["weekOverWeek"]["absolute"] is None

    def test_unknown_week_is_404(self, client):
        _upload(client, make_csv([make_row(W1)]))
        response = client.get("/api/ar-metrics", params={"week": "2024-02-06"})

        assert response.status_code == 404
        assert response.json()["error"] == "WEEK_NOT_FOUND"

    def test_week_before_all_data_is_404_not_found(self, client):
        _upload(client, make_csv([make_row(W1)]))
        response = client.get("/api/ar-metrics", params={"week": "2024-01-01"})

        assert response.status_code == 404
        assert response.json()["error"] == "WEEK_NOT_FOUND"

    def test_malformed_week_is_400(self, client):
        response = client.get("/api/ar-metrics", params={"week": "2/5/2024x"})

        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_QUERY_PARAMETER"


class TestHistoricalEndpoint:

    def test_history(self, client):
        _upload(client, make_csv([make_row(W1), make_row(W2)]))
        body = client.get("/api/ar-metrics/historical", params={"months": 3}).json()

        assert [p["week"] for p in body["data"]] == ["2024-02-05", "2024-02-12"]

    def test_empty_store_is_404(self, client):
        assert client.get("/api/ar-metrics/historical").status_code == 404

    @pytest.mark.parametrize("months", ["0", "37", "abc", "1.5"])
    def test_bad_months_is_400(self, client, months):
        _upload(client, make_csv([make_row(W1)]))
        response = client.get("/api/ar-metrics/historical", params={"months": months})

        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_QUERY_PARAMETER"


class TestRequestId:

    def test_generated(self, client):
        assert client.get("/api/upload-csv").headers["X-Request-ID"]

    def test_echoed(self, client):
        response = client.get("/api/upload-csv", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"
