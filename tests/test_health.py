"""
Health, readiness, metrics and trace id tests
"""

from fastapi.testclient import TestClient


def test_health_endpoint(client: TestClient):
    """Test /health endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_ready_endpoint(client: TestClient):
    """Test /ready endpoint"""
    response = client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["database"] == "connected"


def test_metrics_requires_token(client: TestClient):
    response = client.get("/metrics")
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "HTTP_403"


def test_metrics_with_token(client: TestClient):
    client.get("/health")

    response = client.get("/metrics", headers={"X-Metrics-Token": "test-metrics-token"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "http_requests_total" in response.text


def test_trace_id_echoed(client: TestClient):
    """An incoming X-Trace-ID is kept and returned"""
    response = client.get("/health", headers={"X-Trace-ID": "trace-abc-123"})
    assert response.headers["X-Trace-ID"] == "trace-abc-123"


def test_trace_id_in_error_response(client: TestClient):
    """Test that trace_id exists in error responses"""
    response = client.get("/nonexistent-endpoint")
    assert response.status_code == 404
    data = response.json()
    assert "error" in data
    assert data["error"]["trace_id"] is not None
    assert data["error"]["trace_id"] == response.headers["X-Trace-ID"]
