from __future__ import annotations

from fastapi.testclient import TestClient

from account_service import main


def test_healthz_and_metrics_do_not_need_database():
    client = TestClient(main.app)

    assert client.get("/healthz").json() == {"status": "ok"}

    metrics = client.get("/metrics")
    assert metrics.status_code == 200
    assert "account_lifecycle_transitions_total" in metrics.text
