"""
tests/test_api.py

HTTP layer tests with the client store swapped for an in-memory fake.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import get_client_store
from app.main import app

ROWS = [
    {"Client_ID": "C-1", "Company": "Acme", "MRR": "1500"},
    {"Client_ID": "C-2", "Company": "Beta", "MRR": "800"},
]
MAPPING = {"Client_ID": "client.id", "Company": "company.name", "MRR": "mrr"}


@pytest.fixture()
def client(memory_store) -> Iterator[TestClient]:
    app.dependency_overrides[get_client_store] = lambda: memory_store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _in_days(days: int) -> str:
    return (datetime.now(tz=timezone.utc).date() + timedelta(days=days)).isoformat()


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_template_download(client: TestClient) -> None:
    response = client.get("/import/template")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "client_import_template.csv" in response.headers["content-disposition"]
    assert response.text.splitlines()[0].startswith("client_id,company_name,contact_name")


def test_suggest_and_review(client: TestClient) -> None:
    suggested = client.post("/import/suggest", json={"rows": ROWS})
    assert suggested.status_code == 200
    assert suggested.json()["mapping"] == MAPPING

    review = client.post("/import/review", json={"rows": ROWS, "mapping": MAPPING})
    body = review.json()
    assert review.status_code == 200
    assert body["presence"]["has_all"] is True
    assert body["has_required_fields"] is False
    assert "renewal.date" in body["missing_required"]


def test_preview(client: TestClient) -> None:
    response = client.post("/import/preview", json={"rows": ROWS, "mapping": MAPPING})
    body = response.json()

    assert response.status_code == 200
    assert [record["id"] for record in body["records"]] == ["C-1", "C-2"]
    assert body["validation"]["stats"] == {"total": 2, "valid": 0, "invalid": 2}


def test_execute_import_persists_and_reports(client: TestClient, memory_store) -> None:
    memory_store.fail_ids = {"C-2"}

    response = client.post("/companies/acme-co/import", json={"rows": ROWS, "mapping": MAPPING})
    body = response.json()

    assert response.status_code == 200
    assert body["total"] == 2
    assert body["succeeded"] == 1
    assert body["failed"] == 1
    assert body["message"] == "Import completed with 1 failures out of 2 clients."
    assert body["failures"][0]["client_id"] == "C-2"
    assert memory_store.get("acme-co", "C-1")["company"] == {"name": "Acme"}


def test_execute_import_rejects_bad_mapping(client: TestClient) -> None:
    response = client.post(
        "/companies/acme-co/import",
        json={"rows": ROWS, "mapping": {"Client_ID": "client.id", "Missing": "mrr"}},
    )

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["errors"][0]["code"] == "unknown_source_column"
    assert detail["errors"][0]["source_column"] == "Missing"


def test_dashboard_and_renewals(client: TestClient, memory_store) -> None:
    memory_store.upsert("acme-co", "c-1", {"company": {"name": "Acme"}, "mrr": 1000, "health": {"score": 80},
                                           "renewal": {"date": _in_days(10)}})
    memory_store.upsert("acme-co", "c-2", {"company": {"name": "Beta"}, "mrr": 500, "churn": {"risk": "high"},
                                           "renewal": {"date": _in_days(45)}})

    dashboard = client.get("/companies/acme-co/dashboard").json()
    assert dashboard["totals"] == {"total_clients": 2, "at_risk": 1, "total_mrr": 1500.0, "avg_health": 80}
    assert [renewal["id"] for renewal in dashboard["renewals"]] == ["c-1", "c-2"]
    assert dashboard["renewals"][0]["days_until_renewal"] == 10
    assert "Revenue Analytics" in dashboard["unlocked_groups"]

    renewals = client.get("/companies/acme-co/renewals", params={"days": 30}).json()
    assert [renewal["company_name"] for renewal in renewals["renewals"]] == ["Acme"]

    limited = client.get("/companies/acme-co/renewals", params={"limit": 1}).json()
    assert len(limited["renewals"]) == 1


def test_analytics(client: TestClient, memory_store) -> None:
    memory_store.upsert("acme-co", "c-1", {"mrr": 1000, "ltv": 20000})

    response = client.get("/companies/acme-co/analytics")
    body = response.json()

    assert response.status_code == 200
    assert body["company_id"] == "acme-co"
    assert body["total_mrr"] == 1000
    assert body["avg_retention_period"] == 20
    assert body["ltv_distribution"][1] == {"range": "10k-25k", "count": 1}
    assert body["median_ltv"] == 20000
    assert body["at_risk_contracts"] == 0
    assert body["retention_curve"] == []


def test_store_failure_is_a_server_error(client: TestClient, memory_store) -> None:
    memory_store.fail_reads = True

    response = client.get("/companies/acme-co/dashboard")

    assert response.status_code == 500
    assert response.json()["detail"] == "Unable to load client portfolio."
