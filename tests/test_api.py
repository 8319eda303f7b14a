import pytest
from fastapi.testclient import TestClient

import callapi.main as api
from callcore import data
from callcore.records import StructuralError


@pytest.fixture
def client(tmp_path, monkeypatch, table_rows):
    import pandas as pd

    pd.DataFrame(table_rows).to_excel(tmp_path / "Relatorio.xlsx", header=False, index=False)
    monkeypatch.setenv("CALLCORE_DATA_DIR", str(tmp_path))
    data._load_dashboard_data_cached.cache_clear()
    return TestClient(api.app)


def test_meta(client):
    assert client.get("/meta/queues").json() == {"queues": ["callcenter1"]}
    assert client.get("/meta/operators").json() == {"operators": ["ALICIA RAMOS", "WINNY VIANA"]}


def test_overview(client):
    res = client.post("/overview", json={})
    assert res.status_code == 200
    body = res.json()
    assert body["kpis"]["total"] == 3
    assert body["kpis"]["abandoned"] == 1
    assert body["fallback_errors"] == []
    assert "daily_volume" in body["charts"]


@pytest.mark.parametrize("page, key", [("operators", "operators"), ("queues", "queues"), ("heatmap", "heatmap"), ("regions", "regions")])
def test_pages(client, page, key):
    res = client.post(f"/{page}", json={"top_n": 5})
    assert res.status_code == 200
    assert key in res.json()


def test_tickets_without_summary_rows(client):
    body = client.get("/tickets").json()
    assert body["kpis"]["total"] == 0
    assert body["queues"] == []


def test_export_csv(client):
    res = client.post("/export/operators", json={})
    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/csv")
    assert "WINNY VIANA" in res.text


def test_structural_error_is_422(client, monkeypatch):
    def broken():
        raise StructuralError(["file is empty"])

    monkeypatch.setattr(api, "load_dashboard_data", broken)
    res = client.post("/overview", json={})
    assert res.status_code == 422
    assert res.json()["errors"] == ["file is empty"]


def test_unexpected_error_is_500(client, monkeypatch):
    def crash():
        raise RuntimeError("boom")

    monkeypatch.setattr(api, "load_dashboard_data", crash)
    res = client.get("/meta/queues")
    assert res.status_code == 500
    assert res.json() == {"error": "boom", "type": "RuntimeError"}
