"""
Tests for the HTTP surface.
"""
import pytest
from fastapi.testclient import TestClient

from service_api.main import app


@pytest.fixture
def client():
    return TestClient(app)


class TestEndpoints:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_config(self, client):
        body = client.get("/config").json()
        assert body["scorer"] == "heuristic"
        assert "heuristic" in body["available_scorers"]

    def test_demo_dataset(self, client):
        assert len(client.get("/demo_dataset").json()) == 2

    def test_validate_form(self, client, reference_fields):
        body = client.post("/validate", json=reference_fields).json()
        assert body["prediction"] == "Good"
        assert body["formData"] == reference_fields

    def test_validate_form_violations(self, client):
        resp = client.post("/validate", json={"ph": "15"})
        assert resp.status_code == 422
        violations = resp.json()["detail"]["violations"]
        assert len(violations) == 9
        assert violations[0] == {"field": "ph", "reason": violations[0]["reason"], "kind": "out_of_range"}

    def test_validate_file(self, client):
        content = b"ph,hardness,solids,chloramines,sulfate,conductivity,organic_carbon,trihalomethanes,turbidity\n" \
                  b"9.5,200,500,2.5,250,400,10,50,3.5\n"
        resp = client.post("/validate_file", files={"file": ("samples.csv", content, "text/csv")})
        body = resp.json()
        assert body["prediction"] == "Moderate"
        assert body["mode"] == "file"
        assert len(body["tableData"]) == 1

    def test_validate_file_malformed(self, client):
        resp = client.post("/validate_file", files={"file": ("samples.json", b"[{", "application/json")})
        assert resp.status_code == 400

    def test_validate_file_empty_dataset(self, client):
        resp = client.post("/validate_file", files={"file": ("samples.json", b"[]", "application/json")})
        assert resp.status_code == 400
        assert "upload a dataset" in resp.json()["detail"]

    def test_validate_demo(self, client):
        assert client.post("/validate_demo").json()["prediction"] == "Good"

    def test_export_csv(self, client):
        resp = client.post("/export_csv", params={"label": "demo"}, json=[{"ph": "7"}])
        assert resp.text == 'ph\n"7"'
        disposition = resp.headers["content-disposition"]
        assert 'filename="demo_' in disposition and disposition.endswith('.csv"')

    def test_export_csv_label_cannot_break_header(self, client):
        resp = client.post("/export_csv", params={"label": 'x"; evil="1'}, json=[{"ph": "7"}])
        disposition = resp.headers["content-disposition"]
        assert disposition.startswith('attachment; filename="x_evil_1_')
        assert disposition.count('"') == 2
