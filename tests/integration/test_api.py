"""Integration tests for API endpoints"""

import io
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from credit_assessor.config import settings
from credit_assessor.domain.exceptions import ModelAPIError

pytestmark = pytest.mark.integration


def png_bytes(size=(64, 48)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, "white").save(buffer, "PNG")
    return buffer.getvalue()


def upload(client: TestClient, *names: str):
    files = [("documents", (name, png_bytes(), "image/png")) for name in names]
    response = client.post("/v1/upload", files=files)
    assert response.status_code == 200
    return response.json()["files"]


@pytest.fixture
def good_extraction(fake_ollama):
    fake_ollama.extract_financial_data.return_value = {
        "documentType": "bank_statement",
        "monthlyIncome": 42000,
        "accountBalance": 95000,
        "riskFactors": [],
        "confidence": 90,
    }
    return fake_ollama


def test_health_endpoint(client: TestClient):
    """Test liveness endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "credit_analysis_total" in response.text
    assert "model_request_latency_seconds" in response.text


def test_request_id_is_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"
    assert client.get("/health").headers["X-Request-ID"]


def test_model_health_endpoint(client: TestClient, fake_ollama):
    fake_ollama.check_health.return_value = {"connected": False, "error": "connection refused"}

    response = client.get("/v1/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["timestamp"]
    assert data["ollama"] == {"connected": False, "error": "connection refused"}
    assert data["models"] == {"extraction": "qwen2.5vl:7b", "analysis": "deepseek-r1:8b"}


def test_upload_stores_files(client: TestClient):
    files = upload(client, "Bank_Statement.PNG", "income.png")

    assert len(files) == 2
    first = files[0]
    assert first["originalName"] == "Bank_Statement.PNG"
    assert first["mimetype"] == "image/png"
    assert first["filename"] == f"documents-{first['id']}.png"
    assert first["size"] > 0
    assert (Path(settings.upload_dir) / first["filename"]).exists()


def test_upload_rejects_invalid_type(client: TestClient):
    response = client.post(
        "/v1/upload",
        files=[
            ("documents", ("scan.png", png_bytes(), "image/png")),
            ("documents", ("notes.txt", b"plain text", "text/plain")),
        ],
    )

    assert response.status_code == 400
    assert "Invalid file type" in response.json()["detail"]
    # nothing from the rejected batch is stored
    assert not Path(settings.upload_dir).exists() or not any(Path(settings.upload_dir).iterdir())


def test_upload_rejects_too_many_files(client: TestClient, monkeypatch):
    monkeypatch.setattr(settings, "max_files_per_upload", 1)

    response = client.post(
        "/v1/upload",
        files=[("documents", (f"page{i}.png", png_bytes(), "image/png")) for i in range(2)],
    )

    assert response.status_code == 400
    assert "Too many files" in response.json()["detail"]


def test_upload_rejects_large_file(client: TestClient, monkeypatch):
    monkeypatch.setattr(settings, "max_upload_bytes", 10)

    response = client.post("/v1/upload", files=[("documents", ("scan.png", png_bytes(), "image/png"))])

    assert response.status_code == 400
    assert "File too large" in response.json()["detail"]


def test_process_with_model_recommendation(client: TestClient, good_extraction):
    good_extraction.generate_credit_recommendation.return_value = {
        "creditScore": 782,
        "rating": "Good",
        "riskLevel": "Low",
        "recommendation": "Approve with standard terms.",
        "keyFactors": ["Stable income"],
        "improvementSuggestions": ["Keep balances high"],
        "maxCreditLimit": 25000,
        "interestRate": 9.5,
        "reasoning": "Income comfortably covers obligations.",
        "confidence": 88,
        "analysisModel": "deepseek-r1:8b",
    }
    files = upload(client, "bank_statement.png")

    response = client.post("/v1/process", json={"files": files})

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    results = data["results"]
    assert results["creditRecommendation"]["score"] == 782
    assert results["creditRecommendation"]["rating"] == "Good"
    assert results["overallRisk"] == "Low"
    assert results["confidence"] == 88
    assert results["modelInfo"]["analysisModel"] == "deepseek-r1:8b"
    assert results["documentSummary"]["totalDocuments"] == 1
    assert results["documentSummary"]["documentTypes"] == ["bank_statement"]
    assert results["files"][0]["fileName"] == "bank_statement.png"
    assert results["files"][0]["imageCount"] == 1
    assert results.get("error") is None

    # uploads are removed once processed
    assert not (Path(settings.upload_dir) / files[0]["filename"]).exists()


def test_process_falls_back_when_reasoner_fails(client: TestClient, good_extraction):
    good_extraction.generate_credit_recommendation.side_effect = ModelAPIError("Ollama timeout after 180.0s")
    files = upload(client, "bank_statement.png")

    response = client.post("/v1/process", json={"files": files})

    assert response.status_code == 200
    results = response.json()["results"]
    assert results["creditRecommendation"]["score"] == 750
    assert results["creditRecommendation"]["rating"] == "Good"
    assert results["creditRecommendation"]["analysisModel"] == "fallback-rules"
    assert results["overallRisk"] == "Low"
    assert results["confidence"] == 77
    assert results["modelInfo"]["analysisModel"] == "fallback-rules"
    assert results["modelInfo"]["error"] == "Ollama timeout after 180.0s"
    assert results["error"] == "AI analysis failed, using fallback rules"


def test_process_returns_422_when_no_document_is_processed(client: TestClient, fake_ollama):
    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True)
    (upload_dir / "documents-1.txt").write_text("plain text")
    descriptor = {
        "id": "1",
        "originalName": "notes.txt",
        "filename": "documents-1.txt",
        "size": 10,
        "mimetype": "text/plain",
    }

    response = client.post("/v1/process", json={"files": [descriptor]})

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["details"] == ["notes.txt: Unsupported file type: text/plain"]
    fake_ollama.generate_credit_recommendation.assert_not_awaited()
    assert not (upload_dir / "documents-1.txt").exists()


def test_process_returns_422_for_empty_request(client: TestClient):
    response = client.post("/v1/process", json={"files": []})

    assert response.status_code == 422
    assert response.json()["detail"]["error"] == "No documents were submitted for analysis"


@pytest.mark.parametrize("filename", ["../secrets.png", "nested/documents-1.png", ".."])
def test_process_rejects_path_like_file_references(client: TestClient, fake_ollama, filename):
    descriptor = {
        "id": "1",
        "originalName": "scan.png",
        "filename": filename,
        "mimetype": "image/png",
        "path": "/etc/passwd",
    }

    stored = upload(client, "bank_statement.png")

    response = client.post("/v1/process", json={"files": stored + [descriptor]})

    assert response.status_code == 400
    assert filename in response.json()["detail"]
    fake_ollama.extract_financial_data.assert_not_awaited()
    # the valid upload in the rejected request is removed too
    assert not (Path(settings.upload_dir) / stored[0]["filename"]).exists()


def test_process_rejects_malformed_body(client: TestClient):
    response = client.post("/v1/process", json={"files": [{"id": "1"}]})

    assert response.status_code == 422
