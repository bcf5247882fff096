"""Pytest fixtures for testing"""

from typing import Callable, List, Optional
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from credit_assessor.api.dependencies import get_ollama_client
from credit_assessor.api.main import create_app
from credit_assessor.config import ModelConfig, settings
from credit_assessor.domain.models import CombinedDocumentRecord, FinancialMetrics, ProcessingResult
from credit_assessor.infrastructure.clients.ollama import OllamaClient


@pytest.fixture
def model_config() -> ModelConfig:
    """Model configuration pointing at a fake endpoint"""
    return ModelConfig(
        base_url="http://ollama.test",
        vision_model="qwen2.5vl:7b",
        reasoning_model="deepseek-r1:8b",
        timeout_seconds=5.0,
    )


@pytest.fixture
def make_result() -> Callable[..., ProcessingResult]:
    """Factory for processed-document results"""

    def _make(
        document_type: str = "bank_statement",
        risk_factors: Optional[List[str]] = None,
        metrics: Optional[FinancialMetrics] = None,
        confidence: Optional[float] = None,
        error: Optional[str] = None,
        name: str = "statement.pdf",
        processing_time: int = 3,
        image_count: int = 1,
    ) -> ProcessingResult:
        return ProcessingResult(
            file_id=f"id-{name}",
            file_name=name,
            extracted_data=CombinedDocumentRecord(
                document_type=document_type,
                key_information={},
                risk_factors=list(risk_factors or []),
                financial_metrics=metrics,
                confidence=confidence,
            ),
            image_count=image_count,
            processing_time=processing_time,
            error=error,
        )

    return _make


@pytest.fixture
def fake_ollama(model_config: ModelConfig) -> AsyncMock:
    """Ollama client double; configure return values per test"""
    fake = AsyncMock(spec=OllamaClient)
    fake.config = model_config
    fake.vision_model = model_config.vision_model
    fake.reasoning_model = model_config.reasoning_model
    return fake


@pytest.fixture
def client(fake_ollama: AsyncMock, tmp_path, monkeypatch) -> TestClient:
    """Create FastAPI test client with a fake Ollama client and temp storage"""
    monkeypatch.setattr(settings, "upload_dir", str(tmp_path / "uploads"))
    monkeypatch.setattr(settings, "work_dir", str(tmp_path / "work"))

    app = create_app()
    app.dependency_overrides[get_ollama_client] = lambda: fake_ollama
    return TestClient(app)
