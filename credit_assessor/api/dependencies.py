"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request

from credit_assessor.config import ModelConfig
from credit_assessor.infrastructure.clients.ollama import OllamaClient
from credit_assessor.services.analyzer import CreditAnalyzer
from credit_assessor.services.document_processor import DocumentProcessor


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_model_config() -> ModelConfig:
    """Model endpoint configuration, read from settings"""
    return ModelConfig.from_settings()


def get_ollama_client(config: ModelConfig = Depends(get_model_config)) -> OllamaClient:
    """Provide Ollama client instance"""
    return OllamaClient(config)


def get_document_processor(client: OllamaClient = Depends(get_ollama_client)) -> DocumentProcessor:
    """Provide document processor sharing the request's Ollama client"""
    return DocumentProcessor(client)


def get_credit_analyzer(
    config: ModelConfig = Depends(get_model_config),
    client: OllamaClient = Depends(get_ollama_client),
) -> CreditAnalyzer:
    """Provide credit analyzer sharing the request's Ollama client"""
    return CreditAnalyzer(config, client)
