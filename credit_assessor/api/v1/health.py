"""GET /v1/health - Service and model availability"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from credit_assessor.api.dependencies import get_ollama_client
from credit_assessor.api.v1.schemas import HealthResponse
from credit_assessor.infrastructure.clients.ollama import OllamaClient

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def model_health(client: OllamaClient = Depends(get_ollama_client)):
    """Report Ollama connectivity and whether the configured models are installed"""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        ollama=await client.check_health(),
        models={
            "extraction": client.vision_model,
            "analysis": client.reasoning_model,
        },
    )
