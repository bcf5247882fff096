"""Ollama HTTP client for document extraction (vision model) and credit reasoning"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

import httpx

from credit_assessor.config import ModelConfig
from credit_assessor.domain.exceptions import ModelAPIError, ModelResponseParseError
from credit_assessor.infrastructure.clients.prompts import credit_recommendation_prompt, extraction_prompt
from credit_assessor.infrastructure.observability.metrics import model_failure_counter, model_latency_histogram
from credit_assessor.utils.json_recovery import extract_json

logger = logging.getLogger(__name__)

PARSE_FAILURE_RISK_FACTOR = "Unable to parse structured data from vision model"


class OllamaClient:
    """Client for a local Ollama server hosting the vision and reasoning models"""

    def __init__(self, config: ModelConfig | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.config = config or ModelConfig.from_settings()
        self.transport = transport

    @property
    def vision_model(self) -> str:
        return self.config.vision_model

    @property
    def reasoning_model(self) -> str:
        return self.config.reasoning_model

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.config.base_url, timeout=timeout, transport=self.transport)

    async def generate(self, prompt: str, image_base64: str | None = None, model: str | None = None) -> str:
        """
        Run one non-streaming generation and return the raw response text.

        Images are only attached when the vision model is selected.

        Raises:
            ModelAPIError: On timeout, HTTP errors, or a malformed envelope
        """
        selected_model = model or (self.vision_model if image_base64 else self.reasoning_model)
        payload: Dict[str, Any] = {
            "model": selected_model,
            "prompt": prompt,
            "stream": False,
            "options": {
                # Lower temperature for extraction, higher for reasoning
                "temperature": 0.1 if image_base64 else 0.3,
                "top_p": 0.9,
                "top_k": 40,
            },
        }
        if image_base64 and selected_model == self.vision_model:
            payload["images"] = [image_base64]

        logger.info(
            "Using model %s for %s",
            selected_model,
            "document extraction" if image_base64 else "credit analysis",
        )

        async with self._client(self.config.timeout_seconds) as client:
            try:
                with model_latency_histogram.labels(model=selected_model).time():
                    response = await client.post("/api/generate", json=payload)
                    response.raise_for_status()
                text = response.json()["response"]
                if not isinstance(text, str):
                    raise TypeError("'response' is not a string")
                return text

            except httpx.TimeoutException as e:
                model_failure_counter.labels(model=selected_model).inc()
                raise ModelAPIError(f"Ollama timeout after {self.config.timeout_seconds}s") from e
            except httpx.HTTPStatusError as e:
                model_failure_counter.labels(model=selected_model).inc()
                raise ModelAPIError(f"Ollama API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                model_failure_counter.labels(model=selected_model).inc()
                raise ModelAPIError(f"Ollama API request failed: {e}") from e
            except (KeyError, ValueError, TypeError) as e:
                model_failure_counter.labels(model=selected_model).inc()
                raise ModelAPIError(f"Invalid response from Ollama: {e}") from e

    async def check_health(self) -> Dict[str, Any]:
        """Report connectivity and whether both configured models are installed; never raises"""
        async with self._client(self.config.health_timeout_seconds) as client:
            try:
                response = await client.get("/api/tags")
                response.raise_for_status()
                models = [m["name"] for m in response.json().get("models", [])]
            except (httpx.HTTPError, KeyError, ValueError, TypeError, AttributeError) as e:
                return {"connected": False, "error": str(e)}

        # Match on model family so "qwen2.5vl:7b-q4" still counts
        vision_family = self.vision_model.split(":")[0]
        reasoning_family = self.reasoning_model.split(":")[0]
        has_vision = any(vision_family in name for name in models)
        has_reasoning = any(reasoning_family in name for name in models)

        return {
            "connected": True,
            "visionModelAvailable": has_vision,
            "reasoningModelAvailable": has_reasoning,
            "models": models,
            "status": {
                "vision": "available" if has_vision else "missing",
                "reasoning": "available" if has_reasoning else "missing",
            },
        }

    async def extract_financial_data(self, image_base64: str, document_type: str = "unknown") -> Dict[str, Any]:
        """
        Extract structured facts from one page image.

        Unparsable output yields a marker fact rather than an error so the
        document still counts; transport failures raise ModelAPIError.
        """
        response = await self.generate(extraction_prompt(document_type), image_base64, self.vision_model)
        extracted = extract_json(response)

        if extracted is not None:
            return {
                **extracted,
                "documentType": extracted.get("documentType") or document_type,
                "extractionModel": self.vision_model,
                "rawResponse": response[:200] + "...",
            }

        logger.warning("JSON extraction failed, using fallback structure")
        return {
            "documentType": document_type,
            "rawResponse": response,
            "extractedData": {},
            "riskFactors": [PARSE_FAILURE_RISK_FACTOR],
            "keyFindings": ["Document analysis completed but data extraction failed"],
            "confidence": 50,
            "extractionModel": self.vision_model,
            "error": "JSON parsing failed",
        }

    async def generate_credit_recommendation(
        self,
        extracted_data: List[Dict[str, Any]],
        document_summary: Dict[str, Any],
    ) -> Dict[str, Any]:
        """
        Ask the reasoning model for an unsanitized credit recommendation.

        Raises:
            ModelAPIError: Transport failure
            ModelResponseParseError: No JSON object could be recovered
        """
        prompt = credit_recommendation_prompt(extracted_data, document_summary, self.reasoning_model)
        response = await self.generate(prompt, None, self.reasoning_model)
        extracted = extract_json(response)

        if extracted is None:
            raise ModelResponseParseError(
                f"Could not parse credit recommendation from {self.reasoning_model}: {response[:200]}"
            )

        return {
            **extracted,
            "analysisModel": self.reasoning_model,
            "generatedAt": datetime.now(timezone.utc).isoformat(),
        }
