"""Credit analysis orchestration - reasoning model first, rule-based fallback on any failure"""

import logging
from typing import Any, Dict, List, Mapping, Sequence

from credit_assessor.config import ModelConfig
from credit_assessor.domain.exceptions import NoDocumentsProcessedError
from credit_assessor.domain.fallback import (
    calculate_fallback_confidence,
    calculate_fallback_risk,
    generate_fallback_recommendation,
)
from credit_assessor.domain.models import (
    FALLBACK_MODEL_ID,
    AnalysisResult,
    DocumentSummary,
    ModelInfo,
    ProcessingResult,
)
from credit_assessor.domain.sanitizer import sanitize_recommendation
from credit_assessor.domain.summary import record_confidence, summarize_documents
from credit_assessor.infrastructure.clients.ollama import OllamaClient
from credit_assessor.utils.number_utils import clamp, round_half_up, to_number

logger = logging.getLogger(__name__)

FALLBACK_ERROR = "AI analysis failed, using fallback rules"


def build_reasoner_payload(results: Sequence[ProcessingResult]) -> List[Dict[str, Any]]:
    """Per-document facts in the shape the reasoning prompt expects"""
    payload = []
    for r in results:
        record = r.extracted_data
        payload.append(
            {
                "fileName": r.file_name,
                "documentType": record.document_type,
                "keyInformation": record.key_information,
                "financialMetrics": record.financial_metrics.to_dict() if record.financial_metrics else None,
                "riskFactors": list(record.risk_factors),
                "confidence": record_confidence(r),
                "processingTime": r.processing_time,
                "imageCount": r.image_count,
            }
        )
    return payload


def reported_confidence(raw: Mapping[str, Any]) -> int | None:
    number = to_number(raw.get("confidence"))
    if number is None:
        return None
    return round_half_up(clamp(number, 0, 100))


class CreditAnalyzer:
    """Turns processed documents into a credit analysis result"""

    def __init__(self, config: ModelConfig, client: OllamaClient | None = None):
        self.config = config
        self.client = client or OllamaClient(config)

    async def analyze(self, results: Sequence[ProcessingResult]) -> AnalysisResult:
        """
        Main entry point: ask the reasoning model, sanitize, or fall back.

        Flow:
        1. Refuse when no document was processed successfully
        2. Summarize documents and build the reasoning payload
        3. Single reasoning call; any failure switches to the rule-based path
        4. Sanitize the model output; overall risk is the sanitized risk level,
           confidence comes from fallback rules only when the model reported none

        Raises:
            NoDocumentsProcessedError: Nothing to analyze
        """
        if not results:
            raise NoDocumentsProcessedError("No documents were submitted for analysis")

        failed = [r for r in results if r.error]
        if len(failed) == len(results):
            raise NoDocumentsProcessedError(
                "None of the submitted documents could be processed",
                details=[f"{r.file_name}: {r.error}" for r in failed],
            )

        summary = summarize_documents(results)
        logger.info("Generating credit recommendation with %s", self.config.reasoning_model)

        try:
            raw = await self.client.generate_credit_recommendation(
                build_reasoner_payload(results),
                summary.to_dict(),
            )
        except Exception as e:  # any reasoner failure routes to the rule-based path
            logger.error(f"Credit analysis failed, using fallback: {e}")
            return self._fallback_result(results, summary, str(e))

        if not isinstance(raw, Mapping):
            raw = {}

        recommendation = sanitize_recommendation(raw, default_model=self.config.reasoning_model)
        confidence = reported_confidence(raw)
        if confidence is None:
            confidence = calculate_fallback_confidence(results)

        return AnalysisResult(
            recommendation=recommendation,
            overall_risk=recommendation.risk_level,
            confidence=confidence,
            document_summary=summary,
            model_info=ModelInfo(
                extraction_model=self.config.vision_model,
                analysis_model=self.config.reasoning_model,
                total_processing_time=summary.total_processing_time,
            ),
        )

    def _fallback_result(
        self,
        results: Sequence[ProcessingResult],
        summary: DocumentSummary,
        error: str,
    ) -> AnalysisResult:
        return AnalysisResult(
            recommendation=generate_fallback_recommendation(results, self.config.vision_model),
            overall_risk=calculate_fallback_risk(results),
            confidence=calculate_fallback_confidence(results),
            document_summary=summary,
            model_info=ModelInfo(
                extraction_model=self.config.vision_model,
                analysis_model=FALLBACK_MODEL_ID,
                total_processing_time=summary.total_processing_time,
                error=error,
            ),
            error=FALLBACK_ERROR,
        )
