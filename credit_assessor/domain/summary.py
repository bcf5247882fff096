"""Cross-document summary statistics"""

from typing import Sequence

from credit_assessor.domain.models import DocumentSummary, ProcessingResult
from credit_assessor.utils.number_utils import round_half_up

# Assumed extraction confidence for records that never reported one
DEFAULT_CONFIDENCE = 80


def record_confidence(result: ProcessingResult) -> float:
    """Confidence of a processed document, defaulting when it was never reported"""
    confidence = result.extracted_data.confidence
    return DEFAULT_CONFIDENCE if confidence is None else confidence


def summarize_documents(results: Sequence[ProcessingResult]) -> DocumentSummary:
    """
    Aggregate processed documents into one summary.

    A reported confidence of 0 is kept as 0; only missing values default.
    An empty sequence yields an average confidence of 0.
    """
    document_types = list(dict.fromkeys(r.extracted_data.document_type for r in results))

    if results:
        average_confidence = round_half_up(sum(record_confidence(r) for r in results) / len(results))
    else:
        average_confidence = 0

    return DocumentSummary(
        total_documents=len(results),
        document_types=document_types,
        average_confidence=average_confidence,
        total_processing_time=sum(r.processing_time for r in results),
        total_images=sum(r.image_count for r in results),
    )
