"""Fact combination - merge per-image extraction output into one record per document"""

from typing import Any, Dict, List, Mapping, Optional, Sequence

from credit_assessor.domain.models import (
    FINANCIAL_FIELDS,
    CombinedDocumentRecord,
    DocumentType,
    FinancialMetrics,
)
from credit_assessor.utils.number_utils import clamp, is_number, round_half_up

NO_DATA_RISK_FACTOR = "No data extracted"


def determine_document_type(filename: str) -> DocumentType:
    """Guess the document type from its file name (drives the extraction prompt)"""
    lower_name = filename.lower()

    if "bank" in lower_name or "statement" in lower_name:
        return DocumentType.BANK_STATEMENT
    if any(word in lower_name for word in ("financial", "income", "revenue")):
        return DocumentType.FINANCIAL
    if any(word in lower_name for word in ("legal", "contract", "agreement")):
        return DocumentType.LEGAL

    return DocumentType.UNKNOWN


def _risk_factors_of(fact: Mapping[str, Any]) -> List[str]:
    risk_factors = fact.get("riskFactors")
    if not isinstance(risk_factors, (list, tuple)):
        return []
    return [item for item in risk_factors if isinstance(item, str)]


def _confidence_of(fact: Mapping[str, Any]) -> Optional[float]:
    confidence = fact.get("confidence")
    if not is_number(confidence):
        return None
    return clamp(float(confidence), 0.0, 100.0)


def extract_financial_metrics(fact: Mapping[str, Any]) -> Optional[FinancialMetrics]:
    """
    Pick the recognized numeric fields out of one extracted fact.

    Non-numeric and missing values are dropped. Returns None when no
    recognized field carries a number.
    """
    values = {
        attr: fact[wire_name]
        for wire_name, attr in FINANCIAL_FIELDS.items()
        if is_number(fact.get(wire_name))
    }
    return FinancialMetrics(**values) if values else None


def average_financial_metrics(facts: Sequence[Mapping[str, Any]]) -> Optional[FinancialMetrics]:
    """Field-wise mean over every fact that supplied a number for that field"""
    values: Dict[str, float] = {}
    for wire_name, attr in FINANCIAL_FIELDS.items():
        samples = [fact[wire_name] for fact in facts if is_number(fact.get(wire_name))]
        if samples:
            values[attr] = sum(samples) / len(samples)
    return FinancialMetrics(**values) if values else None


def combine_extracted_facts(
    facts: Sequence[Mapping[str, Any]],
    declared_type: DocumentType | str,
) -> CombinedDocumentRecord:
    """
    Merge the facts extracted from each page image of a document.

    Rules:
    - No facts: an "error" record with a single diagnostic risk factor
    - One fact: kept verbatim as key information; its own document type wins
    - Several facts: declared type, ordered union of risk factors, shallow
      merge of key information (later pages overwrite earlier keys) and the
      mean of each financial metric

    Facts must be passed in page order; the key-information merge depends on it.
    """
    declared = DocumentType.parse(declared_type) or DocumentType.UNKNOWN

    if not facts:
        return CombinedDocumentRecord(
            document_type=DocumentType.ERROR.value,
            key_information={},
            risk_factors=[NO_DATA_RISK_FACTOR],
            confidence=0,
        )

    if len(facts) == 1:
        fact = facts[0]
        own_type = DocumentType.parse(fact.get("documentType"))
        return CombinedDocumentRecord(
            document_type=(own_type or declared).value,
            key_information=dict(fact),
            risk_factors=_risk_factors_of(fact),
            financial_metrics=extract_financial_metrics(fact),
            confidence=_confidence_of(fact),
        )

    # Ordered de-duplication: dict keys keep first-insertion order
    risk_factors = list(dict.fromkeys(rf for fact in facts for rf in _risk_factors_of(fact)))

    key_information: Dict[str, Any] = {}
    for fact in facts:
        key_information.update(fact)

    confidences = [c for c in (_confidence_of(fact) for fact in facts) if c is not None]

    return CombinedDocumentRecord(
        document_type=declared.value,
        key_information=key_information,
        risk_factors=risk_factors,
        financial_metrics=average_financial_metrics(facts),
        confidence=round_half_up(sum(confidences) / len(confidences)) if confidences else None,
    )
