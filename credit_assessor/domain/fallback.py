"""Rule-based fallback scoring - deterministic credit recommendation when the reasoning model is unavailable"""

from typing import List, Sequence, Tuple

from credit_assessor.domain.models import (
    FALLBACK_MODEL_ID,
    CreditRecommendation,
    DocumentType,
    FinancialMetrics,
    ProcessingResult,
)
from credit_assessor.domain.sanitizer import MAX_SCORE, MIN_SCORE, utc_timestamp
from credit_assessor.utils.number_utils import clamp

DEFAULT_EXTRACTION_MODEL = "qwen2.5vl:7b"

BASE_SCORE = 650
RISK_FACTOR_PENALTY = 15

FALLBACK_REASONING = "Fallback rule-based analysis used due to AI model unavailability"

# (minimum score, rating, max credit limit, interest rate %) - highest band first
SCORE_BANDS: Tuple[Tuple[int, str, int, float], ...] = (
    (800, "Excellent", 50_000, 6.5),
    (740, "Good", 25_000, 9.2),
    (670, "Fair", 15_000, 13.5),
    (580, "Poor", 8_000, 18.9),
    (MIN_SCORE, "Very Poor", 3_000, 24.9),
)


def _band_for(score: int) -> Tuple[int, str, int, float]:
    for band in SCORE_BANDS:
        if score >= band[0]:
            return band
    return SCORE_BANDS[-1]


def get_score_rating(score: int) -> str:
    return _band_for(score)[1]


def calculate_credit_limit(score: int) -> int:
    return _band_for(score)[2]


def calculate_interest_rate(score: int) -> float:
    return _band_for(score)[3]


def _income_of(metrics: FinancialMetrics) -> float:
    if metrics.monthly_income is not None:
        return metrics.monthly_income
    if metrics.annual_revenue is not None:
        return metrics.annual_revenue
    return 0


def _assets_of(metrics: FinancialMetrics) -> float:
    if metrics.total_assets is not None:
        return metrics.total_assets
    if metrics.account_balance is not None:
        return metrics.account_balance
    return 0


def _all_risk_factors(results: Sequence[ProcessingResult]) -> List[str]:
    return [rf for r in results for rf in r.extracted_data.risk_factors]


def assess_financial_strength(results: Sequence[ProcessingResult]) -> Tuple[int, str]:
    """
    Score adjustment and risk level from the documents' financial metrics.

    Tiers (averaged over documents that carry metrics):
    - income > 30k and assets > 75k: +100, Low risk
    - income > 15k and assets > 25k: +50, Medium risk
    - otherwise: -50, High risk

    Documents without metrics leave the score alone at Medium risk.
    """
    metrics = [
        r.extracted_data.financial_metrics
        for r in results
        if r.extracted_data.financial_metrics is not None
    ]
    if not metrics:
        return 0, "Medium"

    avg_income = sum(_income_of(m) for m in metrics) / len(metrics)
    avg_assets = sum(_assets_of(m) for m in metrics) / len(metrics)

    if avg_income > 30_000 and avg_assets > 75_000:
        return 100, "Low"
    if avg_income > 15_000 and avg_assets > 25_000:
        return 50, "Medium"
    return -50, "High"


def calculate_fallback_score(results: Sequence[ProcessingResult]) -> Tuple[int, str]:
    """Return (score, risk level) from financial strength minus a per-risk-factor penalty"""
    adjustment, risk_level = assess_financial_strength(results)
    base_score = BASE_SCORE + adjustment - RISK_FACTOR_PENALTY * len(_all_risk_factors(results))
    return int(clamp(base_score, MIN_SCORE, MAX_SCORE)), risk_level


def _document_types(results: Sequence[ProcessingResult]) -> List[str]:
    return [r.extracted_data.document_type for r in results]


def build_recommendation_text(
    score: int,
    rating: str,
    results: Sequence[ProcessingResult],
    extraction_model: str = DEFAULT_EXTRACTION_MODEL,
) -> str:
    doc_types = _document_types(results)
    has_financial = DocumentType.FINANCIAL.value in doc_types
    has_bank = DocumentType.BANK_STATEMENT.value in doc_types
    has_legal = DocumentType.LEGAL.value in doc_types

    parts = [
        f"Based on rule-based analysis of {len(results)} document(s) extracted using {extraction_model}, "
        f"the applicant shows a {rating.lower()} credit profile with a score of {score}."
    ]

    if has_financial and has_bank:
        parts.append(
            "The comprehensive financial documentation provides strong evidence of "
            "financial stability and creditworthiness."
        )
    elif has_financial or has_bank:
        parts.append(
            "The financial documentation provides adequate evidence of creditworthiness, "
            "though additional documentation could strengthen the application."
        )

    if has_legal:
        parts.append("Legal documentation appears to be in order with no significant compliance issues identified.")

    if score >= 740:
        parts.append("This applicant is recommended for approval with favorable terms.")
    elif score >= 670:
        parts.append("This applicant is recommended for approval with standard terms and monitoring.")
    else:
        parts.append("This applicant may require additional scrutiny or enhanced terms to mitigate risk.")

    return " ".join(parts)


def build_key_factors(
    results: Sequence[ProcessingResult],
    extraction_model: str = DEFAULT_EXTRACTION_MODEL,
) -> List[str]:
    doc_types = _document_types(results)
    factors = []

    if DocumentType.BANK_STATEMENT.value in doc_types:
        factors.append(f"Bank statement analysis completed with {extraction_model}")
    if DocumentType.FINANCIAL.value in doc_types:
        factors.append("Financial statement review conducted")
    if DocumentType.LEGAL.value in doc_types:
        factors.append("Legal documentation verified")

    factors.extend(
        [
            "AI-powered document extraction using computer vision",
            "Multi-document cross-validation performed",
            "Automated risk assessment completed",
        ]
    )
    return factors[:6]


# Risk-factor keyword -> suggestion, checked in this order
IMPROVEMENT_RULES: Tuple[Tuple[str, str], ...] = (
    ("income", "Consider providing additional income documentation"),
    ("debt", "Work on reducing outstanding debt obligations"),
    ("balance", "Maintain higher account balances consistently"),
)

DEFAULT_IMPROVEMENTS = (
    "Continue maintaining good financial practices",
    "Consider diversifying income sources",
    "Provide additional supporting documentation",
)


def build_improvement_suggestions(results: Sequence[ProcessingResult]) -> List[str]:
    risk_factors = [rf.lower() for rf in _all_risk_factors(results)]
    suggestions = [
        suggestion
        for keyword, suggestion in IMPROVEMENT_RULES
        if any(keyword in rf for rf in risk_factors)
    ]
    if not suggestions:
        suggestions = list(DEFAULT_IMPROVEMENTS)
    return suggestions[:4]


def generate_fallback_recommendation(
    results: Sequence[ProcessingResult],
    extraction_model: str = DEFAULT_EXTRACTION_MODEL,
) -> CreditRecommendation:
    """
    Main fallback entry point: score the processed documents with fixed rules.

    Score bands (rating / limit / rate):
    - 800+:    Excellent / 50,000 / 6.5%
    - 740-799: Good      / 25,000 / 9.2%
    - 670-739: Fair      / 15,000 / 13.5%
    - 580-669: Poor      / 8,000  / 18.9%
    - <580:    Very Poor / 3,000  / 24.9%
    """
    score, risk_level = calculate_fallback_score(results)
    rating = get_score_rating(score)

    return CreditRecommendation(
        score=score,
        rating=rating,
        risk_level=risk_level,
        recommendation=build_recommendation_text(score, rating, results, extraction_model),
        key_factors=build_key_factors(results, extraction_model),
        improvement_suggestions=build_improvement_suggestions(results),
        max_credit_limit=calculate_credit_limit(score),
        interest_rate=calculate_interest_rate(score),
        reasoning=FALLBACK_REASONING,
        analysis_model=FALLBACK_MODEL_ID,
        generated_at=utc_timestamp(),
    )


def calculate_fallback_risk(results: Sequence[ProcessingResult]) -> str:
    """Overall risk from the mean number of risk factors per document"""
    if not results:
        return "Medium"

    avg_risk_factors = len(_all_risk_factors(results)) / len(results)
    if avg_risk_factors < 1.5:
        return "Low"
    if avg_risk_factors < 2.5:
        return "Medium"
    return "High"


def calculate_fallback_confidence(results: Sequence[ProcessingResult]) -> int:
    """
    Confidence for rule-based results.

    Starts at 75 (lower than model output), +2 per document up to +10,
    -15 per document that failed processing, bounded to 50-95.
    """
    confidence = 75
    confidence += min(len(results) * 2, 10)
    error_count = sum(1 for r in results if r.error)
    confidence -= error_count * 15
    return int(clamp(confidence, 50, 95))
