"""Recommendation sanitizer - turn untrusted reasoner output into a well-formed CreditRecommendation"""

from datetime import datetime, timezone
from typing import Any, List, Mapping

from credit_assessor.domain.models import VALID_RATINGS, VALID_RISK_LEVELS, CreditRecommendation
from credit_assessor.utils.number_utils import clamp, round_half_up, to_number

DEFAULT_ANALYSIS_MODEL = "deepseek-r1:8b"

MIN_SCORE = 300
MAX_SCORE = 850
DEFAULT_SCORE = 650
DEFAULT_RATING = "Fair"
DEFAULT_RISK_LEVEL = "Medium"
DEFAULT_CREDIT_LIMIT = 10_000
DEFAULT_INTEREST_RATE = 15.0
MAX_INTEREST_RATE = 50.0
MAX_LIST_ITEMS = 6

DEFAULT_RECOMMENDATION = "No recommendation available"
DEFAULT_REASONING = "Analysis completed"
DEFAULT_KEY_FACTOR = "Positive factor identified"
DEFAULT_IMPROVEMENT = "Consider improvement"


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def validate_score(raw: Mapping[str, Any]) -> int:
    # Reasoner reports "creditScore"; sanitized records carry "score"
    value = raw.get("creditScore")
    if to_number(value) is None:
        value = raw.get("score")
    number = to_number(value)
    if number is None:
        return DEFAULT_SCORE
    return round_half_up(clamp(number, MIN_SCORE, MAX_SCORE))


def validate_rating(value: Any) -> str:
    return value if value in VALID_RATINGS else DEFAULT_RATING


def validate_risk_level(value: Any) -> str:
    return value if value in VALID_RISK_LEVELS else DEFAULT_RISK_LEVEL


def validate_text(value: Any, default: str) -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def validate_string_list(value: Any, default: str) -> List[str]:
    """Non-empty trimmed strings only, at most MAX_LIST_ITEMS; never empty"""
    if not isinstance(value, (list, tuple)):
        return [default]
    items = [item.strip() for item in value if isinstance(item, str) and item.strip()]
    return items[:MAX_LIST_ITEMS] or [default]


def validate_credit_limit(value: Any) -> float:
    number = to_number(value)
    if number is None:
        return DEFAULT_CREDIT_LIMIT
    return max(0, number)


def validate_interest_rate(value: Any) -> float:
    number = to_number(value)
    if number is None:
        return DEFAULT_INTEREST_RATE
    return clamp(number, 0, MAX_INTEREST_RATE)


def validate_identifier(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def sanitize_recommendation(
    raw: Any,
    default_model: str = DEFAULT_ANALYSIS_MODEL,
) -> CreditRecommendation:
    """
    Validate every field of a reasoner response independently.

    Never raises: anything that is not a mapping is treated as an empty one,
    and every field has a terminal default. Rating and score are validated
    separately and are not reconciled with each other.

    Accepts its own output (CreditRecommendation or its to_dict() form), so
    sanitizing twice gives the same record.
    """
    if isinstance(raw, CreditRecommendation):
        raw = raw.to_dict()
    if not isinstance(raw, Mapping):
        raw = {}

    return CreditRecommendation(
        score=validate_score(raw),
        rating=validate_rating(raw.get("rating")),
        risk_level=validate_risk_level(raw.get("riskLevel")),
        recommendation=validate_text(raw.get("recommendation"), DEFAULT_RECOMMENDATION),
        key_factors=validate_string_list(raw.get("keyFactors"), DEFAULT_KEY_FACTOR),
        improvement_suggestions=validate_string_list(raw.get("improvementSuggestions"), DEFAULT_IMPROVEMENT),
        max_credit_limit=validate_credit_limit(raw.get("maxCreditLimit")),
        interest_rate=validate_interest_rate(raw.get("interestRate")),
        reasoning=validate_text(raw.get("reasoning"), DEFAULT_REASONING),
        analysis_model=validate_identifier(raw.get("analysisModel"), default_model),
        generated_at=validate_identifier(raw.get("generatedAt"), utc_timestamp()),
    )
