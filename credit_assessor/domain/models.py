"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class DocumentType(str, Enum):
    """Document categories understood by the extraction prompts"""

    BANK_STATEMENT = "bank_statement"
    FINANCIAL = "financial"
    LEGAL = "legal"
    UNKNOWN = "unknown"
    ERROR = "error"

    @classmethod
    def parse(cls, value: Any) -> Optional["DocumentType"]:
        """Return the matching member, or None for anything unrecognized"""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return None
        return None


VALID_RATINGS = ("Excellent", "Good", "Fair", "Poor", "Very Poor")
VALID_RISK_LEVELS = ("Low", "Medium", "High")
FALLBACK_MODEL_ID = "fallback-rules"

# Wire name -> attribute name for the numeric fields lifted out of extracted facts
FINANCIAL_FIELDS: Dict[str, str] = {
    "accountBalance": "account_balance",
    "monthlyIncome": "monthly_income",
    "monthlyExpenses": "monthly_expenses",
    "annualRevenue": "annual_revenue",
    "netProfit": "net_profit",
    "totalAssets": "total_assets",
    "totalLiabilities": "total_liabilities",
    "cashFlow": "cash_flow",
}


@dataclass(frozen=True)
class FinancialMetrics:
    """Numeric figures found in a document; absent fields stay None"""

    account_balance: Optional[float] = None
    monthly_income: Optional[float] = None
    monthly_expenses: Optional[float] = None
    annual_revenue: Optional[float] = None
    net_profit: Optional[float] = None
    total_assets: Optional[float] = None
    total_liabilities: Optional[float] = None
    cash_flow: Optional[float] = None

    def to_dict(self) -> Dict[str, float]:
        return {
            wire_name: getattr(self, attr)
            for wire_name, attr in FINANCIAL_FIELDS.items()
            if getattr(self, attr) is not None
        }


@dataclass(frozen=True)
class CombinedDocumentRecord:
    """Canonical facts for one document, merged across its page images"""

    document_type: str
    key_information: Dict[str, Any] = field(default_factory=dict)
    risk_factors: List[str] = field(default_factory=list)
    financial_metrics: Optional[FinancialMetrics] = None
    confidence: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "documentType": self.document_type,
            "keyInformation": self.key_information,
            "riskFactors": list(self.risk_factors),
        }
        if self.financial_metrics is not None:
            data["financialMetrics"] = self.financial_metrics.to_dict()
        if self.confidence is not None:
            data["confidence"] = self.confidence
        return data


@dataclass
class ProcessingResult:
    """Outcome of processing one uploaded document"""

    file_id: str
    file_name: str
    extracted_data: CombinedDocumentRecord
    image_count: int
    processing_time: int  # seconds
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "fileId": self.file_id,
            "fileName": self.file_name,
            "extractedData": self.extracted_data.to_dict(),
            "imageCount": self.image_count,
            "processingTime": self.processing_time,
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class DocumentSummary:
    """Cross-document statistics for one analysis run"""

    total_documents: int
    document_types: List[str]
    average_confidence: int
    total_processing_time: int
    total_images: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalDocuments": self.total_documents,
            "documentTypes": list(self.document_types),
            "averageConfidence": self.average_confidence,
            "totalProcessingTime": self.total_processing_time,
            "totalImages": self.total_images,
        }


@dataclass
class CreditRecommendation:
    """Sanitized credit recommendation - every field is always well-formed"""

    score: int  # 300-850
    rating: str  # one of VALID_RATINGS
    risk_level: str  # one of VALID_RISK_LEVELS
    recommendation: str
    key_factors: List[str]
    improvement_suggestions: List[str]
    max_credit_limit: float
    interest_rate: float  # percent, 0-50
    reasoning: str
    analysis_model: str
    generated_at: str  # ISO-8601

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "rating": self.rating,
            "riskLevel": self.risk_level,
            "recommendation": self.recommendation,
            "keyFactors": list(self.key_factors),
            "improvementSuggestions": list(self.improvement_suggestions),
            "maxCreditLimit": self.max_credit_limit,
            "interestRate": self.interest_rate,
            "reasoning": self.reasoning,
            "analysisModel": self.analysis_model,
            "generatedAt": self.generated_at,
        }


@dataclass
class ModelInfo:
    """Which models produced the result"""

    extraction_model: str
    analysis_model: str
    total_processing_time: int
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "extractionModel": self.extraction_model,
            "analysisModel": self.analysis_model,
            "totalProcessingTime": self.total_processing_time,
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class AnalysisResult:
    """Output of the credit analysis for one request"""

    recommendation: CreditRecommendation
    overall_risk: str
    confidence: int  # 0-100
    document_summary: DocumentSummary
    model_info: ModelInfo
    error: Optional[str] = None

    @property
    def used_fallback(self) -> bool:
        return self.model_info.analysis_model == FALLBACK_MODEL_ID


@dataclass
class DocumentDescriptor:
    """Uploaded file awaiting processing"""

    id: str
    original_name: str
    filename: str
    mimetype: str
    size: int = 0
    path: str = ""
