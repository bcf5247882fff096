"""Pydantic schemas for API request/response validation (camelCase on the wire)"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from credit_assessor.domain.models import (
    AnalysisResult,
    CreditRecommendation,
    DocumentDescriptor,
    DocumentSummary,
)


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys while exposing snake_case attributes"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, protected_namespaces=())


class FileDescriptor(CamelModel):
    """Uploaded file reference returned by /v1/upload and sent back to /v1/process"""

    id: str = Field(..., min_length=1)
    original_name: str
    filename: str = Field(..., min_length=1, description="Stored file name inside the upload directory")
    size: int = 0
    mimetype: str
    path: Optional[str] = None

    def to_domain(self, path: str) -> DocumentDescriptor:
        return DocumentDescriptor(
            id=self.id,
            original_name=self.original_name,
            filename=self.filename,
            mimetype=self.mimetype,
            size=self.size,
            path=path,
        )


class UploadResponse(BaseModel):
    """Response for POST /v1/upload"""

    success: bool
    files: List[FileDescriptor]
    message: str


class ProcessRequest(BaseModel):
    """Request body for POST /v1/process"""

    files: List[FileDescriptor]


class CreditRecommendationSchema(CamelModel):
    score: int
    rating: str
    risk_level: str
    recommendation: str
    key_factors: List[str]
    improvement_suggestions: List[str]
    max_credit_limit: float
    interest_rate: float
    reasoning: str
    analysis_model: str
    generated_at: str

    @classmethod
    def from_domain(cls, recommendation: CreditRecommendation) -> "CreditRecommendationSchema":
        return cls.model_validate(recommendation.to_dict())


class DocumentSummarySchema(CamelModel):
    total_documents: int
    document_types: List[str]
    average_confidence: int
    total_processing_time: int
    total_images: int

    @classmethod
    def from_domain(cls, summary: DocumentSummary) -> "DocumentSummarySchema":
        return cls.model_validate(summary.to_dict())


class AnalysisResults(CamelModel):
    files: List[Dict[str, Any]]
    credit_recommendation: CreditRecommendationSchema
    overall_risk: str
    confidence: int
    model_info: Dict[str, Any]
    document_summary: DocumentSummarySchema
    error: Optional[str] = None


class ProcessResponse(BaseModel):
    """Response for POST /v1/process"""

    success: bool
    results: AnalysisResults

    @classmethod
    def from_analysis(cls, files: List[Dict[str, Any]], analysis: AnalysisResult) -> "ProcessResponse":
        return cls(
            success=True,
            results=AnalysisResults(
                files=files,
                credit_recommendation=CreditRecommendationSchema.from_domain(analysis.recommendation),
                overall_risk=analysis.overall_risk,
                confidence=analysis.confidence,
                model_info=analysis.model_info.to_dict(),
                document_summary=DocumentSummarySchema.from_domain(analysis.document_summary),
                error=analysis.error,
            ),
        )


class HealthResponse(BaseModel):
    """Response for GET /v1/health"""

    status: str
    timestamp: str
    ollama: Dict[str, Any]
    models: Dict[str, str]
