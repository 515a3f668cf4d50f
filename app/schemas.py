"""
Pydantic Schemas for Request/Response Validation.

Defines data models for the Loan Approval Demo API.
"""

from datetime import date, datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ml.entities import (
    Decision,
    Education,
    EmploymentType,
    HomeOwnership,
    LoanApplication,
    ModelKind,
    RiskLevel,
)


class LoanApplicationRequest(BaseModel):
    """Loan application input schema with validation."""

    applicant_name: str = Field(
        default="", max_length=200, description="Applicant full name", examples=["Jane Doe"]
    )
    age: int = Field(..., ge=18, le=100, description="Age of the applicant (18-100 years)", examples=[30])
    income: float = Field(..., gt=0, description="Annual income in dollars", examples=[60000.0])
    education: Education = Field(..., description="Highest education level", examples=["Bachelor"])
    credit_score: int = Field(..., ge=300, le=850, description="Credit score (300-850)", examples=[650])
    employment_type: EmploymentType = Field(
        ..., description="Employment status", examples=["Employed"]
    )
    loan_amount: float = Field(..., gt=0, description="Requested loan amount", examples=[25000.0])
    loan_term: Literal[12, 24, 36, 48, 60] = Field(
        ..., description="Loan term in months", examples=[36]
    )
    home_ownership: HomeOwnership = Field(..., description="Home ownership status", examples=["Rent"])
    dependents: int = Field(..., ge=0, le=20, description="Number of dependents", examples=[0])
    previous_defaults: bool = Field(
        default=False, description="Whether the applicant has defaulted before", examples=[False]
    )
    bank_relationship: float = Field(
        default=0, ge=0, le=100, description="Years as a customer of the bank", examples=[2]
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "applicant_name": "Jane Doe",
                "age": 30,
                "income": 60000.0,
                "education": "Bachelor",
                "credit_score": 650,
                "employment_type": "Employed",
                "loan_amount": 25000.0,
                "loan_term": 36,
                "home_ownership": "Rent",
                "dependents": 0,
                "previous_defaults": False,
                "bank_relationship": 2,
            }
        }
    }

    def to_entity(self, application_id: Optional[str] = None) -> LoanApplication:
        """Convert to the immutable domain record."""
        fields = self.model_dump()
        if application_id is not None:
            fields["id"] = application_id
        return LoanApplication(**fields)


class LoanApplicationRecord(BaseModel):
    """Loan application as returned by the API, with its identifier."""

    id: str
    applicant_name: str
    age: int
    income: float
    education: Education
    credit_score: int
    employment_type: EmploymentType
    loan_amount: float
    loan_term: int
    home_ownership: HomeOwnership
    dependents: int
    previous_defaults: bool
    bank_relationship: float

    model_config = ConfigDict(from_attributes=True)


class FeatureVectorResponse(BaseModel):
    """Normalized feature vector for one application."""

    application_id: str = Field(..., description="Identifier of the encoded application")
    features: Dict[str, float] = Field(..., description="Sanitized feature values by name")


class ModelOutputResponse(BaseModel):
    """Single model decision."""

    decision: Decision = Field(..., description="Model decision")
    confidence: float = Field(..., ge=0.5, le=1, description="Confidence in the chosen decision")
    approval_probability: float = Field(..., ge=0, le=1, description="Confidence on the approval axis")

    model_config = ConfigDict(from_attributes=True)


class ScoreResponse(ModelOutputResponse):
    """Single model decision for a named model."""

    model_kind: ModelKind = Field(..., description="Model that produced the decision")

    model_config = ConfigDict(from_attributes=True, protected_namespaces=())


class FactorResponse(BaseModel):
    """Explanatory factor schema."""

    factor: str = Field(..., description="Factor name")
    impact: float = Field(..., ge=0, le=100, description="Impact on a 0-100 scale")
    description: str = Field(..., description="Human-readable explanation")

    model_config = ConfigDict(from_attributes=True)


class PredictionResponse(BaseModel):
    """Ensemble loan decision response schema."""

    application_id: str = Field(..., description="Identifier of the scored application")
    decision: Decision = Field(..., description="Ensemble decision")
    confidence: float = Field(..., ge=0, le=1, description="Confidence in the ensemble decision")
    approval_probability: float = Field(
        ..., ge=0, le=1, description="Weighted approval probability of both models"
    )
    risk_score: float = Field(..., ge=0, le=100, description="Risk score (0-100)")
    risk_level: RiskLevel = Field(..., description="Risk band of the risk score")
    linear: ModelOutputResponse = Field(..., description="Logistic model output")
    vote: ModelOutputResponse = Field(..., description="Vote model output")
    factors: List[FactorResponse] = Field(..., description="Explanatory factors")
    timestamp: datetime = Field(
        default_factory=datetime.utcnow, description="Timestamp of the prediction"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "application_id": "3f2c9a7e4b1d4f0e8a6c2b9d7e5f1a3c",
                "decision": "Approved",
                "confidence": 0.62,
                "approval_probability": 0.62,
                "risk_score": 38.0,
                "risk_level": "Medium",
                "linear": {"decision": "Approved", "confidence": 0.6, "approval_probability": 0.6},
                "vote": {"decision": "Approved", "confidence": 0.65, "approval_probability": 0.65},
                "factors": [
                    {
                        "factor": "Credit Score",
                        "impact": 76.47,
                        "description": "Credit score of 650 indicates poor credit history",
                    }
                ],
                "timestamp": "2024-01-15T10:30:00Z",
            }
        }
    }


class BatchPredictionRequest(BaseModel):
    """Batch prediction request schema."""

    applications: List[LoanApplicationRequest] = Field(
        ..., min_length=1, max_length=100, description="List of loan applications (max 100)"
    )


class BatchPredictionResponse(BaseModel):
    """Batch prediction response schema."""

    predictions: List[PredictionResponse] = Field(..., description="List of prediction results")
    total_processed: int = Field(..., description="Total number of applications processed")
    processing_time_ms: float = Field(..., description="Total processing time in milliseconds")


class SyntheticApplicationsResponse(BaseModel):
    """Synthetic applications response schema."""

    applications: List[LoanApplicationRecord]
    count: int


class ConfusionMatrixResponse(BaseModel):
    true_positive: int = Field(..., ge=0)
    false_positive: int = Field(..., ge=0)
    true_negative: int = Field(..., ge=0)
    false_negative: int = Field(..., ge=0)

    model_config = ConfigDict(from_attributes=True)


class EvaluationResponse(BaseModel):
    """Model evaluation report schema."""

    model_kind: ModelKind = Field(..., description="Evaluated model")
    sample_size: int = Field(..., ge=0, description="Number of synthetic samples")
    accuracy: float = Field(..., ge=0, le=1)
    precision: float = Field(..., ge=0, le=1)
    recall: float = Field(..., ge=0, le=1)
    f1_score: float = Field(..., ge=0, le=1)
    auc: float = Field(..., ge=0, le=1)
    confusion_matrix: ConfusionMatrixResponse

    model_config = ConfigDict(from_attributes=True, protected_namespaces=())


class ModelComparisonResponse(BaseModel):
    """Evaluation reports for every model."""

    reports: List[EvaluationResponse]
    processing_time_ms: float


class StockSymbolResponse(BaseModel):
    symbol: str
    name: str
    current_price: float
    change: float
    change_percent: float

    model_config = ConfigDict(from_attributes=True)


class PricePointResponse(BaseModel):
    date: date
    price: float
    volume: int

    model_config = ConfigDict(from_attributes=True)


class ForecastPointResponse(BaseModel):
    date: date
    predicted: float
    confidence: float = Field(..., ge=0, le=1)

    model_config = ConfigDict(from_attributes=True)


class ForecastSummaryResponse(BaseModel):
    average_predicted: float
    average_confidence: float
    price_change: float
    change_percent: float

    model_config = ConfigDict(from_attributes=True)


class ForecastResponse(BaseModel):
    """Historical series and forward prediction for one ticker."""

    symbol: str
    current_price: float
    historical: List[PricePointResponse]
    predictions: List[ForecastPointResponse]
    summary: ForecastSummaryResponse
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: Literal["healthy", "unhealthy"] = Field(..., description="Service health status")
    version: str = Field(..., description="API version")
    timestamp: datetime = Field(
        default_factory=datetime.utcnow, description="Current server timestamp"
    )


class ModelInfoResponse(BaseModel):
    """Scoring model configuration response schema."""

    features: List[str] = Field(..., description="Feature vector layout")
    linear_weights: List[float] = Field(..., description="Logistic model weights")
    linear_bias: float = Field(..., description="Logistic model bias")
    vote_estimators: int = Field(..., description="Number of vote scorers")
    vote_seeded: bool = Field(..., description="Whether vote scorer seeds are reproducible")
    ensemble_weights: Dict[str, float] = Field(..., description="Ensemble weight per model")
    decision_threshold: float = Field(..., description="Ensemble approval threshold")


class ErrorResponse(BaseModel):
    """Error response schema."""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Additional error details")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Error timestamp")
