"""
Domain entities for the Loan Approval and Stock Forecast models.

All entities are immutable and live for a single scoring, evaluation or
forecast call.
"""
import uuid
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List


class Education(str, Enum):
    HIGH_SCHOOL = "High School"
    BACHELOR = "Bachelor"
    MASTER = "Master"
    PHD = "PhD"


class EmploymentType(str, Enum):
    EMPLOYED = "Employed"
    SELF_EMPLOYED = "Self-Employed"
    UNEMPLOYED = "Unemployed"


class HomeOwnership(str, Enum):
    OWN = "Own"
    RENT = "Rent"
    MORTGAGE = "Mortgage"


class Decision(str, Enum):
    APPROVED = "Approved"
    REJECTED = "Rejected"


class ModelKind(str, Enum):
    """Scoring models the evaluation harness can run."""

    LINEAR = "linear"
    VOTE = "vote"


class RiskLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


def _new_application_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class LoanApplication:
    """A single loan applicant's input attributes."""

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
    id: str = field(default_factory=_new_application_id)


@dataclass(frozen=True)
class ModelOutput:
    """Decision of one scoring model, with confidence on the chosen side."""

    decision: Decision
    confidence: float

    @property
    def approved(self) -> bool:
        return self.decision is Decision.APPROVED

    @property
    def approval_probability(self) -> float:
        """Confidence projected onto the approval axis."""
        return self.confidence if self.approved else 1.0 - self.confidence


@dataclass(frozen=True)
class Factor:
    """Named explanation of one input's influence on the decision."""

    factor: str
    impact: float
    description: str


@dataclass(frozen=True)
class EnsembleResult:
    decision: Decision
    approval_probability: float
    confidence: float
    linear: ModelOutput
    vote: ModelOutput
    risk_score: float
    risk_level: RiskLevel
    factors: List[Factor]


@dataclass(frozen=True)
class ConfusionMatrix:
    true_positive: int = 0
    false_positive: int = 0
    true_negative: int = 0
    false_negative: int = 0

    @property
    def total(self) -> int:
        return self.true_positive + self.false_positive + self.true_negative + self.false_negative


@dataclass(frozen=True)
class EvaluationReport:
    """Aggregate metrics of one model over a synthetic labeled batch."""

    model_kind: ModelKind
    sample_size: int
    accuracy: float
    precision: float
    recall: float
    f1_score: float
    auc: float
    confusion_matrix: ConfusionMatrix


@dataclass(frozen=True)
class StockSymbol:
    symbol: str
    name: str
    current_price: float
    change: float
    change_percent: float


@dataclass(frozen=True)
class PricePoint:
    date: date
    price: float
    volume: int


@dataclass(frozen=True)
class ForecastPoint:
    date: date
    predicted: float
    confidence: float


@dataclass(frozen=True)
class ForecastSummary:
    average_predicted: float
    average_confidence: float
    price_change: float
    change_percent: float
