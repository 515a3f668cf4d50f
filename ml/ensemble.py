"""
Ensemble Combiner.

Merges the logistic and vote model outputs into a single decision, a risk
score and a fixed list of explanatory factors.
"""
import math
from typing import List, Optional, Sequence

from ml.config import (
    CREDIT_SCORE_SCALE,
    DECISION_THRESHOLD,
    DEFAULT_N_ESTIMATORS,
    EMPLOYMENT_IMPACT,
    GOOD_CREDIT_SCORE,
    INCOME_REFERENCE,
    LINEAR_ENSEMBLE_WEIGHT,
    LOAN_TO_INCOME_PENALTY,
    LOW_RISK_LIMIT,
    MEDIUM_RISK_LIMIT,
    RECOMMENDED_INCOME,
    VOTE_ENSEMBLE_WEIGHT,
)
from ml.entities import (
    Decision,
    EnsembleResult,
    Factor,
    LoanApplication,
    ModelOutput,
    RiskLevel,
)
from ml.scoring import LogisticModel, RandomState, VoteModel


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def _format_amount(amount: float) -> str:
    if float(amount).is_integer():
        return f"{int(amount):,}"
    return f"{amount:,.2f}"


def combine_outputs(linear: ModelOutput, vote: ModelOutput) -> float:
    """
    Weighted average of both models on the approval-probability axis.

    A model rejecting with confidence c contributes 1 - c toward approval.
    """
    return LINEAR_ENSEMBLE_WEIGHT * linear.approval_probability + VOTE_ENSEMBLE_WEIGHT * vote.approval_probability


def risk_score(approval_probability: float) -> float:
    """Risk on a 0-100 scale, the linear inverse of approval probability."""
    return _clamp(100.0 - approval_probability * 100.0)


def risk_level(score: float) -> RiskLevel:
    if score < LOW_RISK_LIMIT:
        return RiskLevel.LOW
    if score < MEDIUM_RISK_LIMIT:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


def explain_factors(application: LoanApplication) -> List[Factor]:
    """
    Build the four explanatory factors from raw application fields.

    Args:
        application: Loan application being explained

    Returns:
        Credit Score, Income Level, Employment Status and Loan-to-Income
        Ratio factors, in that order
    """
    credit_score = application.credit_score
    income = application.income
    loan_to_income = application.loan_amount / income if income else math.inf

    credit_quality = "shows good" if credit_score > GOOD_CREDIT_SCORE else "indicates poor"
    income_verdict = "meets" if income > RECOMMENDED_INCOME else "below"

    return [
        Factor(
            factor="Credit Score",
            impact=_clamp(credit_score / CREDIT_SCORE_SCALE * 100.0),
            description=f"Credit score of {credit_score} {credit_quality} credit history",
        ),
        Factor(
            factor="Income Level",
            impact=_clamp(min(income / INCOME_REFERENCE, 1.0) * 100.0),
            description=f"Annual income of ${_format_amount(income)} {income_verdict} recommended level",
        ),
        Factor(
            factor="Employment Status",
            impact=EMPLOYMENT_IMPACT[application.employment_type],
            description=f"{application.employment_type.value} status affects loan stability",
        ),
        Factor(
            factor="Loan-to-Income Ratio",
            impact=_clamp(100.0 - loan_to_income * LOAN_TO_INCOME_PENALTY),
            description=f"Loan amount represents {loan_to_income * 100:.1f}% of annual income",
        ),
    ]


def combine(
    application: LoanApplication,
    seeds: Optional[Sequence[float]] = None,
    n_estimators: int = DEFAULT_N_ESTIMATORS,
    random_state: RandomState = None,
) -> EnsembleResult:
    """
    Score an application with both models and combine the results.

    Args:
        application: Loan application to score
        seeds: Optional explicit vote scorer seeds
        n_estimators: Number of vote scorers when seeds are drawn
        random_state: Seed or Generator for drawing vote scorer seeds

    Returns:
        EnsembleResult with decision, risk score and factors
    """
    linear = LogisticModel().predict(application)
    vote = VoteModel(seeds=seeds, n_estimators=n_estimators, random_state=random_state).predict(application)

    approval_probability = combine_outputs(linear, vote)
    approved = approval_probability >= DECISION_THRESHOLD
    score = risk_score(approval_probability)

    return EnsembleResult(
        decision=Decision.APPROVED if approved else Decision.REJECTED,
        approval_probability=approval_probability,
        confidence=approval_probability if approved else 1.0 - approval_probability,
        linear=linear,
        vote=vote,
        risk_score=score,
        risk_level=risk_level(score),
        factors=explain_factors(application),
    )
