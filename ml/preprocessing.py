"""
Feature Encoding for Loan Applications.

Maps an application to the fixed 11-element feature vector consumed by the
scoring models.
"""
import logging

import numpy as np

from ml.config import (
    AGE_SCALE,
    BANK_RELATIONSHIP_SCALE,
    CREDIT_SCORE_SCALE,
    DEPENDENTS_SCALE,
    EDUCATION_SCORES,
    EMPLOYMENT_SCORES,
    HOME_OWNERSHIP_SCORES,
    INCOME_LOG_SCALE,
    LOAN_TERM_SCALE,
    MAX_LOAN_TO_INCOME,
    MISSING_FEATURE_VALUE,
)
from ml.entities import LoanApplication

logger = logging.getLogger(__name__)


def encode_raw(application: LoanApplication) -> np.ndarray:
    """
    Encode an application into its unsanitized feature vector.

    Degenerate inputs (zero or negative income) may produce NaN or infinity
    here. encode() replaces those before the vector reaches a model.

    Args:
        application: Loan application to encode

    Returns:
        Array of 11 floats in FEATURE_NAMES order
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        income = np.float64(application.income)
        loan_amount = np.float64(application.loan_amount)

        features = [
            min(application.age / AGE_SCALE, 1.0),
            np.log(income + 1) / np.log(INCOME_LOG_SCALE),
            EDUCATION_SCORES[application.education],
            application.credit_score / CREDIT_SCORE_SCALE,
            EMPLOYMENT_SCORES[application.employment_type],
            np.minimum(loan_amount / income, MAX_LOAN_TO_INCOME) / MAX_LOAN_TO_INCOME,
            application.loan_term / LOAN_TERM_SCALE,
            HOME_OWNERSHIP_SCORES[application.home_ownership],
            min(application.dependents / DEPENDENTS_SCALE, 1.0),
            0.0 if application.previous_defaults else 1.0,
            min(application.bank_relationship / BANK_RELATIONSHIP_SCALE, 1.0),
        ]

    return np.array(features, dtype=float)


def handle_missing_values(features: np.ndarray) -> np.ndarray:
    """Replace every non-finite feature with the neutral fallback value."""
    features = np.asarray(features, dtype=float)
    missing = ~np.isfinite(features)

    if missing.any():
        logger.debug(f"Replacing {int(missing.sum())} non-finite feature(s) with {MISSING_FEATURE_VALUE}")

    return np.where(missing, MISSING_FEATURE_VALUE, features)


def encode(application: LoanApplication) -> np.ndarray:
    """Encode an application into 11 finite features, ready for scoring."""
    return handle_missing_values(encode_raw(application))
