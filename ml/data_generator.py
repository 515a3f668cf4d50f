"""
Synthetic Loan Application Generator.

Generates randomized applicant records and the ground-truth labels used to
evaluate the scoring models. Ground truth comes from its own point system,
independent of either model.
"""
from dataclasses import asdict
from typing import List

import numpy as np
import pandas as pd

from ml.config import (
    GROUND_TRUTH_NOISE,
    GROUND_TRUTH_THRESHOLD,
    LOAN_TERM_OPTIONS,
    SYNTHETIC_AGE_RANGE,
    SYNTHETIC_CREDIT_SCORE_RANGE,
    SYNTHETIC_DEFAULT_RATE,
    SYNTHETIC_INCOME_RANGE,
    SYNTHETIC_LOAN_AMOUNT_RANGE,
    SYNTHETIC_MAX_BANK_RELATIONSHIP,
    SYNTHETIC_MAX_DEPENDENTS,
)
from ml.entities import Education, EmploymentType, HomeOwnership, LoanApplication
from ml.scoring import RandomState


def _uniform_round(rng: np.random.Generator, value_range, n_samples: int) -> np.ndarray:
    low, span = value_range
    return np.round(low + rng.random(n_samples) * span).astype(int)


def generate_synthetic(
    count: int,
    random_state: RandomState = None,
) -> List[LoanApplication]:
    """
    Generate synthetic loan applications.

    Args:
        count: Number of applications to generate
        random_state: Seed or Generator for reproducibility

    Returns:
        List of applications with ids "synthetic-<index>"
    """
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")

    rng = np.random.default_rng(random_state)

    educations = list(Education)
    employment_types = list(EmploymentType)
    ownerships = list(HomeOwnership)

    age = _uniform_round(rng, SYNTHETIC_AGE_RANGE, count)
    income = _uniform_round(rng, SYNTHETIC_INCOME_RANGE, count)
    credit_score = _uniform_round(rng, SYNTHETIC_CREDIT_SCORE_RANGE, count)
    education = rng.integers(0, len(educations), count)
    employment_type = rng.integers(0, len(employment_types), count)
    loan_amount = _uniform_round(rng, SYNTHETIC_LOAN_AMOUNT_RANGE, count)
    loan_term = rng.choice(LOAN_TERM_OPTIONS, count)
    home_ownership = rng.integers(0, len(ownerships), count)
    dependents = rng.integers(0, SYNTHETIC_MAX_DEPENDENTS, count)
    previous_defaults = rng.random(count) < SYNTHETIC_DEFAULT_RATE
    bank_relationship = rng.integers(0, SYNTHETIC_MAX_BANK_RELATIONSHIP, count)

    return [
        LoanApplication(
            id=f"synthetic-{i}",
            applicant_name=f"Applicant {i}",
            age=int(age[i]),
            income=float(income[i]),
            education=educations[education[i]],
            credit_score=int(credit_score[i]),
            employment_type=employment_types[employment_type[i]],
            loan_amount=float(loan_amount[i]),
            loan_term=int(loan_term[i]),
            home_ownership=ownerships[home_ownership[i]],
            dependents=int(dependents[i]),
            previous_defaults=bool(previous_defaults[i]),
            bank_relationship=float(bank_relationship[i]),
        )
        for i in range(count)
    ]


def ground_truth_score(application: LoanApplication) -> int:
    """Deterministic part of the ground-truth rubric (0-10 points)."""
    score = 0

    # Credit score bands
    if application.credit_score > 700:
        score += 3
    elif application.credit_score > 600:
        score += 2
    elif application.credit_score > 500:
        score += 1

    # Income bands
    if application.income > 80000:
        score += 2
    elif application.income > 50000:
        score += 1

    if application.employment_type is EmploymentType.EMPLOYED:
        score += 2
    elif application.employment_type is EmploymentType.SELF_EMPLOYED:
        score += 1

    loan_to_income = application.loan_amount / application.income if application.income else np.inf
    if loan_to_income < 2:
        score += 2
    elif loan_to_income < 3:
        score += 1

    if not application.previous_defaults:
        score += 1

    return score


def ground_truth(application: LoanApplication, random_state: RandomState = None) -> bool:
    """
    Label an application for evaluation purposes.

    Args:
        application: Application to label
        random_state: Seed or Generator for the noise term

    Returns:
        True when the noisy rubric total exceeds the approval threshold
    """
    rng = np.random.default_rng(random_state)
    noise = rng.random() * GROUND_TRUTH_NOISE
    return ground_truth_score(application) + noise > GROUND_TRUTH_THRESHOLD


def records_to_frame(records: List[LoanApplication]) -> pd.DataFrame:
    """Convert applications to a DataFrame with enum values flattened."""
    rows = []
    for record in records:
        row = asdict(record)
        row["education"] = record.education.value
        row["employment_type"] = record.employment_type.value
        row["home_ownership"] = record.home_ownership.value
        rows.append(row)

    return pd.DataFrame(rows)


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Generate synthetic loan applications")
    parser.add_argument("--count", type=int, default=10, help="Number of applications (default: 10)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")

    args = parser.parse_args()

    rng = np.random.default_rng(args.seed)
    records = generate_synthetic(args.count, random_state=rng)

    df = records_to_frame(records)
    df["ground_truth"] = [ground_truth(record, random_state=rng) for record in records]

    print(f"Generated {len(df)} applications")
    print("\nGround truth distribution:")
    print(df["ground_truth"].value_counts(normalize=True))
    print("\nSample data:")
    print(df.head())
