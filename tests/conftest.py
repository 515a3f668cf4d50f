"""
Pytest Configuration and Fixtures.

Provides shared fixtures for testing the Loan Approval Demo.
"""

import os
import sys
from typing import Any, Callable, Dict, Generator

import pytest
from fastapi.testclient import TestClient

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# These imports must come after path modification
from app.main import app  # noqa: E402
from ml.entities import (  # noqa: E402
    Education,
    EmploymentType,
    HomeOwnership,
    LoanApplication,
)


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """
    Create a test client for the FastAPI application.

    Yields:
        TestClient instance
    """
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def sample_application() -> Dict[str, Any]:
    """
    Create a sample loan application payload for testing.

    Returns:
        Dictionary with sample application data
    """
    return {
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


@pytest.fixture
def high_risk_application() -> Dict[str, Any]:
    """
    Create a high-risk loan application payload for testing.

    Returns:
        Dictionary with high-risk application data
    """
    return {
        "applicant_name": "John Roe",
        "age": 22,
        "income": 25000.0,
        "education": "High School",
        "credit_score": 400,
        "employment_type": "Unemployed",
        "loan_amount": 100000.0,
        "loan_term": 60,
        "home_ownership": "Rent",
        "dependents": 4,
        "previous_defaults": True,
        "bank_relationship": 0,
    }


@pytest.fixture
def batch_applications(sample_application, high_risk_application):
    """
    Create a batch of applications for testing.

    Returns:
        List of application dictionaries
    """
    return [sample_application, high_risk_application]


@pytest.fixture
def invalid_application() -> Dict[str, Any]:
    """
    Create an invalid application for testing validation.

    Returns:
        Dictionary with invalid application data
    """
    return {
        "applicant_name": "Invalid",
        "age": 15,  # Too young
        "income": -1000,  # Negative income
        "education": "Kindergarten",  # Invalid category
        "credit_score": 650,
        "employment_type": "Employed",
        "loan_amount": 25000.0,
        "loan_term": 30,  # Not an offered term
        "home_ownership": "Rent",
        "dependents": 0,
        "previous_defaults": False,
        "bank_relationship": 2,
    }


@pytest.fixture
def make_application() -> Callable[..., LoanApplication]:
    """
    Factory for LoanApplication entities.

    Defaults match sample_application; keyword arguments override fields.
    """

    def _make(**overrides) -> LoanApplication:
        fields = {
            "applicant_name": "Jane Doe",
            "age": 30,
            "income": 60000.0,
            "education": Education.BACHELOR,
            "credit_score": 650,
            "employment_type": EmploymentType.EMPLOYED,
            "loan_amount": 25000.0,
            "loan_term": 36,
            "home_ownership": HomeOwnership.RENT,
            "dependents": 0,
            "previous_defaults": False,
            "bank_relationship": 2,
        }
        fields.update(overrides)
        return LoanApplication(**fields)

    return _make


@pytest.fixture
def strong_application(make_application) -> LoanApplication:
    """Applicant every scorer approves."""
    return make_application(
        income=150000.0,
        credit_score=800,
        loan_amount=20000.0,
    )


@pytest.fixture
def weak_application(make_application) -> LoanApplication:
    """Applicant every scorer rejects."""
    return make_application(
        age=22,
        income=25000.0,
        education=Education.HIGH_SCHOOL,
        credit_score=400,
        employment_type=EmploymentType.UNEMPLOYED,
        loan_amount=100000.0,
        loan_term=60,
        dependents=4,
        previous_defaults=True,
        bank_relationship=0,
    )


@pytest.fixture
def borderline_application(make_application) -> LoanApplication:
    """
    Applicant whose vote scorers sit exactly on the threshold.

    Only the credit score and employment rules fire (0.3 + 0.2), so each
    scorer's vote is decided by its seed.
    """
    return make_application(
        income=3000.0,
        credit_score=800,
        loan_amount=6000.0,
        previous_defaults=True,
    )
