"""Configuration for the Loan Approval and Stock Forecast models."""
import operator
from typing import Callable, Dict, List, Tuple

from ml.entities import Education, EmploymentType, HomeOwnership, StockSymbol

# Feature configuration (order matters: it is the feature vector layout)
FEATURE_NAMES: List[str] = [
    "age",
    "income",
    "education",
    "credit_score",
    "employment_type",
    "loan_to_income_ratio",
    "loan_term",
    "home_ownership",
    "dependents",
    "previous_defaults",
    "bank_relationship",
]

NUM_FEATURES: int = len(FEATURE_NAMES)

# Value substituted for any non-finite feature
MISSING_FEATURE_VALUE: float = 0.5

EDUCATION_SCORES: Dict[Education, float] = {
    Education.HIGH_SCHOOL: 0.25,
    Education.BACHELOR: 0.5,
    Education.MASTER: 0.75,
    Education.PHD: 1.0,
}

EMPLOYMENT_SCORES: Dict[EmploymentType, float] = {
    EmploymentType.UNEMPLOYED: 0.0,
    EmploymentType.SELF_EMPLOYED: 0.5,
    EmploymentType.EMPLOYED: 1.0,
}

HOME_OWNERSHIP_SCORES: Dict[HomeOwnership, float] = {
    HomeOwnership.RENT: 0.3,
    HomeOwnership.MORTGAGE: 0.6,
    HomeOwnership.OWN: 1.0,
}

LOAN_TERM_OPTIONS: List[int] = [12, 24, 36, 48, 60]

# Feature scaling constants
AGE_SCALE: float = 100.0
INCOME_LOG_SCALE: float = 1_000_000.0
CREDIT_SCORE_SCALE: float = 850.0
MAX_LOAN_TO_INCOME: float = 5.0
LOAN_TERM_SCALE: float = 30.0
DEPENDENTS_SCALE: float = 5.0
BANK_RELATIONSHIP_SCALE: float = 20.0

# Linear ("logistic") model parameters - fixed, not learned
LINEAR_WEIGHTS: List[float] = [
    0.15,   # age
    0.25,   # income
    0.18,   # education
    0.35,   # credit score
    0.22,   # employment type
    -0.30,  # loan to income ratio
    -0.12,  # loan term
    0.14,   # home ownership
    -0.08,  # dependents
    0.28,   # previous defaults
    0.16,   # bank relationship
]
LINEAR_BIAS: float = -0.5

# Vote ("random forest") model parameters
DEFAULT_N_ESTIMATORS: int = 10
# (feature index, comparison, threshold, points)
VOTE_RULES: List[Tuple[int, Callable[[float, float], bool], float, float]] = [
    (3, operator.gt, 0.7, 0.3),    # credit score
    (1, operator.gt, 0.6, 0.25),   # income
    (4, operator.gt, 0.8, 0.2),    # employment type
    (5, operator.lt, 0.3, 0.15),   # loan to income ratio
    (9, operator.gt, 0.5, 0.1),    # previous defaults (inverted flag)
]
VOTE_SEED_SPREAD: float = 0.1
VOTE_THRESHOLD: float = 0.5

# Ensemble parameters
LINEAR_ENSEMBLE_WEIGHT: float = 0.6
VOTE_ENSEMBLE_WEIGHT: float = 0.4
DECISION_THRESHOLD: float = 0.5

# Risk bands on the 0-100 risk score
LOW_RISK_LIMIT: float = 30.0
MEDIUM_RISK_LIMIT: float = 70.0

# Factor explanation parameters
GOOD_CREDIT_SCORE: int = 700
INCOME_REFERENCE: float = 100_000.0
RECOMMENDED_INCOME: float = 60_000.0
EMPLOYMENT_IMPACT: Dict[EmploymentType, float] = {
    EmploymentType.EMPLOYED: 85.0,
    EmploymentType.SELF_EMPLOYED: 60.0,
    EmploymentType.UNEMPLOYED: 20.0,
}
LOAN_TO_INCOME_PENALTY: float = 20.0

# Synthetic data generation ranges (low, span)
SYNTHETIC_AGE_RANGE: Tuple[int, int] = (22, 43)
SYNTHETIC_INCOME_RANGE: Tuple[int, int] = (25_000, 175_000)
SYNTHETIC_CREDIT_SCORE_RANGE: Tuple[int, int] = (300, 550)
SYNTHETIC_LOAN_AMOUNT_RANGE: Tuple[int, int] = (10_000, 90_000)
SYNTHETIC_MAX_DEPENDENTS: int = 4
SYNTHETIC_MAX_BANK_RELATIONSHIP: int = 15
SYNTHETIC_DEFAULT_RATE: float = 0.15

# Ground truth oracle
GROUND_TRUTH_NOISE: float = 2.0
GROUND_TRUTH_THRESHOLD: float = 5.0

# Evaluation settings
DEFAULT_EVALUATION_SAMPLE_SIZE: int = 1000
EMPTY_CLASS_AUC: float = 0.5

# Forecast settings
DEFAULT_HISTORY_DAYS: int = 90
DEFAULT_FORECAST_DAYS: int = 30
DEFAULT_BASE_PRICE: float = 100.0
PRICE_FLOOR_RATIO: float = 0.7
MIN_FORECAST_CONFIDENCE: float = 0.6
INITIAL_FORECAST_CONFIDENCE: float = 0.95
FORECAST_CONFIDENCE_DECAY: float = 0.01
MIN_VOLUME: int = 500_000
MAX_VOLUME: int = 1_500_000

STOCK_SYMBOLS: List[StockSymbol] = [
    StockSymbol("AAPL", "Apple Inc.", 175.43, 2.15, 1.24),
    StockSymbol("GOOGL", "Alphabet Inc.", 142.56, -1.22, -0.85),
    StockSymbol("MSFT", "Microsoft Corp.", 378.85, 4.22, 1.13),
    StockSymbol("TSLA", "Tesla Inc.", 248.42, -3.15, -1.25),
    StockSymbol("AMZN", "Amazon.com Inc.", 145.86, 1.78, 1.23),
]
