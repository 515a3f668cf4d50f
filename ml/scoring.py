"""
Scoring Models for Loan Applications.

Two fixed-parameter classifiers over the encoded feature vector:

- LogisticModel: weighted sum of features passed through a sigmoid.
- VoteModel: majority vote of seeded heuristic scorers.

Neither model is trained; all parameters live in ml.config.
"""
from typing import List, Optional, Sequence, Union

import numpy as np

from ml.config import (
    DEFAULT_N_ESTIMATORS,
    LINEAR_BIAS,
    LINEAR_WEIGHTS,
    NUM_FEATURES,
    VOTE_RULES,
    VOTE_SEED_SPREAD,
    VOTE_THRESHOLD,
)
from ml.entities import Decision, LoanApplication, ModelOutput
from ml.preprocessing import encode

RandomState = Union[None, int, np.random.Generator]


def _output_from_probability(probability: float) -> ModelOutput:
    """Turn an approval probability into a decision biased to the chosen side."""
    if probability > 0.5:
        return ModelOutput(decision=Decision.APPROVED, confidence=probability)
    return ModelOutput(decision=Decision.REJECTED, confidence=1.0 - probability)


class LogisticModel:
    """Fixed-weight logistic scoring model."""

    def __init__(
        self,
        weights: Optional[Sequence[float]] = None,
        bias: float = LINEAR_BIAS,
    ):
        if weights is None:
            weights = LINEAR_WEIGHTS
        if len(weights) != NUM_FEATURES:
            raise ValueError(f"Expected {NUM_FEATURES} weights, got {len(weights)}")

        self.weights = np.array(weights, dtype=float)
        self.bias = float(bias)

    def approval_probability(self, features: np.ndarray) -> float:
        logit = self.bias + float(np.dot(features, self.weights))
        return float(1.0 / (1.0 + np.exp(-logit)))

    def predict(self, application: LoanApplication) -> ModelOutput:
        return _output_from_probability(self.approval_probability(encode(application)))


class VoteScorer:
    """
    One heuristic voter of the VoteModel.

    Awards points for a handful of features crossing fixed thresholds and
    shifts the total by an amount derived from its seed.
    """

    def __init__(self, seed: float):
        self.seed = float(seed)

    def score(self, features: np.ndarray) -> float:
        score = 0.0
        for index, compare, threshold, points in VOTE_RULES:
            if compare(features[index], threshold):
                score += points

        return score + (self.seed - 0.5) * VOTE_SEED_SPREAD

    def vote(self, features: np.ndarray) -> int:
        return 1 if self.score(features) > VOTE_THRESHOLD else 0


class VoteModel:
    """
    Vote-aggregation model ("random forest").

    Seeds may be passed explicitly for reproducible scoring; otherwise one
    seed per scorer is drawn from a numpy Generator built from random_state,
    so two unseeded instances can split their votes differently.
    """

    def __init__(
        self,
        seeds: Optional[Sequence[float]] = None,
        n_estimators: int = DEFAULT_N_ESTIMATORS,
        random_state: RandomState = None,
    ):
        if seeds is None:
            if n_estimators < 1:
                raise ValueError("n_estimators must be at least 1")
            rng = np.random.default_rng(random_state)
            seeds = rng.random(n_estimators)
        elif len(seeds) == 0:
            raise ValueError("At least one seed is required")

        self.scorers = [VoteScorer(seed) for seed in seeds]

    @property
    def n_estimators(self) -> int:
        return len(self.scorers)

    @property
    def seeds(self) -> List[float]:
        return [scorer.seed for scorer in self.scorers]

    def approval_fraction(self, features: np.ndarray) -> float:
        votes = [scorer.vote(features) for scorer in self.scorers]
        return sum(votes) / len(votes)

    def predict(self, application: LoanApplication) -> ModelOutput:
        return _output_from_probability(self.approval_fraction(encode(application)))


def score_linear(application: LoanApplication) -> ModelOutput:
    """Score an application with the default logistic model."""
    return LogisticModel().predict(application)


def score_vote(
    application: LoanApplication,
    seeds: Optional[Sequence[float]] = None,
    n_estimators: int = DEFAULT_N_ESTIMATORS,
    random_state: RandomState = None,
) -> ModelOutput:
    """Score an application with a freshly built vote model."""
    model = VoteModel(seeds=seeds, n_estimators=n_estimators, random_state=random_state)
    return model.predict(application)
