"""
Model Evaluation Harness.

Runs a scoring model over a synthetic labeled batch and reports a confusion
matrix with accuracy, precision, recall, F1 and AUC.
"""
import logging
from typing import Dict, Sequence, Union

import numpy as np
import pandas as pd
from sklearn.metrics import (
    accuracy_score,
    confusion_matrix,
    f1_score,
    precision_score,
    recall_score,
    roc_auc_score,
)

from ml.config import DEFAULT_EVALUATION_SAMPLE_SIZE, DEFAULT_N_ESTIMATORS, EMPTY_CLASS_AUC
from ml.data_generator import generate_synthetic, ground_truth
from ml.entities import ConfusionMatrix, EvaluationReport, ModelKind
from ml.scoring import LogisticModel, RandomState, VoteModel

logger = logging.getLogger(__name__)

ScoringModel = Union[LogisticModel, VoteModel]


def create_model(
    model_kind: ModelKind,
    n_estimators: int = DEFAULT_N_ESTIMATORS,
    random_state: RandomState = None,
) -> ScoringModel:
    """Build a scoring model of the requested kind."""
    if ModelKind(model_kind) is ModelKind.LINEAR:
        return LogisticModel()
    return VoteModel(n_estimators=n_estimators, random_state=random_state)


def compute_auc(actual: Sequence[bool], scores: Sequence[float]) -> float:
    """
    Area under the ROC curve by pairwise comparison.

    Equals the fraction of (approved, rejected) pairs where the approved
    sample scores higher, counting ties as half.

    Args:
        actual: Ground-truth approvals
        scores: Model scores for the same samples

    Returns:
        AUC in [0, 1], or 0.5 when either class is empty
    """
    y_true = np.asarray(actual, dtype=int)

    if y_true.size == 0 or y_true.min() == y_true.max():
        return EMPTY_CLASS_AUC

    return float(roc_auc_score(y_true, np.asarray(scores, dtype=float)))


def build_report(
    model_kind: ModelKind,
    predictions: pd.DataFrame,
) -> EvaluationReport:
    """
    Aggregate per-sample predictions into an EvaluationReport.

    Args:
        model_kind: Model that produced the predictions
        predictions: DataFrame with boolean "actual" and "predicted" columns
            and a float "confidence" column

    Returns:
        EvaluationReport; ratios with a zero denominator are reported as 0
    """
    sample_size = len(predictions)

    if sample_size == 0:
        return EvaluationReport(
            model_kind=model_kind,
            sample_size=0,
            accuracy=0.0,
            precision=0.0,
            recall=0.0,
            f1_score=0.0,
            auc=EMPTY_CLASS_AUC,
            confusion_matrix=ConfusionMatrix(),
        )

    y_true = predictions["actual"].astype(int).to_numpy()
    y_pred = predictions["predicted"].astype(int).to_numpy()

    tn, fp, fn, tp = confusion_matrix(y_true, y_pred, labels=[0, 1]).ravel()

    return EvaluationReport(
        model_kind=model_kind,
        sample_size=sample_size,
        accuracy=float(accuracy_score(y_true, y_pred)),
        precision=float(precision_score(y_true, y_pred, zero_division=0)),
        recall=float(recall_score(y_true, y_pred, zero_division=0)),
        f1_score=float(f1_score(y_true, y_pred, zero_division=0)),
        auc=compute_auc(y_true, predictions["confidence"].to_numpy()),
        confusion_matrix=ConfusionMatrix(
            true_positive=int(tp),
            false_positive=int(fp),
            true_negative=int(tn),
            false_negative=int(fn),
        ),
    )


def evaluate_model(
    model_kind: ModelKind,
    sample_size: int = DEFAULT_EVALUATION_SAMPLE_SIZE,
    random_state: RandomState = None,
    n_estimators: int = DEFAULT_N_ESTIMATORS,
) -> EvaluationReport:
    """
    Evaluate one scoring model against synthetic ground truth.

    Args:
        model_kind: Which model to evaluate
        sample_size: Number of synthetic applications
        random_state: Seed or Generator for data, vote seeds and noise
        n_estimators: Number of vote scorers for the vote model

    Returns:
        EvaluationReport for the run
    """
    model_kind = ModelKind(model_kind)
    if sample_size < 0:
        raise ValueError(f"sample_size must be non-negative, got {sample_size}")

    rng = np.random.default_rng(random_state)

    records = generate_synthetic(sample_size, random_state=rng)
    model = create_model(model_kind, n_estimators=n_estimators, random_state=rng)

    rows = []
    for record in records:
        actual = ground_truth(record, random_state=rng)
        output = model.predict(record)
        rows.append(
            {
                "actual": actual,
                "predicted": output.approved,
                "confidence": output.confidence,
            }
        )

    predictions = pd.DataFrame(rows, columns=["actual", "predicted", "confidence"])
    report = build_report(model_kind, predictions)

    logger.info(
        f"Evaluated {model_kind.value} model on {sample_size} samples: "
        f"accuracy={report.accuracy:.4f} auc={report.auc:.4f}"
    )

    return report


def compare_models(
    sample_size: int = DEFAULT_EVALUATION_SAMPLE_SIZE,
    random_state: RandomState = None,
    n_estimators: int = DEFAULT_N_ESTIMATORS,
) -> Dict[ModelKind, EvaluationReport]:
    """Evaluate every model kind, each on its own synthetic batch."""
    rng = np.random.default_rng(random_state)
    return {
        kind: evaluate_model(kind, sample_size=sample_size, random_state=rng, n_estimators=n_estimators)
        for kind in ModelKind
    }
