"""
ML Model Tests.

Tests for feature encoding, scoring models, the ensemble, synthetic data
generation and the evaluation harness.
"""
import math

import numpy as np
import pandas as pd
import pytest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from ml.config import FEATURE_NAMES, LOAN_TERM_OPTIONS, NUM_FEATURES
from ml.data_generator import (
    generate_synthetic,
    ground_truth,
    ground_truth_score,
    records_to_frame,
)
from ml.ensemble import combine, combine_outputs, explain_factors, risk_level, risk_score
from ml.entities import (
    ConfusionMatrix,
    Decision,
    EmploymentType,
    ModelKind,
    ModelOutput,
    RiskLevel,
)
from ml.evaluation import build_report, compare_models, compute_auc, evaluate_model
from ml.preprocessing import encode, encode_raw, handle_missing_values
from ml.scoring import LogisticModel, VoteModel, VoteScorer, score_linear, score_vote


class TestFeatureEncoder:
    """Tests for feature encoding."""

    def test_encode_length(self, make_application):
        """Test that encoding yields one value per feature."""
        features = encode(make_application())

        assert len(features) == NUM_FEATURES == len(FEATURE_NAMES) == 11

    def test_encode_values(self, make_application):
        """Test each transform on the default application."""
        features = encode(make_application())

        assert features[0] == pytest.approx(0.3)
        assert features[1] == pytest.approx(math.log(60001) / math.log(1_000_000))
        assert features[2] == pytest.approx(0.5)
        assert features[3] == pytest.approx(650 / 850)
        assert features[4] == pytest.approx(1.0)
        assert features[5] == pytest.approx((25000 / 60000) / 5)
        assert features[6] == pytest.approx(36 / 30)
        assert features[7] == pytest.approx(0.3)
        assert features[8] == pytest.approx(0.0)
        assert features[9] == pytest.approx(1.0)
        assert features[10] == pytest.approx(0.1)

    def test_encode_caps(self, make_application):
        """Test that capped transforms saturate at 1."""
        features = encode(
            make_application(age=100, loan_amount=1_000_000.0, dependents=12, bank_relationship=40)
        )

        assert features[0] == 1.0
        assert features[5] == 1.0
        assert features[8] == 1.0
        assert features[10] == 1.0

    def test_previous_defaults_inverted(self, make_application):
        """Test that a prior default encodes as 0."""
        assert encode(make_application(previous_defaults=True))[9] == 0.0
        assert encode(make_application(previous_defaults=False))[9] == 1.0

    def test_synthetic_features_in_range(self):
        """Test that bounded features stay in [0, 1] for realistic records."""
        bounded = [i for i, name in enumerate(FEATURE_NAMES) if name != "loan_term"]

        for record in generate_synthetic(200, random_state=3):
            features = encode(record)
            assert np.all(np.isfinite(features))
            assert np.all(features[bounded] >= 0)
            assert np.all(features[bounded] <= 1)
            assert features[9] in (0.0, 1.0)

    def test_zero_income_log_feature(self, make_application):
        """Test that zero income gives a log feature of 0, not a fallback."""
        application = make_application(income=0.0)

        raw = encode_raw(application)
        features = encode(application)

        assert raw[1] == 0.0
        assert features[1] == 0.0
        # Loan over zero income saturates rather than failing
        assert features[5] == 1.0

    def test_non_finite_features_fall_back(self, make_application):
        """Test that NaN features are replaced before scoring."""
        application = make_application(income=-5.0)

        assert math.isnan(encode_raw(application)[1])
        assert encode(application)[1] == 0.5

    def test_zero_over_zero_ratio_falls_back(self, make_application):
        """Test that an undefined loan-to-income ratio falls back to 0.5."""
        application = make_application(income=0.0, loan_amount=0.0)
        features = encode(application)

        assert math.isnan(encode_raw(application)[5])
        assert np.all(np.isfinite(features))
        assert features[5] == 0.5

    def test_handle_missing_values(self):
        """Test replacement of every kind of non-finite value."""
        features = handle_missing_values(np.array([np.nan, np.inf, -np.inf, 0.2]))

        np.testing.assert_array_equal(features, [0.5, 0.5, 0.5, 0.2])

    def test_encode_is_deterministic(self, make_application):
        """Test that encoding the same record twice is identical."""
        application = make_application()

        np.testing.assert_array_equal(encode(application), encode(application))


class TestLogisticModel:
    """Tests for the fixed-weight logistic model."""

    def test_strong_application_approved(self, strong_application):
        """Test that strong positive features outweigh the negative bias."""
        output = score_linear(strong_application)

        assert output.decision is Decision.APPROVED
        assert 0.5 < output.confidence <= 1.0

    def test_weak_application_rejected(self, weak_application):
        """Test rejection of a high-risk application."""
        output = score_linear(weak_application)

        assert output.decision is Decision.REJECTED
        assert output.approval_probability < 0.5

    def test_score_linear_is_pure(self, make_application):
        """Test that identical input yields identical output."""
        application = make_application()

        assert score_linear(application) == score_linear(application)

    def test_probability_matches_sigmoid(self, make_application):
        """Test the probability against a hand-computed logit."""
        model = LogisticModel()
        features = encode(make_application())

        logit = model.bias + float(np.dot(features, model.weights))
        expected = 1 / (1 + math.exp(-logit))

        assert model.approval_probability(features) == pytest.approx(expected)

    def test_even_odds_rejected(self, make_application):
        """Test that exactly 0.5 is not enough for approval."""
        model = LogisticModel(weights=[0.0] * NUM_FEATURES, bias=0.0)
        output = model.predict(make_application())

        assert output.decision is Decision.REJECTED
        assert output.confidence == 0.5

    def test_weight_count_validated(self):
        """Test that a wrong-sized weight vector is rejected."""
        with pytest.raises(ValueError):
            LogisticModel(weights=[0.1, 0.2])


class TestVoteModel:
    """Tests for the vote-aggregation model."""

    def test_scorer_threshold(self, borderline_application):
        """Test that the seed decides a scorer sitting on the threshold."""
        features = encode(borderline_application)

        assert VoteScorer(0.9).vote(features) == 1
        assert VoteScorer(0.1).vote(features) == 0
        assert VoteScorer(0.5).vote(features) == 0

    def test_approval_fraction(self, borderline_application):
        """Test vote counting with explicit seeds."""
        output = VoteModel(seeds=[0.9] * 7 + [0.1] * 3).predict(borderline_application)

        assert output.decision is Decision.APPROVED
        assert output.confidence == pytest.approx(0.7)

    def test_minority_approval_rejected(self, borderline_application):
        """Test that confidence reports the winning side."""
        output = VoteModel(seeds=[0.1] * 6 + [0.9] * 4).predict(borderline_application)

        assert output.decision is Decision.REJECTED
        assert output.confidence == pytest.approx(0.6)
        assert output.approval_probability == pytest.approx(0.4)

    def test_tied_vote_rejected(self, borderline_application):
        """Test that a half split is not an approval."""
        output = VoteModel(seeds=[0.1] * 5 + [0.9] * 5).predict(borderline_application)

        assert output.decision is Decision.REJECTED
        assert output.confidence == pytest.approx(0.5)

    def test_fixed_seeds_deterministic(self, borderline_application):
        """Test that fixed seeds give identical output."""
        seeds = [0.05, 0.2, 0.45, 0.55, 0.7, 0.95]

        first = score_vote(borderline_application, seeds=seeds)
        second = score_vote(borderline_application, seeds=seeds)

        assert first == second

    def test_random_state_reproducible(self):
        """Test that seeds drawn from the same random state match."""
        assert VoteModel(random_state=7).seeds == VoteModel(random_state=7).seeds

    def test_seed_count(self):
        """Test the configured scorer count."""
        assert VoteModel().n_estimators == 10
        assert VoteModel(n_estimators=25).n_estimators == 25
        assert all(0 <= seed < 1 for seed in VoteModel(n_estimators=50).seeds)

    def test_unanimous_decisions(self, strong_application, weak_application):
        """Test applications far from the threshold regardless of seeds."""
        assert score_vote(strong_application).confidence == 1.0
        assert score_vote(strong_application).decision is Decision.APPROVED
        assert score_vote(weak_application).confidence == 1.0
        assert score_vote(weak_application).decision is Decision.REJECTED

    def test_invalid_configuration(self):
        """Test that a model without scorers cannot be built."""
        with pytest.raises(ValueError):
            VoteModel(seeds=[])
        with pytest.raises(ValueError):
            VoteModel(n_estimators=0)


class TestEnsemble:
    """Tests for the ensemble combiner."""

    def test_combine_on_approval_axis(self):
        """Test that a confident rejection counts against approval."""
        linear = ModelOutput(Decision.APPROVED, 0.7)
        vote = ModelOutput(Decision.REJECTED, 0.9)

        assert combine_outputs(linear, vote) == pytest.approx(0.6 * 0.7 + 0.4 * 0.1)

    def test_decision_matches_weighted_formula(self, make_application, borderline_application):
        """Test the decision against the documented weighted threshold."""
        applications = [make_application(), borderline_application] + generate_synthetic(50, random_state=11)

        for seed, application in enumerate(applications):
            result = combine(application, random_state=seed)
            weighted = 0.6 * result.linear.approval_probability + 0.4 * result.vote.approval_probability

            assert result.approval_probability == pytest.approx(weighted)
            assert (result.decision is Decision.APPROVED) == (weighted >= 0.5)

    def test_strong_application(self, strong_application):
        """Test an application both models approve."""
        result = combine(strong_application, random_state=0)

        assert result.decision is Decision.APPROVED
        assert result.vote.confidence == 1.0
        assert result.risk_level is RiskLevel.LOW
        assert result.confidence == pytest.approx(result.approval_probability)

    def test_weak_application(self, weak_application):
        """Test an application both models reject."""
        result = combine(weak_application, random_state=0)

        assert result.decision is Decision.REJECTED
        assert result.approval_probability == pytest.approx(0.6 * result.linear.approval_probability)
        assert result.confidence == pytest.approx(1 - result.approval_probability)
        assert result.risk_score > 70
        assert result.risk_level is RiskLevel.HIGH

    def test_explicit_seeds(self, borderline_application):
        """Test that explicit seeds reach the vote model."""
        result = combine(borderline_application, seeds=[0.9] * 8 + [0.1] * 2)

        assert result.vote.decision is Decision.APPROVED
        assert result.vote.confidence == pytest.approx(0.8)

    def test_risk_score_affine(self):
        """Test that risk is 100 minus approval percentage, clamped."""
        assert risk_score(0.0) == 100.0
        assert risk_score(1.0) == 0.0
        assert risk_score(0.25) == pytest.approx(75.0)
        assert risk_score(0.3) > risk_score(0.7)
        assert risk_score(1.5) == 0.0
        assert risk_score(-0.5) == 100.0

    def test_risk_bands(self):
        """Test risk level boundaries."""
        assert risk_level(0.0) is RiskLevel.LOW
        assert risk_level(29.99) is RiskLevel.LOW
        assert risk_level(30.0) is RiskLevel.MEDIUM
        assert risk_level(69.99) is RiskLevel.MEDIUM
        assert risk_level(70.0) is RiskLevel.HIGH

    def test_factors(self, make_application):
        """Test the four explanatory factors."""
        factors = explain_factors(make_application())

        assert [f.factor for f in factors] == [
            "Credit Score",
            "Income Level",
            "Employment Status",
            "Loan-to-Income Ratio",
        ]

        credit, income, employment, ratio = factors
        assert credit.impact == pytest.approx(650 / 850 * 100)
        assert credit.description == "Credit score of 650 indicates poor credit history"
        assert income.impact == pytest.approx(60.0)
        assert income.description == "Annual income of $60,000 below recommended level"
        assert employment.impact == 85.0
        assert employment.description == "Employed status affects loan stability"
        assert ratio.impact == pytest.approx(100 - (25000 / 60000) * 20)
        assert ratio.description == "Loan amount represents 41.7% of annual income"

    def test_factor_wording_for_good_applicant(self, strong_application):
        """Test the favourable variants of factor descriptions."""
        credit, income, _, _ = explain_factors(strong_application)

        assert "shows good" in credit.description
        assert "meets" in income.description
        assert income.impact == 100.0

    def test_factor_impacts_bounded(self, make_application):
        """Test that impacts stay in [0, 100] at the extremes."""
        applications = [
            make_application(loan_amount=10_000_000.0, employment_type=EmploymentType.UNEMPLOYED),
            make_application(income=0.0),
            make_application(income=5_000_000.0, credit_score=850),
        ]

        for application in applications:
            for factor in explain_factors(application):
                assert 0 <= factor.impact <= 100


class TestDataGenerator:
    """Tests for synthetic data generation."""

    def test_generate_count_and_ids(self):
        """Test record count and index-derived ids."""
        records = generate_synthetic(25, random_state=1)

        assert len(records) == 25
        assert [r.id for r in records] == [f"synthetic-{i}" for i in range(25)]
        assert records[3].applicant_name == "Applicant 3"

    def test_generate_ranges(self):
        """Test that every field falls in its documented range."""
        for record in generate_synthetic(500, random_state=2):
            assert 22 <= record.age <= 65
            assert 25_000 <= record.income <= 200_000
            assert 300 <= record.credit_score <= 850
            assert 10_000 <= record.loan_amount <= 100_000
            assert record.loan_term in LOAN_TERM_OPTIONS
            assert 0 <= record.dependents <= 3
            assert 0 <= record.bank_relationship <= 14

    def test_generate_reproducibility(self):
        """Test that generation is reproducible with the same seed."""
        assert generate_synthetic(50, random_state=42) == generate_synthetic(50, random_state=42)

    def test_generate_empty(self):
        """Test that zero records is valid and negative is not."""
        assert generate_synthetic(0) == []

        with pytest.raises(ValueError):
            generate_synthetic(-1)

    def test_records_to_frame(self):
        """Test DataFrame conversion."""
        df = records_to_frame(generate_synthetic(10, random_state=4))

        assert isinstance(df, pd.DataFrame)
        assert len(df) == 10
        assert set(df["education"]).issubset({"High School", "Bachelor", "Master", "PhD"})
        assert "id" in df.columns


class TestGroundTruth:
    """Tests for the ground-truth oracle."""

    def test_score_bands(self, strong_application, weak_application):
        """Test the deterministic rubric at both extremes."""
        assert ground_truth_score(strong_application) == 10
        assert ground_truth_score(weak_application) == 0

    def test_middle_bands(self, make_application):
        """Test the intermediate rubric bands."""
        application = make_application(
            credit_score=550,
            income=55000.0,
            employment_type=EmploymentType.SELF_EMPLOYED,
            loan_amount=137500.0,
            previous_defaults=True,
        )

        # 1 (credit) + 1 (income) + 1 (employment) + 1 (ratio 2.5)
        assert ground_truth_score(application) == 4

    def test_noise_cannot_flip_extremes(self, strong_application, weak_application):
        """Test that noise below 2 never flips a 10 or a 0."""
        for seed in range(20):
            assert ground_truth(strong_application, random_state=seed) is True
            assert ground_truth(weak_application, random_state=seed) is False


class TestEvaluation:
    """Tests for the evaluation harness."""

    @pytest.mark.parametrize("model_kind", list(ModelKind))
    def test_counts_sum_to_sample_size(self, model_kind):
        """Test that the confusion matrix covers every sample."""
        report = evaluate_model(model_kind, sample_size=300, random_state=5)

        assert report.model_kind is model_kind
        assert report.sample_size == 300
        assert report.confusion_matrix.total == 300

    @pytest.mark.parametrize("model_kind", list(ModelKind))
    def test_metrics_in_range(self, model_kind):
        """Test that every metric is a ratio."""
        report = evaluate_model(model_kind, sample_size=300, random_state=6)

        for value in (report.accuracy, report.precision, report.recall, report.f1_score, report.auc):
            assert 0 <= value <= 1

    def test_accuracy_matches_matrix(self):
        """Test that accuracy is derived from the matrix."""
        report = evaluate_model(ModelKind.LINEAR, sample_size=200, random_state=8)
        matrix = report.confusion_matrix

        expected = (matrix.true_positive + matrix.true_negative) / 200
        assert report.accuracy == pytest.approx(expected)

    def test_reproducible_with_seed(self):
        """Test that a fixed random state reproduces the report."""
        first = evaluate_model(ModelKind.VOTE, sample_size=150, random_state=9)
        second = evaluate_model(ModelKind.VOTE, sample_size=150, random_state=9)

        assert first == second

    def test_accepts_string_kind(self):
        """Test that model kinds may be passed by value."""
        report = evaluate_model("linear", sample_size=10, random_state=1)

        assert report.model_kind is ModelKind.LINEAR

    def test_empty_evaluation(self):
        """Test that an empty run falls back instead of failing."""
        report = evaluate_model(ModelKind.LINEAR, sample_size=0)

        assert report.confusion_matrix == ConfusionMatrix(0, 0, 0, 0)
        assert report.accuracy == 0.0
        assert report.precision == 0.0
        assert report.recall == 0.0
        assert report.f1_score == 0.0
        assert report.auc == 0.5

    def test_negative_sample_size(self):
        """Test that a negative sample size is rejected."""
        with pytest.raises(ValueError):
            evaluate_model(ModelKind.LINEAR, sample_size=-1)

    def test_zero_denominators(self):
        """Test that precision, recall and F1 default to 0."""
        predictions = pd.DataFrame(
            {
                "actual": [True, False, True],
                "predicted": [False, False, False],
                "confidence": [0.6, 0.7, 0.8],
            }
        )

        report = build_report(ModelKind.LINEAR, predictions)

        assert report.confusion_matrix == ConfusionMatrix(
            true_positive=0, false_positive=0, true_negative=1, false_negative=2
        )
        assert report.accuracy == pytest.approx(1 / 3)
        assert report.precision == 0.0
        assert report.recall == 0.0
        assert report.f1_score == 0.0

    def test_balanced_report(self):
        """Test metrics on a hand-built confusion matrix."""
        predictions = pd.DataFrame(
            {
                "actual": [True, True, False, False],
                "predicted": [True, False, True, False],
                "confidence": [0.9, 0.6, 0.7, 0.8],
            }
        )

        report = build_report(ModelKind.VOTE, predictions)

        assert report.confusion_matrix == ConfusionMatrix(1, 1, 1, 1)
        assert report.accuracy == pytest.approx(0.5)
        assert report.precision == pytest.approx(0.5)
        assert report.recall == pytest.approx(0.5)
        assert report.f1_score == pytest.approx(0.5)
        # Pairs: (0.9, 0.7) 1, (0.9, 0.8) 1, (0.6, 0.7) 0, (0.6, 0.8) 0
        assert report.auc == pytest.approx(0.5)

    def test_auc_pairwise(self):
        """Test AUC against the pairwise comparison definition."""
        assert compute_auc([True, False], [0.9, 0.1]) == pytest.approx(1.0)
        assert compute_auc([True, False], [0.1, 0.9]) == pytest.approx(0.0)
        assert compute_auc([True, False], [0.7, 0.7]) == pytest.approx(0.5)
        assert compute_auc([True, True, False, False], [0.8, 0.6, 0.7, 0.5]) == pytest.approx(0.75)

    def test_auc_single_class(self):
        """Test that AUC defaults to 0.5 when a class is missing."""
        assert compute_auc([True, True], [0.9, 0.6]) == 0.5
        assert compute_auc([False, False], [0.9, 0.6]) == 0.5
        assert compute_auc([], []) == 0.5

    def test_compare_models(self):
        """Test that every model kind is evaluated."""
        reports = compare_models(sample_size=100, random_state=12)

        assert set(reports) == set(ModelKind)
        for kind, report in reports.items():
            assert report.model_kind is kind
            assert report.confusion_matrix.total == 100
