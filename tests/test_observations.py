"""Tests for ScoredLoans and label handling."""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from loan_threshold.evaluation import BAD, GOOD, InvalidInputError
from loan_threshold.observations import (
    ScoredLoans,
    create_sample_loans,
    normalize_label,
    outcome_from_payments,
)


def make_scored_df() -> pd.DataFrame:
    return pd.DataFrame({
        "prob_good": [0.2, 0.6, 0.5, 0.9],
        "status": ["bad", "Good", " BAD ", "good"],
        "total_pymnt": [500.0, 11000.0, 200.0, 6200.0],
        "loan_amnt": [1000.0, 10000.0, 1000.0, 5000.0],
    })


@pytest.mark.parametrize("value, expected", [
    ("Good", GOOD), ("bad", BAD), (1, GOOD), (0, BAD),
    (True, GOOD), (False, BAD), (np.int64(1), GOOD), (1.0, GOOD),
])
def test_normalize_label(value, expected) -> None:
    assert normalize_label(value) == expected


@pytest.mark.parametrize("value", ["Maybe", 2, None, float("nan")])
def test_normalize_label_rejects_unknown(value) -> None:
    with pytest.raises(InvalidInputError):
        normalize_label(value)


def test_from_frame_derives_outcomes_from_payments() -> None:
    loans = ScoredLoans.from_frame(make_scored_df(), "prob_good", "status",
                                   paid_column="total_pymnt", principal_column="loan_amnt")
    assert loans.labels.tolist() == [BAD, GOOD, BAD, GOOD]
    np.testing.assert_allclose(loans.outcomes, [-500.0, 1000.0, -800.0, 1200.0])
    assert len(loans) == 4


def test_from_frame_prefers_outcome_column() -> None:
    df = make_scored_df().assign(outcome=[1.0, 2.0, 3.0, 4.0])
    loans = ScoredLoans.from_frame(df, "prob_good", "status", outcome_column="outcome",
                                   paid_column="total_pymnt", principal_column="loan_amnt")
    np.testing.assert_allclose(loans.outcomes, [1.0, 2.0, 3.0, 4.0])


def test_from_frame_without_outcomes() -> None:
    loans = ScoredLoans.from_frame(make_scored_df(), "prob_good", "status")
    assert not loans.has_outcomes


def test_from_frame_errors() -> None:
    df = make_scored_df()
    with pytest.raises(InvalidInputError):
        ScoredLoans.from_frame(df, "score", "status")
    with pytest.raises(InvalidInputError):
        ScoredLoans.from_frame(df, "prob_good", "status", paid_column="total_pymnt")

    df.loc[1, "prob_good"] = np.nan
    with pytest.raises(InvalidInputError):
        ScoredLoans.from_frame(df, "prob_good", "status")


def test_scored_loans_are_read_only_copies() -> None:
    probs = np.array([0.1, 0.9])
    loans = ScoredLoans(probs, [BAD, GOOD], [10.0, 20.0])
    probs[0] = 0.5
    assert loans.probabilities[0] == 0.1
    with pytest.raises(ValueError):
        loans.probabilities[0] = 0.3


def test_scored_loans_reject_misaligned_vectors() -> None:
    with pytest.raises(InvalidInputError):
        ScoredLoans([0.1, 0.9], [BAD])
    with pytest.raises(InvalidInputError):
        ScoredLoans([0.1, 0.9], [BAD, GOOD], [1.0])


def test_outcome_from_payments_shape_mismatch() -> None:
    with pytest.raises(InvalidInputError):
        outcome_from_payments([1.0, 2.0], [1.0])


def test_create_sample_loans_is_reproducible() -> None:
    a = create_sample_loans(n_samples=200, random_state=5)
    b = create_sample_loans(n_samples=200, random_state=5)
    assert len(a) == 200
    np.testing.assert_array_equal(a.probabilities, b.probabilities)
    assert set(a.labels.tolist()) <= {GOOD, BAD}
    assert (a.outcomes[a.labels == BAD] < 0).all()


def test_from_frame_rejects_non_numeric_cells() -> None:
    df = make_scored_df()
    df["prob_good"] = ["0.2", "high", "0.5", "0.9"]
    with pytest.raises(InvalidInputError):
        ScoredLoans.from_frame(df, "prob_good", "status")

    df = make_scored_df().assign(outcome=[1.0, "n/a", 3.0, 4.0])
    with pytest.raises(InvalidInputError):
        ScoredLoans.from_frame(df, "prob_good", "status", outcome_column="outcome")


def test_outcome_from_payments_rejects_non_numeric() -> None:
    with pytest.raises(InvalidInputError):
        outcome_from_payments(["500", "x"], [1000.0, 2000.0])
