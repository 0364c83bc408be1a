"""
Scored loan observations.

Holds the three aligned vectors the evaluator consumes: predicted probability
of ``Good``, the true ``Good``/``Bad`` label and, optionally, the signed
monetary outcome (amount repaid minus amount loaned) of each loan.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import numpy as np
import pandas as pd

from .evaluation import BAD, GOOD, InvalidInputError, as_labels, as_outcomes, as_probabilities

logger = logging.getLogger(__name__)

_LABEL_ALIASES = {
    'good': GOOD,
    'bad': BAD,
    '1': GOOD,
    '0': BAD,
    'true': GOOD,
    'false': BAD,
}


def normalize_label(value: Any) -> str:
    """Map 'good'/'bad', 1/0 and booleans onto ``Good``/``Bad``."""
    if isinstance(value, str):
        key = value.strip().lower()
    elif pd.isna(value):
        raise InvalidInputError("Missing label")
    else:
        try:
            number = float(value)
            key = str(int(number)) if number in (0.0, 1.0) else str(value)
        except (TypeError, ValueError):
            key = str(value)
    if key not in _LABEL_ALIASES:
        raise InvalidInputError(f"Unknown label: {value!r}")
    return _LABEL_ALIASES[key]


def _frozen(values: np.ndarray) -> np.ndarray:
    values = values.copy()
    values.setflags(write=False)
    return values


@dataclass(frozen=True, eq=False)
class ScoredLoans:
    """Aligned, read-only evaluation inputs for one scored loan set."""

    probabilities: np.ndarray
    labels: np.ndarray
    outcomes: Optional[np.ndarray] = None

    def __post_init__(self):
        proba = as_probabilities(self.probabilities)
        labels = as_labels(self.labels, "labels")
        if len(proba) != len(labels):
            raise InvalidInputError(
                f"Length mismatch: {len(proba)} probabilities vs {len(labels)} labels"
            )
        object.__setattr__(self, 'probabilities', _frozen(proba))
        object.__setattr__(self, 'labels', _frozen(labels))

        if self.outcomes is not None:
            outcomes = as_outcomes(self.outcomes)
            if len(outcomes) != len(proba):
                raise InvalidInputError(
                    f"Length mismatch: {len(proba)} probabilities vs {len(outcomes)} outcomes"
                )
            object.__setattr__(self, 'outcomes', _frozen(outcomes))

    def __len__(self) -> int:
        return len(self.probabilities)

    @property
    def has_outcomes(self) -> bool:
        return self.outcomes is not None

    @classmethod
    def from_frame(cls, df: pd.DataFrame,
                   probability_column: str,
                   label_column: str,
                   outcome_column: Optional[str] = None,
                   paid_column: Optional[str] = None,
                   principal_column: Optional[str] = None) -> "ScoredLoans":
        """
        Build observations from a DataFrame of already-scored loans.

        Args:
            df: One row per loan
            probability_column: Predicted probability of ``Good``
            label_column: True label ('Good'/'Bad', 1/0 or booleans)
            outcome_column: Signed monetary outcome per loan (optional)
            paid_column: Total amount repaid, used with ``principal_column``
                when ``outcome_column`` is not given
            principal_column: Amount loaned

        Returns:
            ScoredLoans with outcomes when they can be derived
        """
        required = [probability_column, label_column]
        if outcome_column:
            required.append(outcome_column)
        elif paid_column or principal_column:
            required.extend(c for c in (paid_column, principal_column) if c)
        missing = [c for c in required if c not in df.columns]
        if missing:
            raise InvalidInputError(f"Columns not found in data: {missing}")

        if df[probability_column].isnull().any():
            raise InvalidInputError(f"Column '{probability_column}' has missing values")

        labels = df[label_column].map(normalize_label).to_numpy(dtype=object)

        outcomes = None
        if outcome_column:
            outcomes = df[outcome_column].to_numpy()
        elif paid_column and principal_column:
            outcomes = outcome_from_payments(df[paid_column], df[principal_column])
        elif paid_column or principal_column:
            raise InvalidInputError("Both paid and principal columns are needed to derive outcomes")

        logger.info(f"Loaded {len(df)} scored loans "
                    f"({(labels == GOOD).sum()} good, {(labels == BAD).sum()} bad, "
                    f"outcomes={'yes' if outcomes is not None else 'no'})")

        return cls(df[probability_column].to_numpy(), labels, outcomes)


def outcome_from_payments(total_paid, principal) -> np.ndarray:
    """Amount repaid minus amount loaned."""
    paid = as_outcomes(total_paid, "Amounts paid")
    loaned = as_outcomes(principal, "Principal amounts")
    if paid.shape != loaned.shape:
        raise InvalidInputError(f"Length mismatch: {paid.shape} paid vs {loaned.shape} principal")
    return paid - loaned


def create_sample_loans(n_samples: int = 1000, bad_rate: float = 0.2,
                        random_state: int = 42) -> ScoredLoans:
    """
    Create synthetic scored loans for testing and demos.

    Good loans draw probabilities skewed towards 1 and earn interest;
    bad loans skew towards 0 and lose part of the principal.

    Args:
        n_samples: Number of loans
        bad_rate: Share of loans labelled ``Bad``
        random_state: Random seed for reproducibility

    Returns:
        ScoredLoans with outcomes
    """
    rng = np.random.default_rng(random_state)
    is_bad = rng.random(n_samples) < bad_rate

    proba = np.where(is_bad, rng.beta(2, 4, n_samples), rng.beta(5, 2, n_samples))
    principal = rng.uniform(1000, 35000, n_samples).round(2)
    gain = principal * rng.uniform(0.05, 0.25, n_samples)
    loss = principal * rng.uniform(0.2, 0.9, n_samples)
    outcomes = np.where(is_bad, -loss, gain).round(2)

    labels = np.where(is_bad, BAD, GOOD).astype(object)
    return ScoredLoans(proba, labels, outcomes)
