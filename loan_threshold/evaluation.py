"""
Evaluation Module

Threshold-based evaluation of a loan classifier: classification at a cutoff,
confusion matrix, accuracy, per-class recall, profit of the approved loans,
and sweeps over candidate thresholds.

A loan is predicted ``Good`` (approved) when its predicted probability of
being good is at or above the threshold, and ``Bad`` (declined) otherwise.
Declined loans contribute nothing to profit. The historical data only holds
loans that were actually issued, so this treats "not funded" and "outcome
ignored" as the same thing; that simplification is kept on purpose.
"""

import logging
import numbers
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
from joblib import Parallel, delayed
from sklearn.metrics import confusion_matrix as sk_confusion_matrix

logger = logging.getLogger(__name__)

GOOD = "Good"
BAD = "Bad"
LABELS = (BAD, GOOD)

METRICS = ("accuracy", "profit")


class InvalidInputError(ValueError):
    """Raised when evaluation inputs are misaligned, out of range or empty."""


@dataclass(frozen=True)
class ConfusionMatrix:
    """Counts of true vs. predicted labels at one threshold."""

    bad_pred_bad: int
    bad_pred_good: int
    good_pred_bad: int
    good_pred_good: int

    @property
    def total(self) -> int:
        return self.bad_pred_bad + self.bad_pred_good + self.good_pred_bad + self.good_pred_good

    @property
    def correct(self) -> int:
        return self.bad_pred_bad + self.good_pred_good

    def as_array(self) -> np.ndarray:
        """Rows are true [Bad, Good], columns are predicted [Bad, Good]."""
        return np.array([[self.bad_pred_bad, self.bad_pred_good],
                         [self.good_pred_bad, self.good_pred_good]])


@dataclass(frozen=True)
class EvaluationResult:
    threshold: float
    matrix: ConfusionMatrix
    accuracy: float
    recall_good: float
    recall_bad: float
    approved: int
    profit: Optional[float] = None

    def metric(self, name: str) -> Optional[float]:
        if name not in METRICS:
            raise InvalidInputError(f"Unknown metric: {name}")
        return getattr(self, name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'threshold': self.threshold,
            'accuracy': self.accuracy,
            'recall_good': self.recall_good,
            'recall_bad': self.recall_bad,
            'approved': self.approved,
            'profit': self.profit,
            'bad_pred_bad': self.matrix.bad_pred_bad,
            'bad_pred_good': self.matrix.bad_pred_good,
            'good_pred_bad': self.matrix.good_pred_bad,
            'good_pred_good': self.matrix.good_pred_good,
        }


def check_threshold(threshold: float) -> float:
    """Validate one threshold; only real numbers in [0, 1] are accepted."""
    if isinstance(threshold, (bool, np.bool_)) or not isinstance(threshold, numbers.Real):
        raise InvalidInputError(f"Threshold must be a real number, got {threshold!r}")
    value = float(threshold)
    if not 0.0 <= value <= 1.0:
        raise InvalidInputError(f"Threshold must be within [0, 1], got {threshold!r}")
    return value


def _as_real_array(values: Sequence[float], name: str) -> np.ndarray:
    # Strings, booleans and mixed object columns are rejected, not converted.
    try:
        array = np.asarray(values)
    except (TypeError, ValueError):
        raise InvalidInputError(f"{name} must be a flat numeric sequence")
    if array.dtype.kind not in "iuf":
        raise InvalidInputError(f"{name} must be numeric, got dtype {array.dtype}")
    return array.astype(float).ravel()


def as_probabilities(probabilities: Sequence[float]) -> np.ndarray:
    values = _as_real_array(probabilities, "Probabilities")
    in_range = (values >= 0.0) & (values <= 1.0)
    if not in_range.all():
        bad_idx = int(np.argmin(in_range))
        raise InvalidInputError(
            f"Probabilities must be within [0, 1]; index {bad_idx} is {values[bad_idx]!r}"
        )
    return values


def as_labels(labels: Sequence[str], name: str = "labels") -> np.ndarray:
    values = np.array(labels, dtype=object).ravel()
    known = np.isin(values, LABELS)
    if not known.all():
        unknown = sorted({str(v) for v in values[~known]})
        raise InvalidInputError(f"Unknown {name}: {unknown}; expected {list(LABELS)}")
    return values


def as_outcomes(outcomes: Sequence[float], name: str = "Monetary outcomes") -> np.ndarray:
    values = _as_real_array(outcomes, name)
    if not np.isfinite(values).all():
        raise InvalidInputError(f"{name} must be finite")
    return values


def _check_lengths(**arrays: np.ndarray) -> None:
    lengths = {name: len(values) for name, values in arrays.items()}
    if len(set(lengths.values())) > 1:
        raise InvalidInputError(f"Length mismatch: {lengths}")


def classify(probabilities: Sequence[float], threshold: float,
             true_labels: Optional[Sequence[str]] = None) -> np.ndarray:
    """
    Classify each loan against a probability threshold.

    Args:
        probabilities: Predicted probability of ``Good`` for each loan
        threshold: Cutoff in [0, 1]; a probability equal to it counts as ``Good``
        true_labels: Optional ground truth, only checked for alignment

    Returns:
        Array of ``Good``/``Bad`` labels, same length as ``probabilities``
    """
    threshold = check_threshold(threshold)
    proba = as_probabilities(probabilities)
    if true_labels is not None:
        _check_lengths(probabilities=proba, true_labels=np.asarray(true_labels, dtype=object).ravel())
    return np.where(proba >= threshold, GOOD, BAD).astype(object)


def confusion_matrix(true_labels: Sequence[str], predicted_labels: Sequence[str]) -> ConfusionMatrix:
    """
    Tally true vs. predicted labels.

    Args:
        true_labels: Ground truth ``Good``/``Bad`` labels
        predicted_labels: Predicted ``Good``/``Bad`` labels

    Returns:
        ConfusionMatrix with exact integer counts
    """
    y_true = as_labels(true_labels, "true labels")
    y_pred = as_labels(predicted_labels, "predicted labels")
    _check_lengths(true_labels=y_true, predicted_labels=y_pred)

    if len(y_true) == 0:
        return ConfusionMatrix(0, 0, 0, 0)

    cm = sk_confusion_matrix(y_true, y_pred, labels=list(LABELS))
    (bb, bg), (gb, gg) = cm.tolist()
    return ConfusionMatrix(bad_pred_bad=int(bb), bad_pred_good=int(bg),
                           good_pred_bad=int(gb), good_pred_good=int(gg))


def accuracy(matrix: ConfusionMatrix) -> float:
    """Share of correct predictions. The matrix must not be empty."""
    if matrix.total <= 0:
        raise InvalidInputError("Cannot compute accuracy of an empty confusion matrix")
    return matrix.correct / matrix.total


def recall(matrix: ConfusionMatrix, label: str) -> float:
    """Recall of one class; 0.0 when that class never occurs."""
    if label == GOOD:
        hits, support = matrix.good_pred_good, matrix.good_pred_good + matrix.good_pred_bad
    elif label == BAD:
        hits, support = matrix.bad_pred_bad, matrix.bad_pred_bad + matrix.bad_pred_good
    else:
        raise InvalidInputError(f"Unknown label: {label!r}")
    return hits / support if support > 0 else 0.0


def profit(monetary_outcomes: Sequence[float], predicted_labels: Sequence[str]) -> float:
    """
    Total outcome of the approved loans.

    Args:
        monetary_outcomes: Amount repaid minus amount loaned, per loan (signed)
        predicted_labels: Predicted ``Good``/``Bad`` labels, aligned by index

    Returns:
        Sum of outcomes where the prediction is ``Good``; declined loans add 0
    """
    outcomes = as_outcomes(monetary_outcomes)
    y_pred = as_labels(predicted_labels, "predicted labels")
    _check_lengths(monetary_outcomes=outcomes, predicted_labels=y_pred)
    return float(outcomes[y_pred == GOOD].sum())


def _evaluate_checked(proba: np.ndarray, y_true: np.ndarray,
                      outcomes: Optional[np.ndarray], threshold: float) -> EvaluationResult:
    # Inputs were validated by the caller.
    y_pred = np.where(proba >= threshold, GOOD, BAD).astype(object)
    cm = confusion_matrix(y_true, y_pred)
    result = EvaluationResult(
        threshold=threshold,
        matrix=cm,
        accuracy=accuracy(cm),
        recall_good=recall(cm, GOOD),
        recall_bad=recall(cm, BAD),
        approved=cm.bad_pred_good + cm.good_pred_good,
        profit=profit(outcomes, y_pred) if outcomes is not None else None,
    )
    logger.debug(f"threshold={threshold:.3f} accuracy={result.accuracy:.4f} "
                 f"approved={result.approved} profit={result.profit}")
    return result


def _prepare_inputs(probabilities, true_labels, monetary_outcomes):
    proba = as_probabilities(probabilities)
    if len(proba) == 0:
        raise InvalidInputError("Probabilities must not be empty")
    y_true = as_labels(true_labels, "true labels")
    arrays = {'probabilities': proba, 'true_labels': y_true}
    outcomes = None
    if monetary_outcomes is not None:
        outcomes = as_outcomes(monetary_outcomes)
        arrays['monetary_outcomes'] = outcomes
    _check_lengths(**arrays)
    return proba, y_true, outcomes


def evaluate(probabilities: Sequence[float], true_labels: Sequence[str],
             threshold: float,
             monetary_outcomes: Optional[Sequence[float]] = None) -> EvaluationResult:
    """Evaluate a single threshold."""
    threshold = check_threshold(threshold)
    proba, y_true, outcomes = _prepare_inputs(probabilities, true_labels, monetary_outcomes)
    return _evaluate_checked(proba, y_true, outcomes, threshold)


def sweep(probabilities: Sequence[float], true_labels: Sequence[str],
          monetary_outcomes: Optional[Sequence[float]],
          thresholds: Sequence[float],
          n_jobs: Optional[int] = 1) -> List[EvaluationResult]:
    """
    Evaluate accuracy and profit at each candidate threshold.

    Thresholds are evaluated independently against the same inputs, so with
    ``n_jobs`` other than 1 they run in parallel. Results come back in the
    order of ``thresholds``; duplicates are kept.

    Args:
        probabilities: Predicted probability of ``Good`` for each loan
        true_labels: Ground truth ``Good``/``Bad`` labels
        monetary_outcomes: Signed outcome per loan, or None to skip profit
        thresholds: Candidate cutoffs, each in [0, 1]
        n_jobs: joblib worker count (1 = sequential, -1 = all cores)

    Returns:
        One EvaluationResult per threshold
    """
    proba, y_true, outcomes = _prepare_inputs(probabilities, true_labels, monetary_outcomes)
    checked = [check_threshold(t) for t in thresholds]
    if not checked:
        raise InvalidInputError("At least one threshold is required")

    logger.info(f"Sweeping {len(checked)} thresholds over {len(proba)} loans (n_jobs={n_jobs})")

    if n_jobs == 1:
        return [_evaluate_checked(proba, y_true, outcomes, t) for t in checked]

    return Parallel(n_jobs=n_jobs, prefer="threads")(
        delayed(_evaluate_checked)(proba, y_true, outcomes, t) for t in checked
    )


def best_threshold(results: Sequence[EvaluationResult], metric: str = 'accuracy') -> float:
    """
    Threshold with the highest value of ``metric``.

    Args:
        results: Output of ``sweep``
        metric: 'accuracy' or 'profit'

    Returns:
        Threshold of the best result; the earliest one wins ties
    """
    if metric not in METRICS:
        raise InvalidInputError(f"Unknown metric: {metric}")
    if len(results) == 0:
        raise InvalidInputError("Cannot pick a threshold from empty results")

    scores = [r.metric(metric) for r in results]
    if any(s is None for s in scores):
        raise InvalidInputError(f"Results carry no {metric}; pass monetary outcomes to sweep")

    best_idx = int(np.argmax(scores))
    return results[best_idx].threshold


class ThresholdEvaluator:
    """Runs and keeps threshold sweeps for one or more scored loan sets."""

    def __init__(self, thresholds: Optional[Sequence[float]] = None,
                 n_jobs: Optional[int] = 1):
        """
        Initialize ThresholdEvaluator.

        Args:
            thresholds: Default candidate thresholds (0.1 ... 0.9 when omitted)
            n_jobs: joblib worker count used by sweeps
        """
        if thresholds is None:
            thresholds = default_thresholds()
        self.thresholds = [check_threshold(t) for t in thresholds]
        self.n_jobs = n_jobs
        self.evaluation_results: Dict[str, List[EvaluationResult]] = {}

    def evaluate(self, loans, threshold: float) -> EvaluationResult:
        """Evaluate ``loans`` (a ScoredLoans) at a single threshold."""
        return evaluate(loans.probabilities, loans.labels, threshold, loans.outcomes)

    def sweep(self, loans, thresholds: Optional[Sequence[float]] = None,
              name: str = "model") -> List[EvaluationResult]:
        """Sweep ``loans`` and store the results under ``name``."""
        thresholds = self.thresholds if thresholds is None else thresholds
        results = sweep(loans.probabilities, loans.labels, loans.outcomes,
                        thresholds, n_jobs=self.n_jobs)
        self.evaluation_results[name] = results
        return results

    def best_threshold(self, name: str = "model", metric: str = 'accuracy') -> float:
        if name not in self.evaluation_results:
            raise InvalidInputError(f"No sweep stored under '{name}'")
        best = best_threshold(self.evaluation_results[name], metric)
        logger.info(f"Best {metric} threshold for {name}: {best:.3f}")
        return best


def default_thresholds() -> List[float]:
    """0.1, 0.2, ..., 0.9, rounded so they compare equal to their literals."""
    return [round(0.1 * i, 10) for i in range(1, 10)]
