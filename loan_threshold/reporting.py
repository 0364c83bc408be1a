"""
Tabular output of threshold sweeps.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

import pandas as pd

from .evaluation import EvaluationResult, best_threshold, evaluate

logger = logging.getLogger(__name__)

COLUMNS = [
    'threshold', 'accuracy', 'recall_good', 'recall_bad', 'approved', 'profit',
    'bad_pred_bad', 'bad_pred_good', 'good_pred_bad', 'good_pred_good',
]


def results_to_frame(results: Sequence[EvaluationResult]) -> pd.DataFrame:
    """One row per threshold, in sweep order."""
    return pd.DataFrame([r.to_dict() for r in results], columns=COLUMNS)


def save_results(results: Sequence[EvaluationResult], path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    results_to_frame(results).to_csv(path, index=False)
    logger.info(f"Saved {len(results)} threshold results to {path}")
    return path


def print_sweep_report(results: Sequence[EvaluationResult],
                       spot_thresholds: Optional[List[float]] = None,
                       model_name: str = "Model",
                       loans=None) -> pd.DataFrame:
    """
    Print the sweep as a table followed by the best thresholds.

    Args:
        results: Output of ``sweep``
        spot_thresholds: Thresholds whose confusion matrices are printed in full
        model_name: Name shown in the header
        loans: ScoredLoans the sweep ran on; spot thresholds missing from
            ``results`` are evaluated on them, or skipped with a warning

    Returns:
        The results as a DataFrame
    """
    df = results_to_frame(results)
    has_profit = df['profit'].notna().all() and len(df) > 0

    print(f"\n{'='*50}")
    print(f"Threshold Sweep for {model_name}")
    print(f"{'='*50}\n")

    shown = ['threshold', 'accuracy', 'recall_good', 'recall_bad', 'approved']
    if has_profit:
        shown.append('profit')
    print(df[shown].to_string(index=False, float_format=lambda v: f"{v:.4f}"))

    for t in spot_thresholds or []:
        matches = [r for r in results if r.threshold == t]
        if matches:
            r = matches[0]
        elif loans is not None:
            r = evaluate(loans.probabilities, loans.labels, t, loans.outcomes)
        else:
            logger.warning(f"Spot threshold {t} was not swept; skipping it")
            continue
        print(f"\nThreshold {t:.2f}:")
        print(pd.DataFrame(r.matrix.as_array(),
                           index=['true Bad', 'true Good'],
                           columns=['pred Bad', 'pred Good']))
        print(f"Accuracy: {r.accuracy:.4f}")
        if r.profit is not None:
            print(f"Profit:   {r.profit:,.2f}")

    if len(results) > 0:
        print(f"\nBest threshold by accuracy: {best_threshold(results, 'accuracy'):.2f}")
        if has_profit:
            print(f"Best threshold by profit:   {best_threshold(results, 'profit'):.2f}")

    print(f"{'='*50}\n")
    return df
