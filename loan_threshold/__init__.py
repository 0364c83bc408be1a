"""
Loan Threshold Evaluation Package

This package evaluates a fitted loan classifier at probability thresholds:
confusion matrices, accuracy, profit of approved loans, and threshold sweeps.
"""

from .evaluation import (
    BAD,
    GOOD,
    ConfusionMatrix,
    EvaluationResult,
    InvalidInputError,
    ThresholdEvaluator,
    accuracy,
    best_threshold,
    classify,
    confusion_matrix,
    default_thresholds,
    evaluate,
    profit,
    recall,
    sweep,
)
from .observations import ScoredLoans, create_sample_loans
from .config import EvaluatorConfig
from .reporting import print_sweep_report, results_to_frame

__version__ = "0.1.0"
__all__ = [
    "BAD",
    "GOOD",
    "ConfusionMatrix",
    "EvaluationResult",
    "InvalidInputError",
    "ThresholdEvaluator",
    "accuracy",
    "best_threshold",
    "classify",
    "confusion_matrix",
    "default_thresholds",
    "evaluate",
    "profit",
    "recall",
    "sweep",
    "ScoredLoans",
    "create_sample_loans",
    "EvaluatorConfig",
    "print_sweep_report",
    "results_to_frame",
]
