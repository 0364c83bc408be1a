"""
Configuration for the loan threshold evaluator.

Every setting has a default and can be overridden through an environment
variable, e.g. ``LOAN_EVAL_THRESHOLDS=0.3,0.5,0.7``.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

from .evaluation import InvalidInputError, check_threshold, default_thresholds


def parse_thresholds(raw: str) -> List[float]:
    """Parse a comma separated list of thresholds, keeping the given order."""
    parts = [p.strip() for p in raw.split(",") if p.strip()]
    if not parts:
        raise InvalidInputError(f"No thresholds in {raw!r}")
    values = []
    for part in parts:
        try:
            values.append(float(part))
        except ValueError:
            raise InvalidInputError(f"Not a threshold: {part!r}")
    return [check_threshold(v) for v in values]


def _resolve_thresholds() -> List[float]:
    raw = os.getenv("LOAN_EVAL_THRESHOLDS")
    return parse_thresholds(raw) if raw else default_thresholds()


def _resolve_spot_thresholds() -> List[float]:
    raw = os.getenv("LOAN_EVAL_SPOT_THRESHOLDS")
    return parse_thresholds(raw) if raw else [0.5, 0.7]


def _resolve_n_jobs() -> int:
    raw = os.getenv("LOAN_EVAL_N_JOBS", "1")
    try:
        return int(raw)
    except ValueError:
        raise InvalidInputError(f"LOAN_EVAL_N_JOBS must be an integer, got {raw!r}")


def _resolve_log_level() -> str:
    level = os.getenv("LOAN_EVAL_LOG_LEVEL", "INFO").upper()
    if not isinstance(logging.getLevelName(level), int):
        raise InvalidInputError(f"LOAN_EVAL_LOG_LEVEL is not a logging level: {level!r}")
    return level


@dataclass
class EvaluatorConfig:
    """Settings for sweeps and for reading scored-loan tables."""

    # Thresholds swept by default, and the ones reported individually
    thresholds: List[float] = field(default_factory=_resolve_thresholds)
    spot_thresholds: List[float] = field(default_factory=_resolve_spot_thresholds)

    # joblib workers for sweeps (1 = sequential)
    n_jobs: int = field(default_factory=_resolve_n_jobs)

    # Scored-loan table columns
    probability_column: str = field(default_factory=lambda: os.getenv("LOAN_EVAL_PROBABILITY_COLUMN", "prob_good"))
    label_column: str = field(default_factory=lambda: os.getenv("LOAN_EVAL_LABEL_COLUMN", "status"))
    outcome_column: Optional[str] = field(default_factory=lambda: os.getenv("LOAN_EVAL_OUTCOME_COLUMN", "outcome"))
    paid_column: Optional[str] = field(default_factory=lambda: os.getenv("LOAN_EVAL_PAID_COLUMN", "total_pymnt"))
    principal_column: Optional[str] = field(default_factory=lambda: os.getenv("LOAN_EVAL_PRINCIPAL_COLUMN", "loan_amnt"))

    log_level: str = field(default_factory=_resolve_log_level)
