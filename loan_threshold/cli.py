#!/usr/bin/env python3
"""
Threshold sweep CLI for scored loans.
Usage:
  loan-threshold --in scored_loans.csv --out sweep.csv --metric profit
  loan-threshold --in scored_loans.csv --thresholds 0.3,0.5,0.7 --n-jobs 4
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import pandas as pd

from .config import EvaluatorConfig, parse_thresholds
from .evaluation import METRICS, InvalidInputError, ThresholdEvaluator
from .observations import ScoredLoans
from .reporting import print_sweep_report, save_results

logger = logging.getLogger(__name__)


def _present(df: pd.DataFrame, column: Optional[str]) -> Optional[str]:
    return column if column and column in df.columns else None


def load_loans(in_csv: Path, config: EvaluatorConfig) -> ScoredLoans:
    logger.info(f"Loading scored loans from {in_csv}")
    df = pd.read_csv(in_csv)

    outcome_column = _present(df, config.outcome_column)
    paid_column = principal_column = None
    if outcome_column is None:
        paid_column = _present(df, config.paid_column)
        principal_column = _present(df, config.principal_column)
        if paid_column is None or principal_column is None:
            paid_column = principal_column = None
            logger.warning("No outcome or paid/principal columns found; profit will not be computed")

    return ScoredLoans.from_frame(
        df,
        probability_column=config.probability_column,
        label_column=config.label_column,
        outcome_column=outcome_column,
        paid_column=paid_column,
        principal_column=principal_column,
    )


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Sweep classification thresholds over scored loans")
    ap.add_argument('--in', dest='in_csv', required=True, help='CSV with one scored loan per row')
    ap.add_argument('--out', default=None, help='Where to write the sweep results CSV')
    ap.add_argument('--thresholds', default=None, help='Comma separated thresholds, e.g. 0.1,0.5,0.9')
    ap.add_argument('--metric', choices=METRICS, default='accuracy', help='Metric used to pick the best threshold')
    ap.add_argument('--n-jobs', type=int, default=None, help='Parallel workers for the sweep')
    ap.add_argument('--probability-column', default=None)
    ap.add_argument('--label-column', default=None)
    ap.add_argument('--outcome-column', default=None)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = EvaluatorConfig()
        if args.thresholds:
            config.thresholds = parse_thresholds(args.thresholds)
        if args.n_jobs is not None:
            config.n_jobs = args.n_jobs
        if args.probability_column:
            config.probability_column = args.probability_column
        if args.label_column:
            config.label_column = args.label_column
        if args.outcome_column:
            config.outcome_column = args.outcome_column

        logging.basicConfig(level=config.log_level,
                            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

        loans = load_loans(Path(args.in_csv), config)
        if args.metric == 'profit' and not loans.has_outcomes:
            raise InvalidInputError("--metric profit needs an outcome column or paid/principal columns")

        evaluator = ThresholdEvaluator(config.thresholds, n_jobs=config.n_jobs)
        results = evaluator.sweep(loans, name=Path(args.in_csv).stem)
        print_sweep_report(results, config.spot_thresholds,
                           model_name=Path(args.in_csv).stem, loans=loans)
        best = evaluator.best_threshold(Path(args.in_csv).stem, args.metric)
    except InvalidInputError as e:
        logger.error(f"Invalid input: {e}")
        return 2

    print(f"Best threshold ({args.metric}): {best:.2f}")
    if args.out:
        save_results(results, args.out)
        print(f"Saved {args.out}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
