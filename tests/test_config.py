"""Tests for environment-driven configuration."""

from __future__ import annotations

import pytest

from loan_threshold.config import EvaluatorConfig, parse_thresholds
from loan_threshold.evaluation import InvalidInputError


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("LOAN_EVAL_THRESHOLDS", "LOAN_EVAL_SPOT_THRESHOLDS", "LOAN_EVAL_N_JOBS",
                "LOAN_EVAL_LOG_LEVEL", "LOAN_EVAL_PROBABILITY_COLUMN"):
        monkeypatch.delenv(var, raising=False)
    config = EvaluatorConfig()
    assert config.thresholds == [0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9]
    assert config.spot_thresholds == [0.5, 0.7]
    assert config.n_jobs == 1
    assert config.log_level == "INFO"
    assert config.probability_column == "prob_good"


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOAN_EVAL_THRESHOLDS", "0.7, 0.3,0.7")
    monkeypatch.setenv("LOAN_EVAL_N_JOBS", "-1")
    monkeypatch.setenv("LOAN_EVAL_LOG_LEVEL", "debug")
    config = EvaluatorConfig()
    assert config.thresholds == [0.7, 0.3, 0.7]
    assert config.n_jobs == -1
    assert config.log_level == "DEBUG"


def test_malformed_env_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOAN_EVAL_N_JOBS", "many")
    with pytest.raises(InvalidInputError):
        EvaluatorConfig()


@pytest.mark.parametrize("raw", ["", " , ", "a,b", "0.5,1.5", "-0.2"])
def test_parse_thresholds_rejects(raw: str) -> None:
    with pytest.raises(InvalidInputError):
        parse_thresholds(raw)


def test_unknown_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOAN_EVAL_LOG_LEVEL", "chatty")
    with pytest.raises(InvalidInputError):
        EvaluatorConfig()
