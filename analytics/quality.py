"""Seam for the external quality scorer that grades a single reading (0-100)."""

import importlib
import math
from typing import Callable, Iterable

import structlog

from ingest.schemas import StoredReading

QualityScorer = Callable[[StoredReading], float]

log = structlog.get_logger(component="quality-scorer")


def load_scorer(path: str | None) -> QualityScorer | None:
    """Resolve "package.module:function" to a callable. None or "" means no scorer."""
    if not path:
        return None
    module_name, _, attr = path.partition(":")
    if not module_name or not attr:
        raise ValueError(f"Quality scorer must look like 'package.module:function', got {path!r}")
    scorer = getattr(importlib.import_module(module_name), attr)
    if not callable(scorer):
        raise TypeError(f"Quality scorer {path!r} is not callable")
    return scorer


def safe_score(scorer: QualityScorer | None, reading: StoredReading) -> float | None:
    """Score one reading; any failure or nonsensical result means no score."""
    if scorer is None:
        return None
    try:
        score = scorer(reading)
    except Exception as e:
        log.warning(
            "quality_scorer_failed",
            timestamp_ms=reading.timestamp_ms,
            error_type=type(e).__name__,
            error=str(e),
        )
        return None
    if isinstance(score, bool) or not isinstance(score, (int, float)) or not math.isfinite(score):
        log.warning("quality_scorer_invalid_score", timestamp_ms=reading.timestamp_ms, score=repr(score))
        return None
    return float(score)


def score_readings(scorer: QualityScorer | None, readings: Iterable[StoredReading]) -> list[float]:
    """Scores in reading order, dropping readings the scorer could not grade."""
    scores = []
    for reading in readings:
        score = safe_score(scorer, reading)
        if score is not None:
            scores.append(score)
    return scores
