"""
Score derivation

Pure functions computing the overall score, confidence and quality flags from
the four core judge dimensions. Task-specific dimensions never enter these
aggregates.
"""

from __future__ import annotations

import math
import statistics
from typing import Any, Mapping

from casejudge_core.domain.constants import CORE_DIMENSIONS, DIMENSION_FLAGS
from casejudge_core.domain.value_objects import DerivedMetrics, QualityThresholds


class ScoreDerivationError(Exception):
    """Raised when a reply has no usable core scores"""
    pass


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going up (7.5 -> 8, 6.5 -> 7), unlike round()"""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def core_scores(scores: Mapping[str, Any]) -> list[float]:
    """Numeric values of the core dimensions present in scores, in dimension order"""
    values = []
    for name in CORE_DIMENSIONS:
        value = scores.get(name)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            values.append(float(value))
    return values


def derive_overall_score(scores: Mapping[str, Any]) -> int:
    """
    Rounded mean of the core dimensions

    Raises:
        ScoreDerivationError: If no core dimension holds a number
    """
    values = core_scores(scores)
    if not values:
        raise ScoreDerivationError("No valid scores found for overall calculation")
    return int(round_half_up(statistics.fmean(values)))


def derive_confidence(
    scores: Mapping[str, Any],
    thresholds: QualityThresholds | None = None,
) -> float:
    """
    Confidence from score consistency: max(0, 1 - pstdev / normalizer), 2 decimals.

    Returns 0.0 when no core dimension holds a number.
    """
    thresholds = thresholds or QualityThresholds()
    values = core_scores(scores)
    if not values:
        return 0.0
    std_dev = statistics.pstdev(values)
    return round_half_up(max(0.0, 1 - std_dev / thresholds.confidence_normalizer), 2)


def derive_quality_flags(
    scores: Mapping[str, Any],
    thresholds: QualityThresholds | None = None,
) -> tuple[str, ...]:
    """Quality tags for a set of core scores (every rule that applies, in a fixed order)"""
    thresholds = thresholds or QualityThresholds()
    values = core_scores(scores)
    if not values:
        return ()

    flags = []
    mean = statistics.fmean(values)
    if mean >= thresholds.high_quality_mean:
        flags.append("high_quality")
    if mean <= thresholds.low_quality_mean:
        flags.append("low_quality")

    for name in CORE_DIMENSIONS:
        value = scores.get(name)
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            continue
        if value <= thresholds.low_dimension_score:
            flags.append(DIMENSION_FLAGS[name])

    std_dev = statistics.pstdev(values)
    if std_dev >= thresholds.inconsistent_std_dev:
        flags.append("inconsistent_quality")
    if std_dev <= thresholds.consistent_std_dev:
        flags.append("consistent_quality")
    return tuple(flags)


def derive_metrics(
    scores: Mapping[str, Any],
    thresholds: QualityThresholds | None = None,
) -> DerivedMetrics:
    """Overall score, confidence and flags in one pass"""
    return DerivedMetrics(
        overall=derive_overall_score(scores),
        confidence=derive_confidence(scores, thresholds),
        flags=derive_quality_flags(scores, thresholds),
    )
