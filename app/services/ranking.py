"""
Composite scoring, threshold filtering and ranking of validated ideas

All functions here are pure: they never mutate their input, perform I/O or
raise on missing optional fields.
"""
from collections.abc import Mapping
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, List

from app.models import CompetitionLevel, RankedIdea

SUCCESS_WEIGHT = 0.4
VOLUME_WEIGHT = 0.3
REVENUE_WEIGHT = 0.2

VOLUME_CAP = 1_000_000
REVENUE_CAP_USD = 5_000_000

MIN_MONTHLY_SEARCH_VOLUME = 10_000

COMPETITION_ADJUSTMENTS = {
    CompetitionLevel.LOW.value: 0.10,
    CompetitionLevel.MEDIUM.value: 0.05,
    CompetitionLevel.HIGH.value: 0.0,
    CompetitionLevel.VERY_HIGH.value: -0.10,
}

_SCORE_QUANTUM = Decimal("0.001")
_DERIVED_FIELDS = {"composite_score", "rank"}


def _field(idea: Any, name: str) -> Any:
    if isinstance(idea, Mapping):
        return idea.get(name)
    return getattr(idea, name, None)


def _round_score(value: float) -> float:
    # Round half away from zero on the shortest repr, so 0.0005 -> 0.001
    return float(Decimal(repr(value)).quantize(_SCORE_QUANTUM, rounding=ROUND_HALF_UP))


def volume_subscore(idea: Any) -> float:
    return min((_field(idea, "monthly_search_volume") or 0) / VOLUME_CAP, 1.0)


def revenue_subscore(idea: Any) -> float:
    return min((_field(idea, "estimated_revenue_high_usd") or 0) / REVENUE_CAP_USD, 1.0)


def competition_adjustment(idea: Any) -> float:
    level = _field(idea, "competition_level")
    level = getattr(level, "value", level)
    return COMPETITION_ADJUSTMENTS.get(level, 0.0)


def calculate_composite_score(idea: Any) -> float:
    """
    Calculate the composite desirability score of an idea

    score = 0.4 * success + 0.3 * volume + 0.2 * revenue + competition adjustment

    Volume and revenue are normalised against their caps, missing values
    contribute zero, and the result is not clamped after the competition
    adjustment.

    Args:
        idea: Idea record (model instance or mapping)

    Returns:
        Composite score rounded to 3 decimal places
    """
    success_score = (_field(idea, "success_probability") or 0) / 100

    composite = (
        SUCCESS_WEIGHT * success_score
        + VOLUME_WEIGHT * volume_subscore(idea)
        + REVENUE_WEIGHT * revenue_subscore(idea)
        + competition_adjustment(idea)
    )

    return _round_score(composite)


def passes_thresholds(idea: Any) -> bool:
    """Check the minimum search volume and competition thresholds"""
    if (_field(idea, "monthly_search_volume") or 0) < MIN_MONTHLY_SEARCH_VOLUME:
        return False

    level = _field(idea, "competition_level")
    if getattr(level, "value", level) == CompetitionLevel.VERY_HIGH.value:
        return False

    return True


def filter_valid_ideas(ideas: Iterable[Any]) -> List[Any]:
    """Keep ideas meeting the thresholds, preserving input order"""
    return [idea for idea in ideas if passes_thresholds(idea)]


def _source_fields(idea: Any) -> dict:
    if isinstance(idea, Mapping):
        data = dict(idea)
    else:
        data = idea.model_dump()
    # Absent and null fields take the RankedIdea defaults
    return {
        name: value for name, value in data.items()
        if name not in _DERIVED_FIELDS and value is not None
    }


def rank_ideas(ideas: Iterable[Any]) -> List[RankedIdea]:
    """
    Rank ideas by composite score

    Scores every idea (no filtering), sorts by score descending with the idea
    id as ascending tiebreak, and assigns 1-based ranks. Scores and ranks
    already present on the input are ignored and recomputed.

    Args:
        ideas: Idea records (model instances or mappings, possibly partial)

    Returns:
        New RankedIdea records in rank order
    """
    scored = [(calculate_composite_score(idea), idea) for idea in ideas]
    scored.sort(key=lambda pair: (-pair[0], str(_field(pair[1], "id") or "")))

    return [
        RankedIdea(**_source_fields(idea), composite_score=score, rank=position)
        for position, (score, idea) in enumerate(scored, start=1)
    ]
