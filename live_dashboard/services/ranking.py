"""
Ranking Service

Orders aggregated buckets into leaderboards.

Two scoring modes are supported:
- COMPOSITE: 0.4 * roi + 0.3 * conversionRate + 0.3 * (sumGmv / 1,000,000).
  The terms mix a ratio, a percentage and millions of currency; the weights
  come from settings so they can be tuned without code changes.
- GMV: raw GMV, used by the salary/KPI views.

Sorting is stable: equal scores keep their input order.
"""

import logging
from functools import partial
from typing import Any, Callable, List, Optional, Sequence

from live_dashboard.core.config import Settings, get_settings
from live_dashboard.models import RankMode
from live_dashboard.services.ingestion import safe_number


logger = logging.getLogger(__name__)

ScoreFn = Callable[[Any], float]


def _gmv_of(item: Any) -> float:
    # MetricsBucket carries sumGmv, personnel report rows carry totalGMV
    if hasattr(item, 'sumGmv'):
        return safe_number(item.sumGmv)
    return safe_number(getattr(item, 'totalGMV', None))


def composite_score(item: Any, settings: Optional[Settings] = None) -> float:
    """
    Weighted leaderboard score of a bucket.

    Example:
        >>> composite_score(MetricsBucket(key="A", label="A", roi=5,
        ...                               conversionRate=10, sumGmv=2_000_000))
        5.6
    """
    settings = settings or get_settings()
    return (
        settings.composite_weight_roi * safe_number(getattr(item, 'roi', None))
        + settings.composite_weight_conversion * safe_number(getattr(item, 'conversionRate', None))
        + settings.composite_weight_gmv * (_gmv_of(item) / settings.gmv_scale)
    )


def gmv_score(item: Any) -> float:
    """Raw GMV of a bucket or personnel report row."""
    return _gmv_of(item)


def rank(items: Sequence[Any], score_fn: ScoreFn, limit: Optional[int] = None) -> List[Any]:
    """
    Sort items by score, highest first, and keep the first `limit`.

    Items that have a `score` field are returned as copies with the score
    set; others are returned as-is.

    Args:
        items: Buckets or report rows.
        score_fn: Maps an item to its score.
        limit: Maximum number of items; None keeps all, 0 or less keeps none.

    Returns:
        Ranked items.

    Raises:
        TypeError: If items is not a list.
    """
    if not isinstance(items, (list, tuple)):
        raise TypeError(f"items must be a list, got {type(items).__name__}")
    if limit is not None and limit <= 0:
        return []

    scored = [(score_fn(item), item) for item in items]
    scored.sort(key=lambda pair: pair[0], reverse=True)
    if limit is not None:
        scored = scored[:limit]

    ranked = []
    for score, item in scored:
        if 'score' in getattr(type(item), 'model_fields', {}):
            item = item.model_copy(update={'score': score})
        ranked.append(item)
    return ranked


def top_n(
    items: Sequence[Any],
    mode: RankMode = RankMode.COMPOSITE,
    n: Optional[int] = None,
    settings: Optional[Settings] = None,
) -> List[Any]:
    """
    Top-N leaderboard by composite score or raw GMV.

    Args:
        items: Buckets (or personnel report rows in GMV mode).
        mode: RankMode.COMPOSITE or RankMode.GMV.
        n: Number of entries; defaults to settings.default_top_n.
        settings: Optional settings override.

    Raises:
        ValueError: If mode is not a RankMode value.
    """
    settings = settings or get_settings()
    mode = RankMode(mode)
    n = settings.default_top_n if n is None else n

    score_fn: ScoreFn
    if mode == RankMode.COMPOSITE:
        score_fn = partial(composite_score, settings=settings)
    else:
        score_fn = gmv_score

    ranked = rank(items, score_fn, n)
    logger.debug(f"Ranked {len(items)} items by {mode.value}; kept {len(ranked)}")
    return ranked
