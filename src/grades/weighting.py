# ABOUTME: Combines per-category score means into one weighted average.
# ABOUTME: Exam 50%, quiz 30%, homework 20%; empty categories are skipped, not zeroed.

from __future__ import annotations

from enum import Enum
from typing import Dict, Mapping, Optional, Sequence

from src.common.schemas import CategoryGroup, ScoreCategory

CATEGORY_WEIGHTS: Mapping[ScoreCategory, float] = {
    ScoreCategory.EXAM: 0.5,
    ScoreCategory.QUIZ: 0.3,
    ScoreCategory.HOMEWORK: 0.2,
}


class MissingCategoryPolicy(str, Enum):
    SKIP = "skip"
    ZERO = "zero"


MISSING_CATEGORY_POLICY = MissingCategoryPolicy.SKIP


def category_mean(values: Sequence[float]) -> Optional[float]:
    if not values:
        return None
    return sum(values) / len(values)


def category_means(group: CategoryGroup) -> Dict[ScoreCategory, Optional[float]]:
    return {category: category_mean(group.bucket(category)) for category in CATEGORY_WEIGHTS}


def weighted_average(
    group: CategoryGroup,
    policy: MissingCategoryPolicy = MISSING_CATEGORY_POLICY,
) -> Optional[float]:
    """
    Weighted combination of the group's category means.

    With ``SKIP`` an undefined mean drops its term from the sum; when every
    category is empty the result is None. ``ZERO`` counts an empty category
    as a mean of 0 and only makes sense when coverage is complete.
    """

    total: Optional[float] = None
    for category, mean in category_means(group).items():
        if mean is None:
            if policy is MissingCategoryPolicy.SKIP:
                continue
            mean = 0.0
        term = mean * CATEGORY_WEIGHTS[category]
        total = term if total is None else total + term
    return total
