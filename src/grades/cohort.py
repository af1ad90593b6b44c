# ABOUTME: Derives cohort pass-rate statistics from per-learner weighted averages.
# ABOUTME: Counts learners at or above a threshold against the distinct learners of the same scope.

from __future__ import annotations

from enum import Enum
from typing import Collection, Dict, Iterable, List, Mapping, Optional

from src.common.schemas import CohortReport, GradeRecord, WeightedAverage

from .grouping import LEARNER_KEY, group_scores
from .weighting import MISSING_CATEGORY_POLICY, MissingCategoryPolicy, weighted_average

DEFAULT_THRESHOLD = 70


class ClassScope(str, Enum):
    """How a class filter narrows a cohort report."""

    CANDIDATE_POOL = "candidate_pool"
    SCORE_CONTRIBUTIONS = "score_contributions"


CLASS_SCOPE = ClassScope.CANDIDATE_POOL


def learner_averages(
    records: Iterable[GradeRecord],
    policy: MissingCategoryPolicy = MISSING_CATEGORY_POLICY,
) -> Dict[int, Optional[float]]:
    groups = group_scores(records, by=LEARNER_KEY)
    return {learner_id: weighted_average(group, policy) for learner_id, group in groups.items()}


def count_above(averages: Mapping[int, Optional[float]], threshold: float = DEFAULT_THRESHOLD) -> int:
    return sum(1 for avg in averages.values() if avg is not None and avg >= threshold)


def summarize_cohort(
    averages: Mapping[int, Optional[float]],
    learner_ids: Collection[int],
    threshold: float = DEFAULT_THRESHOLD,
) -> CohortReport:
    """
    Build a CohortReport for the learners in ``learner_ids``.

    Averages of learners outside ``learner_ids`` are ignored so the numerator
    never counts anyone the denominator does not.
    """

    scope_ids = set(learner_ids)
    total = len(scope_ids)
    if total == 0:
        return CohortReport(total_learners=0, learners_above_percentage=0, percentage_above_percentage=0)

    in_scope = {learner_id: avg for learner_id, avg in averages.items() if learner_id in scope_ids}
    above = count_above(in_scope, threshold)
    percentage = above / total * 100
    return CohortReport(total_learners=total, learners_above_percentage=above, percentage_above_percentage=percentage)


def to_weighted_averages(averages: Mapping[int, Optional[float]]) -> List[WeightedAverage]:
    return [WeightedAverage(key=learner_id, avg=avg) for learner_id, avg in sorted(averages.items())]
