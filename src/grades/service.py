# ABOUTME: Caller-facing grade metrics: per-class averages for a learner and cohort pass rates.
# ABOUTME: Fetches from a record source, then runs grouping, weighting, and cohort statistics.

from __future__ import annotations

import logging
from typing import List, Optional, Set, Tuple

from src.common.schemas import ClassAverage, CohortReport, GradeRecord, ScopeFilter, WeightedAverage

from .cohort import (
    CLASS_SCOPE,
    DEFAULT_THRESHOLD,
    ClassScope,
    learner_averages,
    summarize_cohort,
    to_weighted_averages,
)
from .grouping import CLASS_KEY, group_scores
from .sources import GradeRecordSource
from .weighting import MISSING_CATEGORY_POLICY, MissingCategoryPolicy, weighted_average

logger = logging.getLogger(__name__)


class GradeMetricsService:
    """
    Computes weighted averages and cohort statistics over a grade record source.

    Source errors propagate unchanged; nothing here retries or substitutes
    empty results.
    """

    def __init__(
        self,
        source: GradeRecordSource,
        policy: MissingCategoryPolicy = MISSING_CATEGORY_POLICY,
        class_scope: ClassScope = CLASS_SCOPE,
    ):
        self.source = source
        self.policy = policy
        self.class_scope = class_scope

    def weighted_average_per_class(self, learner_id: int) -> List[ClassAverage]:
        records = self.source.fetch_all(ScopeFilter(learner_id=int(learner_id)))
        groups = group_scores(records, by=CLASS_KEY)
        return [
            ClassAverage(class_id=class_id, avg=weighted_average(group, self.policy))
            for class_id, group in sorted(groups.items())
        ]

    def weighted_average_per_learner(self, class_filter: Optional[int] = None) -> List[WeightedAverage]:
        records, learner_ids = self._scoped_records(class_filter)
        averages = learner_averages(records, self.policy)
        return to_weighted_averages({learner_id: averages.get(learner_id) for learner_id in learner_ids})

    def cohort_report(self, threshold: float = DEFAULT_THRESHOLD, class_filter: Optional[int] = None) -> CohortReport:
        records, learner_ids = self._scoped_records(class_filter)
        report = summarize_cohort(learner_averages(records, self.policy), learner_ids, threshold)
        logger.info(
            "[grades] Cohort class=%s threshold=%s: %d/%d learners",
            "all" if class_filter is None else class_filter,
            threshold,
            report.learners_above_percentage,
            report.total_learners,
        )
        return report

    def _scoped_records(self, class_filter: Optional[int]) -> Tuple[List[GradeRecord], Set[int]]:
        """Records feeding the averages plus the learner ids that make up the cohort."""

        if class_filter is None:
            return self.source.fetch_all(), self.source.distinct_learner_ids()

        class_scope = ScopeFilter(class_id=int(class_filter))
        learner_ids = self.source.distinct_learner_ids(class_scope)
        if self.class_scope is ClassScope.SCORE_CONTRIBUTIONS:
            return self.source.fetch_all(class_scope), learner_ids
        if not learner_ids:
            return [], learner_ids
        records = self.source.fetch_all(ScopeFilter(learner_ids=frozenset(learner_ids)))
        return records, learner_ids
