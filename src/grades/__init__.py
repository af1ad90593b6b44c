# ABOUTME: Groups the weighted grade aggregation engine and its record sources.
# ABOUTME: Re-exports grouping, weighting, cohort statistics, and the metrics service.

from .cohort import CLASS_SCOPE, DEFAULT_THRESHOLD, ClassScope, learner_averages, summarize_cohort
from .grouping import group_scores, scores_frame
from .service import GradeMetricsService
from .sources import FileGradeSource, GradeRecordSource, InMemoryGradeSource, MongoGradeSource
from .weighting import CATEGORY_WEIGHTS, MISSING_CATEGORY_POLICY, MissingCategoryPolicy, weighted_average

__all__ = [
    "CATEGORY_WEIGHTS",
    "CLASS_SCOPE",
    "ClassScope",
    "DEFAULT_THRESHOLD",
    "FileGradeSource",
    "GradeMetricsService",
    "GradeRecordSource",
    "InMemoryGradeSource",
    "MISSING_CATEGORY_POLICY",
    "MissingCategoryPolicy",
    "MongoGradeSource",
    "group_scores",
    "learner_averages",
    "scores_frame",
    "summarize_cohort",
    "weighted_average",
]
