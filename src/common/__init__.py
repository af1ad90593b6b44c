# ABOUTME: Makes the shared common package importable across the grade engine.
# ABOUTME: Re-exports schema types and error classes for convenience.

from .errors import ConfigError, GradeSourceError, SourceUnavailable
from .schemas import (
    CategoryGroup,
    ClassAverage,
    CohortReport,
    GradeRecord,
    ScopeFilter,
    ScoreCategory,
    ScoreEntry,
    WeightedAverage,
)

__all__ = [
    "CategoryGroup",
    "ClassAverage",
    "CohortReport",
    "ConfigError",
    "GradeRecord",
    "GradeSourceError",
    "ScopeFilter",
    "ScoreCategory",
    "ScoreEntry",
    "SourceUnavailable",
    "WeightedAverage",
]
