# ABOUTME: Defines canonical data structures shared by the grade aggregation engine.
# ABOUTME: Centralizes score entry, grade record, and cohort report definitions.

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple, Union


class ScoreCategory(str, Enum):
    """Recognized score kinds; anything else is dropped from every computation."""

    EXAM = "exam"
    QUIZ = "quiz"
    HOMEWORK = "homework"

    @classmethod
    def parse(cls, value: Any) -> Optional["ScoreCategory"]:
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True)
class ScoreEntry:
    """One typed score inside a grade record."""

    type: ScoreCategory
    score: float

    @classmethod
    def from_raw(cls, raw: Any) -> Optional["ScoreEntry"]:
        """
        Build an entry from a raw ``{"type": ..., "score": ...}`` mapping.

        Returns None for unrecognized types and non-numeric scores.
        """

        if not isinstance(raw, Mapping):
            return None
        category = ScoreCategory.parse(raw.get("type"))
        if category is None:
            return None
        score = _coerce_score(raw.get("score"))
        if score is None:
            return None
        return cls(type=category, score=score)


@dataclass(frozen=True)
class GradeRecord:
    """One learner's scores in one class, as stored in the grades collection."""

    learner_id: int
    class_id: int
    scores: Tuple[ScoreEntry, ...] = ()

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "GradeRecord":
        raw_scores = doc.get("scores")
        if raw_scores is None:
            raw_scores = []
        entries = []
        for raw in raw_scores:
            entry = ScoreEntry.from_raw(raw)
            if entry is not None:
                entries.append(entry)
        return cls(
            learner_id=int(doc["learner_id"]),
            class_id=int(doc["class_id"]),
            scores=tuple(entries),
        )


@dataclass(frozen=True)
class ScopeFilter:
    """Optional learner/class restriction applied by a record source."""

    learner_id: Optional[int] = None
    class_id: Optional[int] = None
    learner_ids: Optional[FrozenSet[int]] = None

    def matches(self, record: GradeRecord) -> bool:
        if self.learner_id is not None and record.learner_id != self.learner_id:
            return False
        if self.learner_ids is not None and record.learner_id not in self.learner_ids:
            return False
        if self.class_id is not None and record.class_id != self.class_id:
            return False
        return True

    def to_query(self) -> Dict[str, Any]:
        query: Dict[str, Any] = {}
        learner_cond: Dict[str, Any] = {}
        if self.learner_id is not None:
            learner_cond["$eq"] = int(self.learner_id)
        if self.learner_ids is not None:
            learner_cond["$in"] = sorted(int(value) for value in self.learner_ids)
        if list(learner_cond) == ["$eq"]:
            query["learner_id"] = learner_cond["$eq"]
        elif learner_cond:
            query["learner_id"] = learner_cond
        if self.class_id is not None:
            query["class_id"] = int(self.class_id)
        return query


@dataclass
class CategoryGroup:
    """Scores of one grouping key bucketed by category."""

    exam: list = field(default_factory=list)
    quiz: list = field(default_factory=list)
    homework: list = field(default_factory=list)

    def add(self, entry: ScoreEntry) -> None:
        getattr(self, entry.type.value).append(entry.score)

    def bucket(self, category: ScoreCategory) -> list:
        return getattr(self, category.value)


GroupKey = Union[int, Tuple[int, ...]]


@dataclass(frozen=True)
class WeightedAverage:
    key: GroupKey
    avg: Optional[float]


@dataclass(frozen=True)
class ClassAverage:
    class_id: int
    avg: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return {"class_id": self.class_id, "avg": self.avg}


@dataclass(frozen=True)
class CohortReport:
    """Pass-rate statistics for one cohort."""

    total_learners: int
    learners_above_percentage: int
    percentage_above_percentage: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalLearners": self.total_learners,
            "learnersAbovePercentage": self.learners_above_percentage,
            "percentageAbovePercentage": self.percentage_above_percentage,
        }


def _coerce_score(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        score = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(score):
        return None
    return score
