# ABOUTME: Shared fixtures building synthetic grade records for the test suite.
# ABOUTME: Mirrors the bundled sample export so CLI and service tests agree.

from __future__ import annotations

from typing import List

import pytest

from src.common.schemas import GradeRecord


def _make_record(learner_id: int, class_id: int, **scores) -> GradeRecord:
    entries = [{"type": kind, "score": value} for kind, values in scores.items() for value in values]
    return GradeRecord.from_document({"learner_id": learner_id, "class_id": class_id, "scores": entries})


@pytest.fixture()
def make_record():
    """Builder taking ``exam=[...]``, ``quiz=[...]`` style keyword lists."""
    return _make_record


@pytest.fixture()
def sample_records() -> List[GradeRecord]:
    """Mirrors data/sample/grades.json."""
    return [
        _make_record(1, 339, exam=[92], quiz=[81], homework=[88, 95]),
        _make_record(1, 108, exam=[64], quiz=[70], homework=[71]),
        _make_record(2, 339, exam=[55], quiz=[60], homework=[75]),
        _make_record(3, 108, exam=[100], quiz=[100], participation=[10]),
        GradeRecord(learner_id=4, class_id=220, scores=()),
    ]
