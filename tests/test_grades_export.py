# ABOUTME: Tests export of weighted averages and cohort statistics to report artifacts.
# ABOUTME: Ensures parquet tables and the JSON summary agree with the metrics service.

import json

import pandas as pd
import pytest

from src.grades.export import export_grade_reports
from src.grades.service import GradeMetricsService
from src.grades.sources import InMemoryGradeSource


def test_export_grade_reports_writes_all_artifacts(tmp_path, sample_records):
    service = GradeMetricsService(InMemoryGradeSource(sample_records))

    paths = export_grade_reports(service, tmp_path / "reports")

    assert set(paths) == {"learner_averages", "class_averages", "scores", "cohort_stats"}
    for path in paths.values():
        assert path.exists()

    learners = pd.read_parquet(paths["learner_averages"])
    assert learners["learner_id"].tolist() == [1, 2, 3, 4]
    assert pd.isna(learners.loc[learners["learner_id"] == 4, "avg"]).all()

    classes = pd.read_parquet(paths["class_averages"])
    row = classes[(classes["learner_id"] == 1) & (classes["class_id"] == 339)].iloc[0]
    assert row["avg"] == pytest.approx(92 * 0.5 + 81 * 0.3 + 91.5 * 0.2)
    assert len(classes) == 5

    scores = pd.read_parquet(paths["scores"])
    assert len(scores) == 12

    stats = json.loads(paths["cohort_stats"].read_text(encoding="utf-8"))
    assert stats["threshold"] == 70
    assert stats["overall"] == {"totalLearners": 4, "learnersAbovePercentage": 2, "percentageAbovePercentage": 50.0}
    by_class = {entry["class_id"]: entry for entry in stats["classes"]}
    assert sorted(by_class) == [108, 220, 339]
    assert by_class[108]["learnersAbovePercentage"] == 2
    assert by_class[220] == {
        "class_id": 220,
        "totalLearners": 1,
        "learnersAbovePercentage": 0,
        "percentageAbovePercentage": 0.0,
    }


def test_export_with_empty_source_still_writes_zero_report(tmp_path):
    service = GradeMetricsService(InMemoryGradeSource([]))

    paths = export_grade_reports(service, tmp_path)

    stats = json.loads(paths["cohort_stats"].read_text(encoding="utf-8"))
    assert stats["overall"] == {"totalLearners": 0, "learnersAbovePercentage": 0, "percentageAbovePercentage": 0}
    assert stats["classes"] == []
    assert pd.read_parquet(paths["learner_averages"]).empty


def test_export_of_record_subset_is_self_consistent(tmp_path, sample_records):
    service = GradeMetricsService(InMemoryGradeSource(sample_records))
    learner_2 = [record for record in sample_records if record.learner_id == 2]

    paths = export_grade_reports(service, tmp_path, records=learner_2)

    assert pd.read_parquet(paths["learner_averages"])["learner_id"].tolist() == [2]
    assert pd.read_parquet(paths["class_averages"])["learner_id"].tolist() == [2]
    assert set(pd.read_parquet(paths["scores"])["learner_id"]) == {2}
    stats = json.loads(paths["cohort_stats"].read_text(encoding="utf-8"))
    assert stats["overall"] == {"totalLearners": 1, "learnersAbovePercentage": 0, "percentageAbovePercentage": 0.0}
    assert [entry["class_id"] for entry in stats["classes"]] == [339]
    assert stats["classes"][0]["totalLearners"] == 1


def test_export_queries_the_source_once(tmp_path, sample_records):
    class CountingSource(InMemoryGradeSource):
        calls = 0

        def fetch_all(self, scope=None):
            CountingSource.calls += 1
            return super().fetch_all(scope)

        def distinct_learner_ids(self, scope=None):
            CountingSource.calls += 1
            return super().distinct_learner_ids(scope)

    export_grade_reports(GradeMetricsService(CountingSource(sample_records)), tmp_path)

    assert CountingSource.calls == 1
