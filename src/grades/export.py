# ABOUTME: Exports weighted averages and cohort statistics as report artifacts.
# ABOUTME: Writes parquet tables and a JSON summary consumed by dashboards and the CLI.

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pandas as pd

from src.common.schemas import GradeRecord

from .cohort import DEFAULT_THRESHOLD
from .grouping import LEARNER_CLASS_KEY, group_scores, scores_frame
from .service import GradeMetricsService
from .sources import InMemoryGradeSource
from .weighting import weighted_average

logger = logging.getLogger(__name__)


def export_grade_reports(
    service: GradeMetricsService,
    output_dir: Path,
    threshold: float = DEFAULT_THRESHOLD,
    records: Optional[Iterable[GradeRecord]] = None,
) -> Dict[str, Path]:
    """
    Export per-learner and per-class weighted averages plus cohort statistics.

    Generates artifacts:
    1. learner_averages.parquet - one row per learner (learner_id, avg)
    2. class_averages.parquet - one row per learner and class (learner_id, class_id, avg)
    3. scores.parquet - one row per recognized score entry (learner_id, class_id, type, score)
    4. cohort_stats.json - overall cohort report plus one report per class

    Args:
        service: Metrics service bound to the record source
        output_dir: Directory to write output files
        threshold: Pass threshold for the cohort reports
        records: Records to export instead of the full source; every artifact is computed from them
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    records = list(records) if records is not None else service.source.fetch_all()
    logger.info("[grades-export] Exporting %d grade records to %s", len(records), output_dir)
    # Every artifact reads the same snapshot; the source is queried at most once.
    snapshot = GradeMetricsService(InMemoryGradeSource(records), policy=service.policy, class_scope=service.class_scope)

    learner_df = pd.DataFrame(
        [{"learner_id": item.key, "avg": item.avg} for item in snapshot.weighted_average_per_learner()],
        columns=["learner_id", "avg"],
    )
    class_df = build_class_average_frame(records, service)

    learner_path = output_dir / "learner_averages.parquet"
    class_path = output_dir / "class_averages.parquet"
    learner_df.to_parquet(learner_path, index=False)
    class_df.to_parquet(class_path, index=False)
    scores_path = output_dir / "scores.parquet"
    scores_frame(records).to_parquet(scores_path, index=False)

    class_ids = sorted({record.class_id for record in records})
    stats = {
        "threshold": threshold,
        "overall": snapshot.cohort_report(threshold).to_dict(),
        "classes": [
            {"class_id": class_id, **snapshot.cohort_report(threshold, class_filter=class_id).to_dict()}
            for class_id in class_ids
        ],
    }
    stats_path = output_dir / "cohort_stats.json"
    stats_path.write_text(json.dumps(stats, indent=2), encoding="utf-8")

    logger.info("[grades-export] Wrote %d learners, %d learner-class rows to %s", len(learner_df), len(class_df), output_dir)
    return {
        "learner_averages": learner_path,
        "class_averages": class_path,
        "scores": scores_path,
        "cohort_stats": stats_path,
    }


def build_class_average_frame(records: Iterable[GradeRecord], service: GradeMetricsService) -> pd.DataFrame:
    groups = group_scores(records, by=LEARNER_CLASS_KEY)
    rows: List[Dict] = [
        {"learner_id": learner_id, "class_id": class_id, "avg": weighted_average(group, service.policy)}
        for (learner_id, class_id), group in sorted(groups.items())
    ]
    return pd.DataFrame(rows, columns=["learner_id", "class_id", "avg"])
