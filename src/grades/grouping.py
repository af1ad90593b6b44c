# ABOUTME: Buckets grade record scores by category under a learner and/or class key.
# ABOUTME: Also flattens records into one-row-per-score frames for export.

from __future__ import annotations

from typing import Dict, Iterable, Sequence, Tuple, Union

import pandas as pd

from src.common.schemas import CategoryGroup, GradeRecord, GroupKey

KeyFields = Union[str, Sequence[str]]

LEARNER_KEY = "learner_id"
CLASS_KEY = "class_id"
LEARNER_CLASS_KEY = (LEARNER_KEY, CLASS_KEY)
_VALID_FIELDS = {LEARNER_KEY, CLASS_KEY}

SCORE_FRAME_COLUMNS = ["learner_id", "class_id", "type", "score"]


def group_scores(records: Iterable[GradeRecord], by: KeyFields = LEARNER_KEY) -> Dict[GroupKey, CategoryGroup]:
    """
    Fold records into one CategoryGroup per grouping key.

    ``by`` is a single field name (keys are ints) or a sequence of field names
    (keys are tuples in that order). Every record registers its key, so a
    record with no recognized entries still yields an empty group.
    """

    fields = _key_fields(by)
    groups: Dict[GroupKey, CategoryGroup] = {}
    for record in records:
        key = _record_key(record, fields, single=isinstance(by, str))
        group = groups.get(key)
        if group is None:
            group = CategoryGroup()
            groups[key] = group
        for entry in record.scores:
            group.add(entry)
    return groups


def scores_frame(records: Iterable[GradeRecord]) -> pd.DataFrame:
    """Explode records into a frame with one row per recognized score entry."""

    rows = []
    for record in records:
        for entry in record.scores:
            rows.append(
                {
                    "learner_id": record.learner_id,
                    "class_id": record.class_id,
                    "type": entry.type.value,
                    "score": entry.score,
                }
            )
    if not rows:
        return pd.DataFrame(columns=SCORE_FRAME_COLUMNS)
    return pd.DataFrame(rows, columns=SCORE_FRAME_COLUMNS)


def _key_fields(by: KeyFields) -> Tuple[str, ...]:
    fields = (by,) if isinstance(by, str) else tuple(by)
    if not fields:
        raise ValueError("Grouping needs at least one key field.")
    unknown = [name for name in fields if name not in _VALID_FIELDS]
    if unknown:
        raise ValueError(f"Unsupported grouping field(s) {unknown}. Expected any of: {sorted(_VALID_FIELDS)}.")
    return fields


def _record_key(record: GradeRecord, fields: Tuple[str, ...], single: bool) -> GroupKey:
    values = tuple(int(getattr(record, name)) for name in fields)
    if single:
        return values[0]
    return values
