# ABOUTME: Score record sources that hand grade records to the aggregation core.
# ABOUTME: Covers in-memory lists, exported JSON/parquet files, and a MongoDB collection.

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Protocol, Set

import numpy as np
import pandas as pd
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from src.common.errors import SourceUnavailable
from src.common.schemas import GradeRecord, ScopeFilter

logger = logging.getLogger(__name__)

GRADE_PROJECTION = {"_id": 0, "learner_id": 1, "class_id": 1, "scores": 1}
JSON_SUFFIXES = {".json"}
JSON_LINES_SUFFIXES = {".jsonl", ".ndjson"}
PARQUET_SUFFIXES = {".parquet", ".pq"}


class GradeRecordSource(Protocol):
    def fetch_all(self, scope: Optional[ScopeFilter] = None) -> List[GradeRecord]:
        ...

    def distinct_learner_ids(self, scope: Optional[ScopeFilter] = None) -> Set[int]:
        ...


class InMemoryGradeSource:
    """Serves records held in a list; filters in process."""

    def __init__(self, records: Iterable[GradeRecord]):
        self._records = tuple(records)

    def fetch_all(self, scope: Optional[ScopeFilter] = None) -> List[GradeRecord]:
        if scope is None:
            return list(self._records)
        return [record for record in self._records if scope.matches(record)]

    def distinct_learner_ids(self, scope: Optional[ScopeFilter] = None) -> Set[int]:
        return {record.learner_id for record in self.fetch_all(scope)}


class FileGradeSource(InMemoryGradeSource):
    """
    Serves records from an export of the grades collection.

    Accepts a JSON array (``mongoexport --jsonArray``), JSON lines, or parquet.
    The file is read once, on construction.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        super().__init__(load_grade_records(self.path))
        logger.info("[grades] Loaded %d grade records from %s", len(self._records), self.path)


class MongoGradeSource:
    """Pushes scope filters and projections down to a grades collection."""

    def __init__(self, collection: Collection):
        self.collection = collection

    def fetch_all(self, scope: Optional[ScopeFilter] = None) -> List[GradeRecord]:
        query = scope.to_query() if scope is not None else {}
        try:
            docs = list(self.collection.find(query, GRADE_PROJECTION))
        except PyMongoError as exc:
            raise SourceUnavailable(f"Failed to fetch grade records for {query}: {exc}") from exc
        logger.debug("[grades] Fetched %d grade documents for %s", len(docs), query)
        return [_record_from_document(doc, f"document {doc!r}") for doc in docs]

    def distinct_learner_ids(self, scope: Optional[ScopeFilter] = None) -> Set[int]:
        query = scope.to_query() if scope is not None else {}
        try:
            values = self.collection.distinct("learner_id", query)
        except PyMongoError as exc:
            raise SourceUnavailable(f"Failed to list learner ids for {query}: {exc}") from exc
        return {int(value) for value in values}


def load_grade_records(path: Path) -> List[GradeRecord]:
    path = Path(path)
    if not path.exists():
        raise SourceUnavailable(f"Grade export not found at {path}")

    suffix = path.suffix.lower()
    try:
        if suffix in PARQUET_SUFFIXES:
            df = pd.read_parquet(path)
        elif suffix in JSON_LINES_SUFFIXES:
            df = pd.read_json(path, lines=True, dtype=False)
        elif suffix in JSON_SUFFIXES:
            df = pd.read_json(path, dtype=False)
        else:
            raise SourceUnavailable(
                f"Unsupported grade export '{path.name}'. Expected one of: "
                f"{sorted(JSON_SUFFIXES | JSON_LINES_SUFFIXES | PARQUET_SUFFIXES)}."
            )
    except (OSError, ValueError) as exc:
        raise SourceUnavailable(f"Could not read grade export {path}: {exc}") from exc

    if df.empty:
        return []
    missing = {"learner_id", "class_id"} - set(df.columns)
    if missing:
        raise SourceUnavailable(f"Grade export {path} is missing column(s) {sorted(missing)}")
    if "scores" not in df.columns:
        df["scores"] = None

    records = []
    for row, (learner_id, class_id, scores) in enumerate(zip(df["learner_id"], df["class_id"], df["scores"])):
        doc = {"learner_id": learner_id, "class_id": class_id, "scores": _normalize_scores(scores)}
        records.append(_record_from_document(doc, f"row {row} of {path}"))
    return records


def _record_from_document(doc: Mapping[str, Any], where: str) -> GradeRecord:
    try:
        return GradeRecord.from_document(doc)
    except (KeyError, TypeError, ValueError) as exc:
        raise SourceUnavailable(f"Malformed grade record at {where}: {exc!r}") from exc


def _normalize_scores(value: Any) -> List[Mapping[str, Any]]:
    if value is None:
        return []
    # Parquet round-trips nested lists as numpy arrays.
    if isinstance(value, np.ndarray):
        value = value.tolist()
    if isinstance(value, list):
        return [entry for entry in value if isinstance(entry, Mapping)]
    return []
