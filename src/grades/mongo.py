# ABOUTME: Builds pymongo clients and collections for the grades store.
# ABOUTME: Also provisions the grades indexes as an explicit, idempotent setup step.

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import certifi
from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from src.common.errors import SourceUnavailable

logger = logging.getLogger(__name__)

GRADE_INDEXES = (
    [("class_id", ASCENDING)],
    [("learner_id", ASCENDING)],
    [("learner_id", ASCENDING), ("class_id", ASCENDING)],
)

_CLIENTS: Dict[Tuple[str, int, Optional[str]], MongoClient] = {}


def _uri_requires_tls(uri: str) -> bool:
    lowered = uri.lower()
    return uri.startswith("mongodb+srv://") or "tls=true" in lowered or "ssl=true" in lowered


def get_mongo_client(uri: str, selection_timeout_ms: int = 5000, tls_ca_file: Optional[str] = None) -> MongoClient:
    """Return a cached MongoClient for ``uri`` and its connection options."""

    cache_key = (uri, selection_timeout_ms, tls_ca_file)
    client = _CLIENTS.get(cache_key)
    if client is None:
        client_kwargs: Dict[str, Any] = {"serverSelectionTimeoutMS": selection_timeout_ms}
        if tls_ca_file:
            client_kwargs["tlsCAFile"] = tls_ca_file
        elif _uri_requires_tls(uri):
            client_kwargs["tlsCAFile"] = certifi.where()
        try:
            client = MongoClient(uri, **client_kwargs)
        except PyMongoError as exc:
            raise SourceUnavailable(f"Could not configure Mongo client: {exc}") from exc
        _CLIENTS[cache_key] = client
    return client


def get_grades_collection(
    uri: str,
    database: str,
    collection: str,
    selection_timeout_ms: int = 5000,
    tls_ca_file: Optional[str] = None,
) -> Collection:
    client = get_mongo_client(uri, selection_timeout_ms=selection_timeout_ms, tls_ca_file=tls_ca_file)
    return client[database][collection]


def ensure_grade_indexes(collection: Collection) -> list:
    """
    Create the class, learner and learner+class indexes on ``collection``.

    Safe to call repeatedly; Mongo returns the existing index name when the
    specification already exists.
    """

    names = []
    try:
        for keys in GRADE_INDEXES:
            names.append(collection.create_index(keys))
    except PyMongoError as exc:
        raise SourceUnavailable(f"Could not create grade indexes: {exc}") from exc
    logger.info("[grades] Ensured indexes %s", ", ".join(names))
    return names
