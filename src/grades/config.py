# ABOUTME: Loads grade engine settings from YAML with environment overrides for the store.
# ABOUTME: Builds the configured record source and metrics service.

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from src.common.errors import ConfigError

from .cohort import CLASS_SCOPE, DEFAULT_THRESHOLD, ClassScope
from .mongo import get_grades_collection
from .service import GradeMetricsService
from .sources import FileGradeSource, GradeRecordSource, MongoGradeSource
from .weighting import MISSING_CATEGORY_POLICY, MissingCategoryPolicy

DEFAULT_CONFIG_PATH = Path("configs/grades_local.yaml")
SOURCE_KINDS = ("file", "mongo")


@dataclass(frozen=True)
class MongoConfig:
    uri: str = "mongodb://localhost:27017"
    database: str = "school"
    collection: str = "grades"
    selection_timeout_ms: int = 5000
    tls_ca_file: Optional[str] = None


@dataclass(frozen=True)
class SourceConfig:
    kind: str = "file"
    path: Optional[Path] = None


@dataclass(frozen=True)
class MetricsConfig:
    threshold: float = DEFAULT_THRESHOLD
    class_scope: ClassScope = CLASS_SCOPE
    missing_category: MissingCategoryPolicy = MISSING_CATEGORY_POLICY


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class GradesConfig:
    source: SourceConfig = field(default_factory=SourceConfig)
    mongo: MongoConfig = field(default_factory=MongoConfig)
    metrics: MetricsConfig = field(default_factory=MetricsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(config_path: Path, env: Optional[Mapping[str, str]] = None) -> GradesConfig:
    """Read a YAML config; ``MONGODB_*`` variables override the mongo section."""

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    with open(config_path) as f:
        try:
            cfg = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Could not parse config {config_path}: {exc}") from exc
    if not isinstance(cfg, Mapping):
        raise ConfigError(f"Config {config_path} must be a YAML mapping.")
    return parse_config(cfg, base_dir=config_path.parent, env=os.environ if env is None else env)


def parse_config(
    cfg: Mapping[str, Any],
    base_dir: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> GradesConfig:
    env = env or {}
    source_cfg = cfg.get("source") or {}
    mongo_cfg = cfg.get("mongo") or {}
    metrics_cfg = cfg.get("metrics") or {}
    logging_cfg = cfg.get("logging") or {}

    kind = str(source_cfg.get("kind", "file")).strip().lower()
    if kind not in SOURCE_KINDS:
        raise ConfigError(f"Unsupported source kind '{kind}'. Expected one of: {', '.join(SOURCE_KINDS)}.")
    path = source_cfg.get("path")
    if path is not None:
        path = Path(path)
        # Relative export paths are relative to the config file.
        if not path.is_absolute() and base_dir is not None:
            path = base_dir / path
    if kind == "file" and path is None:
        raise ConfigError("source.path is required when source.kind is 'file'.")

    defaults = MongoConfig()
    mongo = MongoConfig(
        uri=env.get("MONGODB_URI") or mongo_cfg.get("uri", defaults.uri),
        database=env.get("MONGODB_DB") or mongo_cfg.get("database", defaults.database),
        collection=mongo_cfg.get("collection", defaults.collection),
        selection_timeout_ms=_parse_number(
            int,
            env.get("MONGODB_SELECTION_TIMEOUT_MS") or mongo_cfg.get("selection_timeout_ms", defaults.selection_timeout_ms),
            "mongo.selection_timeout_ms",
        ),
        tls_ca_file=env.get("MONGODB_TLS_CA_FILE") or mongo_cfg.get("tls_ca_file"),
    )

    metrics = MetricsConfig(
        threshold=_parse_number(float, metrics_cfg.get("threshold", DEFAULT_THRESHOLD), "metrics.threshold"),
        class_scope=_parse_enum(ClassScope, metrics_cfg.get("class_scope", CLASS_SCOPE.value), "metrics.class_scope"),
        missing_category=_parse_enum(
            MissingCategoryPolicy,
            metrics_cfg.get("missing_category", MISSING_CATEGORY_POLICY.value),
            "metrics.missing_category",
        ),
    )

    return GradesConfig(
        source=SourceConfig(kind=kind, path=path),
        mongo=mongo,
        metrics=metrics,
        logging=LoggingConfig(level=str(logging_cfg.get("level", "INFO")).upper()),
    )


def build_source(config: GradesConfig) -> GradeRecordSource:
    if config.source.kind == "mongo":
        return MongoGradeSource(build_collection(config))
    return FileGradeSource(config.source.path)


def build_collection(config: GradesConfig):
    mongo = config.mongo
    return get_grades_collection(
        mongo.uri,
        mongo.database,
        mongo.collection,
        selection_timeout_ms=mongo.selection_timeout_ms,
        tls_ca_file=mongo.tls_ca_file,
    )


def build_service(config: GradesConfig, source: Optional[GradeRecordSource] = None) -> GradeMetricsService:
    return GradeMetricsService(
        source if source is not None else build_source(config),
        policy=config.metrics.missing_category,
        class_scope=config.metrics.class_scope,
    )


def _parse_number(kind, value: Any, name: str):
    try:
        return kind(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name} must be a number, got '{value}'.") from exc


def _parse_enum(enum_cls, value: Any, name: str):
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError as exc:
        choices = ", ".join(member.value for member in enum_cls)
        raise ConfigError(f"Unsupported {name} '{value}'. Expected one of: {choices}.") from exc
