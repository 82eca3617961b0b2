"""Corelight/Zeek JSON to TSV transcoder for log-ingestion pipelines."""

from corelight_tsv.config import CorelightConfig, load_config, load_yaml_config
from corelight_tsv.errors import (
    ConfigError,
    CorelightError,
    InvalidTagError,
    TagNegotiationError,
    TimestampError,
)
from corelight_tsv.models import Record, Timestamp
from corelight_tsv.tags import InMemoryTagAllocator, TagAllocator, TagRegistry
from corelight_tsv.transcoder import Transcoder

__all__ = [
    "ConfigError",
    "CorelightConfig",
    "CorelightError",
    "InMemoryTagAllocator",
    "InvalidTagError",
    "Record",
    "TagAllocator",
    "TagNegotiationError",
    "TagRegistry",
    "Timestamp",
    "TimestampError",
    "Transcoder",
    "load_config",
    "load_yaml_config",
]
