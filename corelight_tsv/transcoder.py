"""Corelight JSON -> Zeek TSV transcoder.

Takes JSON-formatted Corelight logs and rewrites them as TSV matching the
standard Zeek log types, routing each to ``prefix + _path``. Records that
are not recognizable Corelight JSON pass through untouched; that is the
normal case for foreign records sharing the stream, not an error.
"""

import json
import logging
import math
import re

from corelight_tsv import metrics as m
from corelight_tsv.config import CorelightConfig
from corelight_tsv.errors import TimestampError
from corelight_tsv.metrics import Metrics
from corelight_tsv.models import Record, Timestamp
from corelight_tsv.tags import TagAllocator, TagRegistry
from corelight_tsv.timestamps import format_epoch, parse_rfc3339
from corelight_tsv.values import DecodedValue, render_column

logger = logging.getLogger(__name__)

MISSING = "-"

_LONE_SURROGATE_RE = re.compile("[\ud800-\udfff]")


def _reject_constant(name: str):
    raise ValueError(f"invalid JSON constant {name}")


def _parse_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"number out of range: {text}")
    return value


def _parse_int(text: str) -> int:
    value = int(text)
    try:
        float(value)
    except OverflowError:
        raise ValueError(f"number out of range: {text}") from None
    return value


def decode_object(data: bytes) -> dict | None:
    """Decode the JSON object starting at the first ``{`` in *data*.

    Anything before the brace (syslog headers and similar framing) is
    skipped. Returns None when there is no brace or the rest is not a
    single JSON object.
    """
    idx = data.find(b"{")
    if idx == -1:
        return None
    text = data[idx:].decode("utf-8", errors="replace")
    try:
        obj = json.loads(
            text,
            parse_constant=_reject_constant,
            parse_float=_parse_float,
            parse_int=_parse_int,
        )
    except (ValueError, RecursionError):
        return None
    if not isinstance(obj, dict):
        return None
    return obj


def emit_line(ts: Timestamp, fields: tuple[str, ...], mp: dict) -> bytes:
    """Build one TSV line: epoch timestamp, then one column per field.

    ``fields[0]`` is the timestamp slot and is never looked up in *mp*.
    Missing fields render as ``-``.
    """
    columns = [format_epoch(ts)]
    for name in fields[1:]:
        if name in mp:
            columns.append(render_column(DecodedValue.from_json(mp[name])))
        else:
            columns.append(MISSING)
    # lone \uXXXX surrogate escapes render as U+FFFD
    line = _LONE_SURROGATE_RE.sub("\ufffd", "\t".join(columns))
    return line.encode("utf-8")


class Transcoder:
    def __init__(self, config: CorelightConfig, allocator: TagAllocator, metrics: Metrics | None = None):
        self._metrics = metrics
        self._config = config
        self._registry = TagRegistry.initialize(config.prefix, allocator)

    @property
    def prefix(self) -> str:
        return self._config.prefix

    @property
    def registry(self) -> TagRegistry:
        return self._registry

    def reconfigure(self, config: CorelightConfig, allocator: TagAllocator) -> None:
        """Swap in tables built from *config*; the old ones stay if negotiation fails."""
        registry = TagRegistry.initialize(config.prefix, allocator)
        self._config, self._registry = config, registry
        logger.info("Reconfigured with prefix %r", config.prefix)

    def process_batch(self, records: list[Record]) -> list[Record]:
        """Rewrite recognized records in place and return the same list."""
        if not records:
            return records
        registry = self._registry
        for record in records:
            if record is None:
                continue
            if not record.data:
                self._count(m.EMPTY)
                continue
            tag_name, ts, line = self._convert(registry, record.data)
            if tag_name is None:
                continue
            tag, ok = registry.tag_id_for(tag_name)
            if not ok:
                continue
            # assigned together, only after every step succeeded
            record.tag, record.ts, record.data = tag, ts, line
        return records

    def process_line(self, data: bytes) -> tuple[str | None, Timestamp | None, bytes]:
        """Convert one payload.

        Returns ``(tag_name, ts, line)`` on success, or ``(None, None, data)``
        when the payload should pass through unchanged.
        """
        return self._convert(self._registry, data)

    def _convert(self, registry: TagRegistry, data: bytes) -> tuple[str | None, Timestamp | None, bytes]:
        if b"{" not in data:
            self._count(m.NO_JSON)
            return None, None, data
        mp = decode_object(data)
        if mp is None:
            self._count(m.DECODE_ERROR)
            return None, None, data
        if not mp:
            self._count(m.EMPTY_OBJECT)
            return None, None, data

        path = mp.get("_path")
        ts_text = mp.get("ts")
        if not isinstance(path, str) or not isinstance(ts_text, str):
            self._count(m.MISSING_FIELDS)
            return None, None, data
        try:
            ts = parse_rfc3339(ts_text)
        except TimestampError:
            self._count(m.BAD_TIMESTAMP)
            return None, None, data

        tag_name = registry.prefix + path
        fields, ok = registry.fields_for_tag_name(tag_name)
        if not ok:
            self._count(m.UNKNOWN_CATEGORY)
            return None, None, data

        try:
            line = emit_line(ts, fields, mp)
        except (TypeError, ValueError, OverflowError, RecursionError):
            self._count(m.EMIT_ERROR)
            return None, None, data

        self._count(m.TRANSFORMED, path)
        return tag_name, ts, line

    def _count(self, outcome: str, category: str | None = None) -> None:
        if self._metrics is not None:
            self._metrics.increment(outcome, category)
