"""Tag negotiation and the immutable tag-name -> (tag id, fields) tables."""

import logging
import threading
from types import MappingProxyType
from typing import Protocol

from corelight_tsv import schema
from corelight_tsv.errors import InvalidTagError, TagNegotiationError

logger = logging.getLogger(__name__)

# Characters the ingest transport refuses in tag names.
FORBIDDEN_TAG_CHARS = frozenset("!@#$%^&*()=+<>,.:;`\"'{[}]|\\ \t\n\r")


def validate_tag_name(name: str) -> None:
    """Raise InvalidTagError if *name* cannot be used as a tag."""
    if not name:
        raise InvalidTagError("empty tag name")
    bad = sorted(set(name) & FORBIDDEN_TAG_CHARS)
    if bad:
        raise InvalidTagError(f"invalid characters {''.join(bad)!r} in tag name {name!r}")


class TagAllocator(Protocol):
    """Resolves a tag name to a numeric tag id. Must be idempotent per name."""

    def negotiate(self, name: str) -> int:
        ...


class InMemoryTagAllocator:
    """Process-local allocator handing out sequential ids.

    Repeated names get the id they were first given. With *max_tags* set,
    negotiating a new name past the cap raises TagNegotiationError.
    """

    def __init__(self, start: int = 1, max_tags: int | None = None):
        self._lock = threading.Lock()
        self._next = start
        self._max_tags = max_tags
        self._tags: dict[str, int] = {}
        self._names: dict[int, str] = {}

    def negotiate(self, name: str) -> int:
        validate_tag_name(name)
        with self._lock:
            tag = self._tags.get(name)
            if tag is not None:
                return tag
            if self._max_tags is not None and len(self._tags) >= self._max_tags:
                raise TagNegotiationError(
                    f"tag space exhausted ({self._max_tags} tags), cannot allocate {name!r}"
                )
            tag = self._next
            self._next += 1
            self._tags[name] = tag
            self._names[tag] = name
            return tag

    def lookup(self, tag: int) -> str | None:
        """Reverse lookup: tag id -> tag name."""
        with self._lock:
            return self._names.get(tag)

    def tags(self) -> dict[str, int]:
        with self._lock:
            return dict(self._tags)


class TagRegistry:
    """Built once per prefix; read-only afterwards, safe to share across threads."""

    def __init__(self, prefix: str, tag_ids: dict[str, int], tag_fields: dict[str, tuple[str, ...]]):
        self._prefix = prefix
        self._tag_ids = MappingProxyType(dict(tag_ids))
        self._tag_fields = MappingProxyType(dict(tag_fields))

    @classmethod
    def initialize(cls, prefix: str, allocator: TagAllocator) -> "TagRegistry":
        """Negotiate a tag for every known category.

        Any failure aborts the whole build; no partial registry is returned.
        """
        tag_ids: dict[str, int] = {}
        tag_fields: dict[str, tuple[str, ...]] = {}
        for category, fields in schema.SCHEMAS.items():
            tag_name = prefix + category
            validate_tag_name(tag_name)
            try:
                tag_ids[tag_name] = allocator.negotiate(tag_name)
            except TagNegotiationError:
                raise
            except Exception as e:
                raise TagNegotiationError(f"failed to negotiate tag {tag_name!r}: {e}") from e
            tag_fields[tag_name] = fields

        logger.info("Negotiated %d tags with prefix %r", len(tag_ids), prefix)
        return cls(prefix, tag_ids, tag_fields)

    @property
    def prefix(self) -> str:
        return self._prefix

    def tag_id_for(self, tag_name: str) -> tuple[int, bool]:
        tag = self._tag_ids.get(tag_name)
        if tag is None:
            return 0, False
        return tag, True

    def fields_for_tag_name(self, tag_name: str) -> tuple[tuple[str, ...], bool]:
        fields = self._tag_fields.get(tag_name)
        if fields is None:
            return (), False
        return fields, True

    def tag_names(self) -> list[str]:
        return list(self._tag_ids)

    def __len__(self) -> int:
        return len(self._tag_ids)
