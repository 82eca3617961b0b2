"""Tests for tag validation, the in-memory allocator, and TagRegistry."""

import threading

import pytest

from corelight_tsv import schema
from corelight_tsv.errors import InvalidTagError, TagNegotiationError
from corelight_tsv.tags import InMemoryTagAllocator, TagRegistry, validate_tag_name


class RecordingAllocator:
    def __init__(self):
        self.calls: list[str] = []

    def negotiate(self, name: str) -> int:
        self.calls.append(name)
        return 100 + len(self.calls)


class TestValidateTagName:
    @pytest.mark.parametrize("name", ["zeek", "zeekconn", "zeeksmb_files", "corelight-dns", "Z3"])
    def test_valid(self, name):
        validate_tag_name(name)

    @pytest.mark.parametrize("name", ["", "zeek conn", "zeek.conn", "a:b", "tab\there", "x{y}", "quote'"])
    def test_invalid(self, name):
        with pytest.raises(InvalidTagError):
            validate_tag_name(name)

    def test_invalid_is_negotiation_error(self):
        with pytest.raises(TagNegotiationError):
            validate_tag_name("bad name")


class TestInMemoryTagAllocator:
    def test_sequential_ids(self):
        alloc = InMemoryTagAllocator(start=10)
        assert alloc.negotiate("a") == 10
        assert alloc.negotiate("b") == 11

    def test_idempotent(self):
        alloc = InMemoryTagAllocator()
        first = alloc.negotiate("zeekconn")
        assert alloc.negotiate("zeekconn") == first
        assert len(alloc.tags()) == 1

    def test_lookup(self):
        alloc = InMemoryTagAllocator()
        tag = alloc.negotiate("zeekdns")
        assert alloc.lookup(tag) == "zeekdns"
        assert alloc.lookup(999) is None

    def test_exhaustion(self):
        alloc = InMemoryTagAllocator(max_tags=2)
        alloc.negotiate("a")
        alloc.negotiate("b")
        assert alloc.negotiate("a") == 1
        with pytest.raises(TagNegotiationError):
            alloc.negotiate("c")

    def test_rejects_invalid_names(self):
        with pytest.raises(InvalidTagError):
            InMemoryTagAllocator().negotiate("bad tag")

    def test_concurrent_negotiation_is_consistent(self):
        alloc = InMemoryTagAllocator()
        results: list[int] = []
        lock = threading.Lock()

        def worker():
            tag = alloc.negotiate("shared")
            with lock:
                results.append(tag)

        threads = [threading.Thread(target=worker) for _ in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(set(results)) == 1
        assert alloc.tags() == {"shared": results[0]}


class TestTagRegistry:
    def test_negotiates_every_category(self):
        alloc = RecordingAllocator()
        registry = TagRegistry.initialize("zeek", alloc)

        assert sorted(alloc.calls) == sorted("zeek" + c for c in schema.categories())
        assert len(registry) == len(schema.SCHEMAS)
        assert registry.prefix == "zeek"

    def test_lookups(self):
        alloc = InMemoryTagAllocator()
        registry = TagRegistry.initialize("zeek", alloc)

        tag, found = registry.tag_id_for("zeekconn")
        assert found is True
        assert tag == alloc.tags()["zeekconn"]

        fields, found = registry.fields_for_tag_name("zeekconn")
        assert found is True
        assert fields == schema.SCHEMAS["conn"]

    def test_unknown_tag_name(self):
        registry = TagRegistry.initialize("zeek", InMemoryTagAllocator())
        assert registry.tag_id_for("zeeknope") == (0, False)
        assert registry.fields_for_tag_name("conn") == ((), False)

    def test_every_tag_has_fields(self):
        registry = TagRegistry.initialize("cl", InMemoryTagAllocator())
        for name in registry.tag_names():
            assert registry.fields_for_tag_name(name)[1] is True

    def test_allocator_exception_wrapped(self):
        class Broken:
            def negotiate(self, name):
                raise ConnectionError("refused")

        with pytest.raises(TagNegotiationError) as exc:
            TagRegistry.initialize("zeek", Broken())
        assert isinstance(exc.value.__cause__, ConnectionError)

    def test_invalid_prefix_rejected_before_negotiation(self):
        alloc = RecordingAllocator()
        with pytest.raises(InvalidTagError):
            TagRegistry.initialize("ze ek", alloc)
        assert alloc.calls == []
