import json

import pytest

from corelight_tsv.config import CorelightConfig
from corelight_tsv.metrics import Metrics
from corelight_tsv.models import Record, Timestamp
from corelight_tsv.tags import InMemoryTagAllocator
from corelight_tsv.transcoder import Transcoder

TS_TEXT = "2021-01-01T00:00:00.000000Z"
TS_EPOCH = "1609459200.000000"


def make_payload(path="conn", ts=TS_TEXT, **fields) -> bytes:
    """Build a Corelight-style JSON payload; dotted Zeek names via dict unpacking."""
    body = {"_path": path, "ts": ts}
    body.update(fields)
    return json.dumps(body).encode("utf-8")


@pytest.fixture
def allocator():
    return InMemoryTagAllocator()


@pytest.fixture
def metrics():
    return Metrics()


@pytest.fixture
def transcoder(allocator, metrics):
    return Transcoder(CorelightConfig(), allocator, metrics)


@pytest.fixture
def input_ts():
    return Timestamp(sec=42, nsec=7)


@pytest.fixture
def make_record(input_ts):
    def _make(data: bytes, tag: int = 0) -> Record:
        return Record(tag=tag, ts=input_ts, data=data)
    return _make
