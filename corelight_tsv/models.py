"""Record and timestamp models shared by the transcoder and its callers."""

import time
from dataclasses import dataclass

_NANOS_PER_SECOND = 1_000_000_000


@dataclass(frozen=True, order=True)
class Timestamp:
    """Unix seconds plus nanoseconds, kept exact (no float rounding)."""

    sec: int = 0
    nsec: int = 0

    def unix_nano(self) -> int:
        return self.sec * _NANOS_PER_SECOND + self.nsec

    @classmethod
    def now(cls) -> "Timestamp":
        sec, nsec = divmod(time.time_ns(), _NANOS_PER_SECOND)
        return cls(sec=sec, nsec=nsec)


@dataclass
class Record:
    """One entry flowing through the ingest pipeline.

    Owned by the caller; the transcoder rewrites ``tag``, ``ts`` and ``data``
    in place when it recognizes the payload.
    """

    tag: int = 0
    ts: Timestamp | None = None
    data: bytes = b""
