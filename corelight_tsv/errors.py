"""Exception types raised at construction time. Per-record failures never raise."""


class CorelightError(Exception):
    """Base class for transcoder errors."""


class ConfigError(CorelightError):
    """Configuration file or value is unusable."""


class TagNegotiationError(CorelightError):
    """The tag allocator could not resolve a tag name."""


class InvalidTagError(TagNegotiationError):
    """Tag name is empty or contains forbidden characters."""


class TimestampError(ValueError):
    """Timestamp text is not a valid RFC 3339 date-time."""
