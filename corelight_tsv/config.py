"""Configuration loading from an optional YAML file and env vars."""

import os
import logging
from dataclasses import dataclass

import yaml

from corelight_tsv.errors import ConfigError, InvalidTagError
from corelight_tsv.tags import validate_tag_name

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "zeek"
MAX_CONFIG_SIZE = 2 * 1024 * 1024


@dataclass(frozen=True)
class CorelightConfig:
    # Each category name is appended to the prefix to form its tag, so with
    # prefix "zeek" conn logs go to "zeekconn", dhcp logs to "zeekdhcp", ...
    prefix: str = DEFAULT_PREFIX

    def __post_init__(self):
        if not self.prefix:
            object.__setattr__(self, "prefix", DEFAULT_PREFIX)
        try:
            validate_tag_name(self.prefix)
        except InvalidTagError as e:
            raise ConfigError(f"invalid prefix: {e}") from e

    @classmethod
    def from_dict(cls, d: dict | None) -> "CorelightConfig":
        d = d or {}
        prefix = d.get("prefix")
        if prefix is None or prefix == "":
            return cls()
        if not isinstance(prefix, str):
            raise ConfigError(f"prefix must be a string, got {type(prefix).__name__}")
        return cls(prefix=prefix.strip() or DEFAULT_PREFIX)


def load_yaml_config(path: str | None) -> dict:
    """Load the ``corelight`` section of a YAML file. Returns empty dict if no path.

    Files without a ``corelight`` key are treated as the section itself.
    """
    if not path:
        return {}
    try:
        size = os.path.getsize(path)
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    if size > MAX_CONFIG_SIZE:
        raise ConfigError(f"config file {path} is too large ({size} bytes)")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a mapping")
    section = data.get("corelight", data)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"'corelight' section in {path} must be a mapping")
    logger.info("Loaded YAML config from %s", path)
    return section


def load_config(yaml_data: dict | None = None) -> CorelightConfig:
    """Build CorelightConfig from YAML data, with CORELIGHT_PREFIX taking precedence."""
    data = dict(yaml_data or {})
    env_prefix = os.environ.get("CORELIGHT_PREFIX")
    if env_prefix:
        data["prefix"] = env_prefix
    return CorelightConfig.from_dict(data)
