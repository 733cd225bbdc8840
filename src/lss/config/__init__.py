"""Configuration loading, schema, and defaults."""

from lss.config.loader import (
    ConfigError,
    ConfigParseError,
    load_config,
    parse_tag_list,
    resolve_scan_config,
)
from lss.config.schema import LssConfig, ScanConfig

__all__ = [
    "ConfigError",
    "ConfigParseError",
    "LssConfig",
    "ScanConfig",
    "load_config",
    "parse_tag_list",
    "resolve_scan_config",
]
