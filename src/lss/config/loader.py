"""Load configuration and resolve it, with CLI overrides, into a ScanConfig.

Precedence, lowest first: defaults < config file < environment < CLI.
"""

from __future__ import annotations

import dataclasses
import logging
import math
import os
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Sequence

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from lss.config.schema import LssConfig, ScanConfig
from lss.errors import IoError, LssError

logger = logging.getLogger(__name__)

APP_NAME = "lss"
CONFIG_FILENAME = "config.toml"
CONFIG_ENV_VAR = "LSS_CONFIG"


class ConfigError(LssError):
    """Raised when config is missing (when explicitly named) or invalid."""


class ConfigParseError(ConfigError):
    """Raised when the config document is malformed."""


# ---- location ----


def config_dir() -> Path:
    """Platform config directory (not including the ``lss`` sub-directory)."""
    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        return Path(appdata) if appdata else Path.home() / "AppData" / "Roaming"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support"
    xdg = os.environ.get("XDG_CONFIG_HOME")
    return Path(xdg) if xdg else Path.home() / ".config"


def default_config_path() -> Path:
    if val := os.environ.get(CONFIG_ENV_VAR):
        return Path(val).expanduser()
    return config_dir() / APP_NAME / CONFIG_FILENAME


def find_config_file(override: Optional[str] = None) -> Optional[Path]:
    """Locate the config file. *override* takes precedence and must exist."""
    if override:
        p = Path(override).expanduser()
        if not p.is_file():
            raise ConfigError(f"Config file not found: {override}")
        return p
    candidate = default_config_path()
    return candidate if candidate.is_file() else None


# ---- parsing ----


def _parse_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigParseError(f"Failed to parse {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read {path}: {exc}") from exc


def _expect_str_list(raw: Dict[str, Any], key: str, path: Path) -> None:
    value = raw[key]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigParseError(f"{path}: '{key}' must be an array of strings")


def _expect_number(raw: Dict[str, Any], key: str, path: Path, low: float, high: float) -> None:
    value = raw[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigParseError(f"{path}: '{key}' must be a number")
    if not math.isfinite(value) or not low <= value <= high:
        raise ConfigParseError(f"{path}: '{key}' must be between {low} and {high}")


def _build_config(raw: Dict[str, Any], path: Path) -> LssConfig:
    """Validate known keys and build LssConfig, ignoring unknown keys."""
    valid_fields = {f.name for f in dataclasses.fields(LssConfig)}
    filtered = {k: v for k, v in raw.items() if k in valid_fields}

    for key in ("ignore", "include_tags", "exclude_tags", "rules_files"):
        if key in filtered:
            _expect_str_list(filtered, key, path)
    if "entropy_threshold" in filtered:
        _expect_number(filtered, "entropy_threshold", path, 0.0, math.inf)
        filtered["entropy_threshold"] = float(filtered["entropy_threshold"])
    if "min_confidence" in filtered:
        _expect_number(filtered, "min_confidence", path, 0.0, 1.0)
        filtered["min_confidence"] = float(filtered["min_confidence"])
    for key in ("workers", "max_file_size_kb"):
        value = filtered.get(key)
        if value is not None and (isinstance(value, bool) or not isinstance(value, int) or value < 1):
            raise ConfigParseError(f"{path}: '{key}' must be a positive integer")
    if "history" in filtered and not isinstance(filtered["history"], bool):
        raise ConfigParseError(f"{path}: 'history' must be true or false")

    return LssConfig(**filtered)


def _env_float(name: str, low: float, high: float) -> Optional[float]:
    val = os.environ.get(name)
    if val is None:
        return None
    try:
        number = float(val)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number", name, val)
        return None
    if not math.isfinite(number) or not low <= number <= high:
        logger.warning("Ignoring %s=%r: out of range", name, val)
        return None
    return number


def _merge_env_overrides(cfg: LssConfig) -> None:
    """Apply LSS_* environment variable overrides."""
    if (val := _env_float("LSS_ENTROPY_THRESHOLD", 0.0, math.inf)) is not None:
        cfg.entropy_threshold = val
    if (val := _env_float("LSS_MIN_CONFIDENCE", 0.0, 1.0)) is not None:
        cfg.min_confidence = val
    if val := os.environ.get("LSS_WORKERS"):
        try:
            workers = int(val)
        except ValueError:
            workers = 0
        if workers >= 1:
            cfg.workers = workers
        else:
            logger.warning("Ignoring LSS_WORKERS=%r: not a positive integer", val)
    if val := os.environ.get("LSS_IGNORE"):
        cfg.ignore.extend(p.strip() for p in val.split(os.pathsep) if p.strip())


def load_config(config_override: Optional[str] = None) -> LssConfig:
    """Load, validate, and return the file-level configuration."""
    config_path = find_config_file(config_override)

    if config_path is None:
        cfg = LssConfig()
    else:
        logger.debug("Loading config from %s", config_path)
        cfg = _build_config(_parse_toml(config_path), config_path)

    _merge_env_overrides(cfg)
    return cfg


# ---- resolution ----


def parse_tag_list(value: Optional[str]) -> frozenset[str]:
    """Split a comma-separated tag list, dropping blanks."""
    if not value:
        return frozenset()
    return frozenset(t.strip() for t in value.split(",") if t.strip())


def resolve_scan_config(
    root: Path,
    cfg: LssConfig,
    *,
    entropy_threshold: Optional[float] = None,
    min_confidence: Optional[float] = None,
    include_tags: Optional[Iterable[str]] = None,
    exclude_tags: Optional[Iterable[str]] = None,
    ignore_file: Optional[Path] = None,
    rules_files: Sequence[Path] = (),
    workers: Optional[int] = None,
    history: Optional[bool] = None,
) -> ScanConfig:
    """Build the immutable ScanConfig for a scan of *root*.

    Fails fast: a missing root, ignore file or rules file raises IoError and a
    bad rule raises RuleParseError, all before any scanning starts.
    """
    from lss.rules.registry import RuleSet
    from lss.scanner.ignore import IgnoreResolver

    if not root.exists():
        raise IoError(f"Scan path does not exist: {root}")
    if not root.is_dir():
        raise IoError(f"Scan path is not a directory: {root}")

    if min_confidence is not None and not 0.0 <= min_confidence <= 1.0:
        raise ConfigError(f"min_confidence must be between 0.0 and 1.0, got {min_confidence}")
    if entropy_threshold is not None and entropy_threshold < 0.0:
        raise ConfigError(f"entropy_threshold must be >= 0.0, got {entropy_threshold}")

    all_rules_files = [Path(p).expanduser() for p in cfg.rules_files] + list(rules_files)
    rules = RuleSet.load(all_rules_files)
    ignore = IgnoreResolver.build(root, cfg.ignore, ignore_file)

    max_kb = cfg.max_file_size_kb
    return ScanConfig(
        rules=rules,
        ignore=ignore,
        entropy_threshold=cfg.entropy_threshold if entropy_threshold is None else entropy_threshold,
        min_confidence=cfg.min_confidence if min_confidence is None else min_confidence,
        include_tags=frozenset(cfg.include_tags if include_tags is None else include_tags),
        exclude_tags=frozenset(cfg.exclude_tags if exclude_tags is None else exclude_tags),
        workers=cfg.workers if workers is None else workers,
        history=cfg.history if history is None else history,
        max_file_size=max_kb * 1024 if max_kb else None,
    )
