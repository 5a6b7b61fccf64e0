"""Compiler configuration loaded from ``dd.config.yaml``."""

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from dd_core.errors import ConfigError

CONFIG_FILENAME = "dd.config.yaml"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class CompilerConfig:
    source: str = "dictionaries"
    out: str = "dist/dictionary.json"
    indent: int = 4
    dump_store: Optional[str] = None
    log_level: str = "WARNING"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _validate(config: CompilerConfig, path: str) -> CompilerConfig:
    if not isinstance(config.indent, int) or config.indent < 0:
        raise ConfigError(
            f"'indent' must be a non-negative integer, got {config.indent!r}.",
            path=path,
            code="INVALID_CONFIG_VALUE",
        )
    config.log_level = str(config.log_level).upper()
    if config.log_level not in LOG_LEVELS:
        raise ConfigError(
            f"'log_level' must be one of {', '.join(LOG_LEVELS)}.",
            path=path,
            code="INVALID_CONFIG_VALUE",
        )
    return config


def load_config(path: Optional[Union[str, Path]] = None) -> CompilerConfig:
    """Load a config file; a missing file yields the defaults."""
    config_path = Path(path) if path else Path.cwd() / CONFIG_FILENAME
    if not config_path.exists():
        return CompilerConfig()

    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(
            f"Invalid YAML in {config_path}: {exc}",
            path=str(config_path),
            code="INVALID_CONFIG",
        ) from exc

    if not isinstance(data, dict):
        raise ConfigError(
            f"Config file {config_path} must contain a mapping.",
            path=str(config_path),
            code="INVALID_CONFIG",
        )

    known = {item.name for item in fields(CompilerConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(
            f"Unknown config keys in {config_path}: {', '.join(unknown)}",
            path=str(config_path),
            code="UNKNOWN_CONFIG_KEY",
        )

    # Relative paths in the file are relative to the file itself.
    base = config_path.parent
    for key in ("source", "out", "dump_store"):
        value = data.get(key)
        if value is not None and not Path(str(value)).is_absolute():
            data[key] = str(base / str(value))

    return _validate(CompilerConfig(**data), str(config_path))
