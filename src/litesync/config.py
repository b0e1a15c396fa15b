"""Configuration management for litesync."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from litesync.exceptions import ConfigError

DEFAULT_CONFIG_FILE = "litesync.yaml"
DEFAULT_BATCH_SIZE = 200

VALID_CONFIG_FIELDS = {
    "batch_size",
    "key_columns",
    "updated_at_column",
    "export_dir",
    "tables",
}


def load_config_file(path: Optional[Path] = None) -> dict[str, Any]:
    """Load settings from a YAML config file.

    Args:
        path: Explicit file path. Defaults to ``$LITESYNC_CONFIG`` or
            ``./litesync.yaml``.

    Returns:
        Dict of settings; empty if no default file exists.

    Raises:
        ConfigError: If an explicit file is missing, or the file is not a
            mapping or holds unknown keys.
    """
    explicit = path is not None or "LITESYNC_CONFIG" in os.environ
    cfg_path = Path(path or os.environ.get("LITESYNC_CONFIG", DEFAULT_CONFIG_FILE))
    if not cfg_path.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {cfg_path}")
        return {}

    try:
        with open(cfg_path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {cfg_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {cfg_path} must contain a mapping")

    unknown = set(data) - VALID_CONFIG_FIELDS
    if unknown:
        raise ConfigError(
            f"Unknown field(s) in {cfg_path}: {', '.join(sorted(unknown))}"
        )
    return data


def parse_key_columns(value: str) -> dict[str, str]:
    """Parse ``table=column,table2=column2`` into a dict."""
    result = {}
    for pair in value.split(","):
        pair = pair.strip()
        if not pair:
            continue
        table, sep, column = pair.partition("=")
        if not sep or not table.strip() or not column.strip():
            raise ConfigError(f"Invalid key column mapping '{pair}', expected table=column")
        result[table.strip()] = column.strip()
    return result


@dataclass
class Config:
    """Configuration for litesync."""

    batch_size: int = DEFAULT_BATCH_SIZE
    key_columns: dict[str, str] = field(default_factory=dict)
    updated_at_column: Optional[str] = None
    export_dir: str = "data"
    tables: Optional[list[str]] = None

    @classmethod
    def from_env(
        cls,
        *,
        batch_size: Optional[int] = None,
        key_columns: Optional[dict[str, str]] = None,
        updated_at_column: Optional[str] = None,
        export_dir: Optional[str] = None,
        tables: Optional[list[str]] = None,
        config_path: Optional[Path] = None,
    ) -> "Config":
        """Load configuration from the YAML file, env vars, with CLI overrides.

        Priority (highest to lowest):
        1. Explicit parameters (CLI args)
        2. Environment variables
        3. litesync.yaml
        """
        file_cfg = load_config_file(config_path)

        def resolve(explicit, env_key, cfg_key):
            if explicit is not None:
                return explicit
            env_val = os.environ.get(env_key)
            if env_val is not None:
                return env_val
            return file_cfg.get(cfg_key)

        raw_batch = resolve(batch_size, "LITESYNC_BATCH_SIZE", "batch_size")
        try:
            batch = int(raw_batch) if raw_batch is not None else DEFAULT_BATCH_SIZE
        except (TypeError, ValueError) as e:
            raise ConfigError(f"batch_size must be an integer, got {raw_batch!r}") from e

        keys = resolve(key_columns, "LITESYNC_KEY_COLUMNS", "key_columns") or {}
        if isinstance(keys, str):
            keys = parse_key_columns(keys)

        table_list = resolve(tables, "LITESYNC_TABLES", "tables")
        if isinstance(table_list, str):
            table_list = [t.strip() for t in table_list.split(",") if t.strip()]

        config = cls(
            batch_size=batch,
            key_columns=keys,
            updated_at_column=resolve(
                updated_at_column, "LITESYNC_UPDATED_AT", "updated_at_column"
            ),
            export_dir=resolve(export_dir, "LITESYNC_EXPORT_DIR", "export_dir") or "data",
            tables=table_list,
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Validate settings.

        Raises:
            ConfigError: If any setting is out of range or malformed.
        """
        problems = []
        if self.batch_size < 0:
            problems.append(f"batch_size must be >= 0 (got {self.batch_size})")
        if not isinstance(self.key_columns, dict) or not all(
            isinstance(k, str) and isinstance(v, str) and v
            for k, v in self.key_columns.items()
        ):
            problems.append("key_columns must map table names to column names")
        if self.tables is not None and not isinstance(self.tables, list):
            problems.append("tables must be a list of table names")

        if problems:
            raise ConfigError(
                "Invalid configuration:\n  - " + "\n  - ".join(problems)
            )
