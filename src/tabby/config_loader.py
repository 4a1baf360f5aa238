"""Load TabbyConfig from tabby.yaml / tabby.toml if present.

Merges file config with CLI kwargs. CLI overrides file.
"""

from __future__ import annotations

import dataclasses
import tomllib
from pathlib import Path

import yaml

from tabby._errors import ConfigError
from tabby.config import TabbyConfig

_CONFIG_NAMES = ("tabby.yaml", "tabby.yml", "tabby.toml")

# Fields that may come from a config file (everything except root).
_FILE_KEYS = frozenset(f.name for f in dataclasses.fields(TabbyConfig)) - {"root"}

_TUPLE_KEYS = frozenset({"content_suffixes", "sitemap_exclude", "feed_exclude"})


def load_config(root: Path, **overrides: object) -> TabbyConfig:
    """Load TabbyConfig from root, optionally merging a tabby config file.

    Looks for tabby.yaml, tabby.yml, or tabby.toml in root. If found, loads
    and merges with overrides. Overrides set to ``None`` are ignored so CLI
    flags that were not passed do not mask file values.

    Raises:
        ConfigError: If the config file is malformed or holds invalid values.

    """
    file_config = _read_tabby_config(root)
    merged = {**file_config, **{k: v for k, v in overrides.items() if v is not None}}
    unknown = set(merged) - _FILE_KEYS
    if unknown:
        msg = f"Unknown config keys: {', '.join(sorted(unknown))}"
        raise ConfigError(msg)
    if "output" in merged and not isinstance(merged["output"], Path):
        merged["output"] = Path(str(merged["output"]))
    for key in _TUPLE_KEYS & merged.keys():
        value = merged[key]
        if isinstance(value, str):
            value = (value,)
        merged[key] = tuple(str(v) for v in value)  # type: ignore[union-attr]
    try:
        return TabbyConfig(root=root, **merged)  # type: ignore[arg-type]
    except TypeError as exc:
        msg = f"Invalid configuration: {exc}"
        raise ConfigError(msg) from exc


def _read_tabby_config(root: Path) -> dict[str, object]:
    """Read tabby config from yaml/toml if present. Returns empty dict otherwise."""
    for name in _CONFIG_NAMES:
        path = root / name
        if not path.is_file():
            continue
        try:
            if path.suffix == ".toml":
                data = tomllib.loads(path.read_text(encoding="utf-8"))
            else:
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError, tomllib.TOMLDecodeError) as exc:
            msg = f"Failed to read {path}: {exc}"
            raise ConfigError(msg) from exc
        if not isinstance(data, dict):
            msg = f"{path} must contain a mapping, got {type(data).__name__}"
            raise ConfigError(msg)
        return _flatten_tabby_section(data)
    return {}


def _flatten_tabby_section(data: dict[str, object]) -> dict[str, object]:
    """Extract tabby.* keys into top-level config.

    Top-level keys outside the ``tabby`` section are accepted when they name
    a config field, so a plain ``site_title: ...`` file works too.
    """
    result: dict[str, object] = {
        k: v for k, v in data.items() if k != "tabby" and k in _FILE_KEYS
    }
    section = data.get("tabby")
    if isinstance(section, dict):
        result.update(section)
    return result
