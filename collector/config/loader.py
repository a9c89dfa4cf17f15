"""Configuration loading from YAML files and the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from collector.config.config import CollectorConfig

ENV_PREFIX = "COLLECTOR_"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML mapping from ``path``.

    Parameters
    ----------
    path : Path
        YAML file.

    Returns
    -------
    dict[str, Any]
        Parsed mapping (empty for an empty file).

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the file does not contain a mapping.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Config file {path} must contain a mapping at the top level. "
            f"Got: {type(data).__name__}."
        )
    return data


def merge_configs(
    base: Mapping[str, Any], override: Mapping[str, Any]
) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``.

    Examples
    --------
    >>> merge_configs({"a": {"b": 1, "c": 2}}, {"a": {"c": 3}})
    {'a': {'b': 1, 'c': 3}}
    """
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_from_env(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Collect overrides from ``COLLECTOR_<SECTION>__<KEY>`` variables.

    Parameters
    ----------
    environ : Mapping[str, str] | None
        Environment to read; defaults to ``os.environ``.

    Returns
    -------
    dict[str, Any]
        Nested override mapping.

    Examples
    --------
    >>> load_from_env({"COLLECTOR_SUBMISSION__URL": "https://x.org/save"})
    {'submission': {'url': 'https://x.org/save'}}
    """
    environ = os.environ if environ is None else environ
    overrides: dict[str, Any] = {}
    for name, value in environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        keys = name[len(ENV_PREFIX) :].lower().split("__")
        if len(keys) < 2 or not all(keys):
            continue
        node = overrides
        for key in keys[:-1]:
            node = node.setdefault(key, {})
        node[keys[-1]] = value
    return overrides


def load_config(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> CollectorConfig:
    """Load configuration from defaults, an optional file and the environment.

    Later sources win: defaults, then the YAML file, then environment
    variables.

    Parameters
    ----------
    path : Path | None
        YAML config file.
    environ : Mapping[str, str] | None
        Environment to read overrides from.

    Returns
    -------
    CollectorConfig
        Validated configuration.

    Raises
    ------
    pydantic.ValidationError
        If the merged configuration is invalid.
    """
    data: dict[str, Any] = {}
    if path is not None:
        data = load_yaml_file(path)
        root = data.get("paths", {}).get("root")
        if root is not None and not Path(root).is_absolute():
            data["paths"]["root"] = str(path.parent / root)
    data = merge_configs(data, load_from_env(environ))
    return CollectorConfig.model_validate(data)
