"""YAML config file discovery and reading shared by policy and governance.

An absent file is not an error: callers get ``None`` and run without
constraints.  A file that exists but cannot be used either raises
``ConfigError`` (strict) or is logged and treated as absent.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable

import yaml

from structlens.errors import ConfigError

log = logging.getLogger("structlens.config")


def candidate_paths(config_path: str | Path | None, defaults: Iterable[str]) -> list[Path]:
    paths: list[Path] = []
    if config_path:
        paths.append(Path(config_path))
    paths.extend(Path(p) for p in defaults)
    return paths


def read_yaml_config(
    config_path: str | Path | None,
    defaults: Iterable[str],
    *,
    strict: bool = False,
) -> tuple[Path, dict[str, Any]] | None:
    """Read the first existing file among *config_path* and *defaults*.

    Returns ``(path, mapping)`` or ``None`` when no file exists or the file
    is malformed and *strict* is false.
    """
    for p in candidate_paths(config_path, defaults):
        if not p.exists():
            continue
        try:
            with open(p, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as exc:
            return _malformed(p, f"cannot parse YAML: {exc}", strict)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            return _malformed(p, f"expected a mapping at top level, got {type(data).__name__}", strict)
        log.debug("Loaded config %s", p)
        return p, data
    return None


def reject(path: Path, reason: str, strict: bool) -> None:
    """Report an unusable value found while interpreting a loaded file."""
    if strict:
        raise ConfigError(str(path), reason)
    log.warning("Ignoring invalid config %s: %s", path, reason)


def _malformed(path: Path, reason: str, strict: bool) -> None:
    reject(path, reason, strict)
    return None
