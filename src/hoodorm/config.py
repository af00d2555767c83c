"""
Environment configuration files mapping environment names to connections.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .adapters.base import AdapterConfigurationError

ENV_VAR = "HOODORM_ENV"
DEFAULT_ENVIRONMENT = "development"

CONFIG_TEMPLATE = {
    "development": {"driver": "", "source": ""},
    "production": {"driver": "", "source": ""},
    "test": {"driver": "", "source": ""},
}


@dataclass(frozen=True)
class EnvironmentConfig:
    name: str
    driver: str
    source: str


def resolve_environment(env: Optional[str] = None) -> str:
    return env or os.getenv(ENV_VAR) or DEFAULT_ENVIRONMENT


def load_config(path: str | os.PathLike[str], env: Optional[str] = None) -> EnvironmentConfig:
    """
    Read the ``{driver, source}`` entry for ``env`` from a JSON config file.

    ``env`` defaults to ``$HOODORM_ENV``, then ``development``.
    """
    name = resolve_environment(env)
    try:
        with open(path, encoding="utf-8") as handle:
            environments = json.load(handle)
    except OSError as exc:
        raise AdapterConfigurationError(f"Cannot read database config {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise AdapterConfigurationError(f"Database config {path} is not valid JSON: {exc}") from exc

    if not isinstance(environments, dict):
        raise AdapterConfigurationError(f"Database config {path} must map environment names to entries")
    entry = environments.get(name)
    if not isinstance(entry, dict):
        raise AdapterConfigurationError(f"Config entry for environment '{name}' not found in {path}")
    driver = entry.get("driver") or ""
    source = entry.get("source") or ""
    if not driver:
        raise AdapterConfigurationError(f"Config entry for environment '{name}' has no driver")
    return EnvironmentConfig(name=name, driver=driver, source=source)


def write_config_template(path: str | os.PathLike[str]) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(CONFIG_TEMPLATE, indent=2) + "\n", encoding="utf-8")
    return target
