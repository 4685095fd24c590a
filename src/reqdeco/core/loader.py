# reqdeco/core/loader.py
"""
Dynamic loading and YAML configuration for transports and mock tables.
"""
from __future__ import annotations

import importlib
import logging
import os
import re
from glob import glob
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable

import yaml

if TYPE_CHECKING:
    from reqdeco.core.context import RequestContext

logger = logging.getLogger(__name__)

# Pattern for environment variable substitution: ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


def import_attr(path: str) -> Any:
    """
    Dynamically import an attribute from a module.

    Args:
        path: Import path in format 'module.path:attribute'

    Raises:
        ValueError: If path format is invalid
        ImportError: If module cannot be imported
        AttributeError: If attribute doesn't exist
    """
    if ":" not in path:
        raise ValueError(f"Invalid import path '{path}', expected 'module:attr'")

    mod_name, attr = path.split(":", 1)

    try:
        mod = importlib.import_module(mod_name)
    except ImportError as exc:
        logger.error("Failed to import module '%s'", mod_name)
        raise ImportError(f"Cannot import module '{mod_name}'") from exc

    try:
        return getattr(mod, attr)
    except AttributeError as exc:
        logger.error("Module '%s' has no attribute '%s'", mod_name, attr)
        raise AttributeError(f"Module '{mod_name}' has no attribute '{attr}'") from exc


def substitute_env_vars(value: Any) -> Any:
    """
    Recursively substitute environment variables in configuration values.

    Supports ``${VAR}`` (raises if unset) and ``${VAR:-default}``.
    """
    if isinstance(value, str):
        return _substitute_string(value)
    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [substitute_env_vars(item) for item in value]
    else:
        return value


def _substitute_string(value: str) -> str:
    def replacer(match: re.Match) -> str:
        var_name = match.group(1)
        default = match.group(2)

        env_value = os.environ.get(var_name)

        if env_value is not None:
            return env_value
        elif default is not None:
            return default
        else:
            raise ValueError(
                f"Environment variable '{var_name}' is not set and no default provided"
            )

    return ENV_VAR_PATTERN.sub(replacer, value)


def load_yaml_files(patterns: Iterable[str]) -> list[dict[str, Any]]:
    """
    Load YAML files matching glob patterns, in sorted path order.
    """
    patterns = list(patterns)
    files: list[Path] = []

    for pattern in patterns:
        files.extend(Path(m).resolve() for m in glob(pattern))

    files = sorted(set(files))

    if not files:
        logger.warning("No config files found matching patterns: %s", patterns)
        return []

    logger.info("Loading config files: %s", [str(f) for f in files])

    out: list[dict[str, Any]] = []
    for f in files:
        try:
            with f.open("r", encoding="utf-8") as fh:
                out.append(yaml.safe_load(fh) or {})
        except Exception as exc:
            logger.error("Failed to load YAML file '%s': %s", f, exc)
            raise

    return out


def load_mock_data(patterns: Iterable[str]) -> dict[str, Any]:
    """Merge ``mocks:`` tables (url → payload) from YAML files.

    Expected YAML::

        mocks:
          /users: [{"id": 1}]
          /users/me: {"id": 1, "name": "${MOCK_USER:-ada}"}

    Later files override earlier ones per URL.
    """
    table: dict[str, Any] = {}
    for data in load_yaml_files(patterns):
        table.update(substitute_env_vars(data.get("mocks") or {}))
    return table


def load_http_client(
    patterns: Iterable[str],
    *,
    context: RequestContext | None = None,
) -> Any:
    """Instantiate the configured HTTP client and register it.

    Expected YAML::

        transport:
          class: reqdeco.core.transport:HttpxClient
          signature: position
          config:
            base_url: "${API_URL:-http://localhost:8000}"
            timeout: 10

    Returns the client, or ``None`` when no file declares a transport.
    """
    from reqdeco.core.context import default_context

    patterns = list(patterns)
    spec: dict[str, Any] | None = None
    for data in load_yaml_files(patterns):
        if data.get("transport"):
            spec = data["transport"]

    if spec is None:
        logger.debug("No transport declared in: %s", list(patterns))
        return None

    cls = import_attr(spec["class"])
    config = substitute_env_vars(spec.get("config") or {})
    try:
        client = cls(**config)
    except TypeError as exc:
        raise TypeError(f"Failed to instantiate HTTP client '{spec['class']}': {exc}") from exc

    (context or default_context).use_http_client(client, signature=spec.get("signature"))
    return client
