"""Runtime configuration: defaults, YAML file, environment, CLI overrides.

Precedence, lowest to highest: built-in defaults, YAML config file,
environment variables, command line flags. Loading never raises on a broken
config file; it logs a warning and keeps the lower-precedence values.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional

import yaml

from constants import Constants

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _default_root() -> str:
    return os.path.join(os.path.expanduser("~"), Constants.DEFAULT_ROOT_DIR)


@dataclass
class Config:
    """Settings shared by every version manager of one invocation."""

    root_path: str = field(default_factory=_default_root)
    user_path: str = field(default_factory=lambda: os.path.expanduser("~"))
    verbose: bool = False
    no_install: bool = False
    remote_url: Optional[str] = None
    github_token: Optional[str] = None


def _coerce_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if value is None:
        return None
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    return None


def load_yaml_config(path: str) -> Dict[str, Any]:
    """Read a YAML mapping from ``path``; missing or invalid files yield {}."""
    if not os.path.isfile(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Can not read config file %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring config file %s: top level is not a mapping", path)
        return {}
    return data


def _apply_mapping(conf: Config, data: Mapping[str, Any]) -> Config:
    updates: Dict[str, Any] = {}
    for key in ("root_path", "user_path", "remote_url", "github_token"):
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            updates[key] = os.path.expanduser(value.strip()) if key.endswith("_path") else value.strip()
    for key in ("verbose", "no_install"):
        value = _coerce_bool(data.get(key))
        if value is not None:
            updates[key] = value
    return replace(conf, **updates)


def _env_mapping(env: Mapping[str, str]) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "root_path": env.get(Constants.ENV_ROOT),
        "verbose": env.get(Constants.ENV_VERBOSE),
        "remote_url": env.get(Constants.ENV_REMOTE),
        "github_token": env.get(Constants.ENV_TOFUENV_GITHUB_TOKEN) or env.get(Constants.ENV_GITHUB_TOKEN),
    }
    auto_install = _coerce_bool(env.get(Constants.ENV_AUTO_INSTALL))
    if auto_install is not None:
        data["no_install"] = not auto_install
    return data


def load_config(
    overrides: Optional[Mapping[str, Any]] = None,
    config_file: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Config:
    """Build the effective configuration.

    Args:
        overrides: CLI values; None entries are ignored.
        config_file: Explicit YAML path, else ``TOFUENV_CONFIG`` or
            ``<root>/config.yaml``.
        env: Environment mapping, defaults to ``os.environ``.

    Returns:
        Config
    """
    env = os.environ if env is None else env
    overrides = {k: v for k, v in (overrides or {}).items() if v is not None}

    conf = Config()
    # root may be redirected before the config file location is known
    env_data = _env_mapping(env)
    root_hint = overrides.get("root_path") or env_data.get("root_path") or conf.root_path
    path = config_file or env.get(Constants.ENV_CONFIG) or os.path.join(
        os.path.expanduser(root_hint), Constants.CONFIG_FILE
    )

    conf = _apply_mapping(conf, load_yaml_config(path))
    conf = _apply_mapping(conf, env_data)
    conf = _apply_mapping(conf, overrides)
    logger.debug("Effective configuration: root=%s verbose=%s no_install=%s",
                 conf.root_path, conf.verbose, conf.no_install)
    return conf
