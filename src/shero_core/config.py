"""Unified configuration for SheroKitchen Core.

This module provides the filesystem layout (:class:`DataPaths`) and the
runtime settings (:class:`Settings`) used across all domains (storage,
reporting, import/export).

Remote store configuration is resolved in priority order:

1. Deployment-level environment variables (``SUPABASE_URL`` /
   ``SUPABASE_KEY`` and their framework-prefixed aliases).
2. User-supplied settings persisted in ``settings.json`` under the data root.

Environment (optional):
  SHERO_DATA_ROOT=./data        # default data root for the CLI
  SHERO_PARSE_MODE=lenient      # or "strict"
  SHERO_PROBE=1                 # set to 0 to skip the startup reachability probe
  SHERO_TIMEOUT=30              # seconds
  SHERO_RETRIES=0               # retries for remote reads only
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from shero_core.exceptions import ConfigError
from shero_core.parsing import ParseMode

logger = logging.getLogger(__name__)

URL_ENV_VARS = ("SUPABASE_URL", "REACT_APP_SUPABASE_URL", "VITE_SUPABASE_URL")
KEY_ENV_VARS = (
    "SUPABASE_KEY",
    "REACT_APP_SUPABASE_KEY",
    "VITE_SUPABASE_KEY",
    "SUPABASE_ANON_KEY",
)

# Key under which the user-supplied remote configuration is stored.
SETTINGS_REMOTE_KEY = "supabaseConfig"

DEFAULT_DATA_ROOT = "data"
DEFAULT_TIMEOUT = 30.0
DEFAULT_RETRIES = 0


@dataclass
class DataPaths:
    """All filesystem paths used by the local fallback store.

    Attributes:
        data_root: Root directory for local data.

    Directory Structure:
        data_root/
        ├── menu_items.json   # menu item blob
        ├── sales.json        # sale entry blob
        ├── expenses.json     # expense entry blob
        ├── settings.json     # user-supplied remote configuration
        └── exports/          # CSV exports
    """

    data_root: Path

    @classmethod
    def from_root(cls, data_root: str | Path) -> DataPaths:
        """Create DataPaths from a root directory.

        Args:
            data_root: Root directory for local data.

        Returns:
            DataPaths instance.

        Examples:
            >>> paths = DataPaths.from_root("data")
            >>> paths.sales_json
            PosixPath('data/sales.json')
        """
        if isinstance(data_root, str):
            data_root = Path(data_root)
        return cls(data_root=data_root)

    @property
    def menu_items_json(self) -> Path:
        return self.data_root / "menu_items.json"

    @property
    def sales_json(self) -> Path:
        return self.data_root / "sales.json"

    @property
    def expenses_json(self) -> Path:
        return self.data_root / "expenses.json"

    @property
    def settings_json(self) -> Path:
        return self.data_root / "settings.json"

    @property
    def exports_dir(self) -> Path:
        return self.data_root / "exports"

    def ensure_dirs(self) -> None:
        """Create all directories in the data structure."""
        for path in [self.data_root, self.exports_dir]:
            path.mkdir(parents=True, exist_ok=True)


@dataclass
class RemoteConfig:
    """Connection details for the remote store."""

    url: str
    key: str
    source: str = "settings"

    def __repr__(self) -> str:
        # Never print the key.
        return f"RemoteConfig(url={self.url!r}, source={self.source!r})"


@dataclass
class Settings:
    """Runtime settings.

    Attributes:
        remote: Resolved remote configuration, or None for local-only use.
        parse_mode: Numeric parse policy for user input.
        probe_on_startup: Verify reachability before selecting remote mode.
        timeout: Default HTTP timeout in seconds.
        retries: Retry count for idempotent remote reads.
    """

    remote: Optional[RemoteConfig] = None
    parse_mode: ParseMode = ParseMode.LENIENT
    probe_on_startup: bool = True
    timeout: float = DEFAULT_TIMEOUT
    retries: int = DEFAULT_RETRIES

    @classmethod
    def from_env(
        cls,
        paths: DataPaths,
        environ: Optional[Mapping[str, str]] = None,
    ) -> Settings:
        """Resolve settings from the environment and the user settings file.

        Args:
            paths: DataPaths locating ``settings.json``.
            environ: Environment mapping (defaults to ``os.environ``).

        Returns:
            Settings instance.

        Raises:
            ConfigError: If a setting has an invalid value.
        """
        env = os.environ if environ is None else environ

        try:
            parse_mode = ParseMode.from_value(env.get("SHERO_PARSE_MODE"))
            timeout = float(env.get("SHERO_TIMEOUT", DEFAULT_TIMEOUT))
            retries = int(env.get("SHERO_RETRIES", DEFAULT_RETRIES))
        except ValueError as e:
            raise ConfigError(f"Invalid setting: {e}") from e

        probe = env.get("SHERO_PROBE", "1").strip().lower() not in ("0", "false", "no")

        return cls(
            remote=resolve_remote_config(paths, env),
            parse_mode=parse_mode,
            probe_on_startup=probe,
            timeout=timeout,
            retries=retries,
        )


def _first_env(env: Mapping[str, str], names: tuple[str, ...]) -> Optional[str]:
    for name in names:
        value = env.get(name)
        if value:
            return value
    return None


def has_deployment_config(environ: Optional[Mapping[str, str]] = None) -> bool:
    """Return True when the remote URL comes from the environment."""
    env = os.environ if environ is None else environ
    return _first_env(env, URL_ENV_VARS) is not None


def resolve_remote_config(
    paths: DataPaths,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[RemoteConfig]:
    """Resolve remote store configuration.

    Environment values win over user settings, field by field, so a
    deployment can pin the URL while the key comes from the user.

    Returns:
        RemoteConfig when both a URL and a key are available, else None.
    """
    env = os.environ if environ is None else environ
    env_url = _first_env(env, URL_ENV_VARS)
    env_key = _first_env(env, KEY_ENV_VARS)

    stored = load_user_settings(paths).get(SETTINGS_REMOTE_KEY) or {}
    if not isinstance(stored, dict):
        logger.warning("Ignoring malformed %s in %s", SETTINGS_REMOTE_KEY, paths.settings_json)
        stored = {}

    url = env_url or stored.get("url")
    key = env_key or stored.get("key")
    if not (url and key):
        logger.debug("No remote store configuration found")
        return None

    source = "environment" if env_url else "settings"
    return RemoteConfig(url=str(url).strip(), key=str(key).strip(), source=source)


def load_user_settings(paths: DataPaths) -> dict:
    """Read ``settings.json``; a missing file means no settings."""
    path = paths.settings_json
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Could not read settings file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Settings file {path} must contain a JSON object")
    return data


def save_remote_config(paths: DataPaths, url: str, key: str) -> None:
    """Persist user-supplied remote configuration (the "connect" action)."""
    if not url or not key:
        raise ConfigError("Both a remote URL and a key are required")
    paths.ensure_dirs()
    data = load_user_settings(paths)
    data[SETTINGS_REMOTE_KEY] = {"url": url, "key": key}
    paths.settings_json.write_text(json.dumps(data, indent=2), encoding="utf-8")
    logger.info("Saved remote configuration to %s", paths.settings_json)


def clear_remote_config(paths: DataPaths) -> bool:
    """Forget user-supplied remote configuration (the "disconnect" action).

    Returns:
        True if a stored configuration was removed.
    """
    data = load_user_settings(paths)
    if SETTINGS_REMOTE_KEY not in data:
        return False
    del data[SETTINGS_REMOTE_KEY]
    paths.settings_json.write_text(json.dumps(data, indent=2), encoding="utf-8")
    logger.info("Removed remote configuration from %s", paths.settings_json)
    return True
