"""Persistent settings for the ``steadyhttp`` CLI.

Where things live:

* User config -- ``$XDG_CONFIG_HOME/steadyhttp/config.json`` on Linux/BSD,
  ``~/.steadyhttp/config.json`` elsewhere.  Holds a
  :class:`~steadyhttp.models.CliConfig`.
* Project config -- ``./steadyhttp.json``, same shape, any subset of keys.
* Crash logs -- under :func:`get_data_dir`.

:func:`resolve_config` layers defaults, user file, project file,
``STEADYHTTP_*`` environment variables and CLI flags, in that order.

Library code never reads these files; it takes a
:class:`~steadyhttp.models.ClientConfig` argument.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from steadyhttp.exceptions import ConfigError
from steadyhttp.models import CliConfig

_APP_NAME = "steadyhttp"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "steadyhttp.json"

ENV_VARS: dict[str, str] = {
    "STEADYHTTP_BASE_URL": "base_url",
    "STEADYHTTP_TIMEOUT": "timeout",
    "STEADYHTTP_RETRIES": "retries",
    "STEADYHTTP_RETRY_DELAY": "retry_delay",
}
"""Environment variables that override :class:`~steadyhttp.models.ClientConfig` fields."""


# --- Directories ---


def _is_xdg_platform() -> bool:
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(xdg_var: str, xdg_default: str, fallback: str) -> Path:
    """Resolve and create an application directory.

    On XDG platforms this is ``$<xdg_var>/steadyhttp`` (or
    ``~/<xdg_default>/steadyhttp`` when the variable is unset).  Elsewhere
    it is ``~/.steadyhttp/<fallback>``.
    """
    if _is_xdg_platform():
        root = os.environ.get(xdg_var) or str(Path.home() / xdg_default)
        path = Path(root) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}" / fallback
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Directory holding ``config.json``."""
    return _app_dir("XDG_CONFIG_HOME", ".config", "")


def get_data_dir() -> Path:
    """Directory for generated files such as crash logs."""
    return _app_dir("XDG_DATA_HOME", ".local/share", "data")


def _atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* so readers never see a partial file.

    The data goes to a temp file in the same directory, is fsynced, and is
    then renamed over *path*.  The temp file is removed if anything fails.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    handle, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(handle, "w", encoding="utf-8") as tmp:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise


# --- User config ---


def config_path() -> Path:
    """Path to the user config file."""
    return get_config_dir() / _CONFIG_FILENAME


def _read_json(path: Path, label: str) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid {label} at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {label} at {path}: expected a JSON object")
    return data


def load_cli_config() -> CliConfig:
    """Load the user configuration.

    Returns:
        The deserialised :class:`~steadyhttp.models.CliConfig`, or a
        default instance if the file does not exist.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    path = config_path()
    if not path.is_file():
        return CliConfig()
    data = _read_json(path, "config")
    try:
        return CliConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def save_cli_config(config: CliConfig) -> None:
    """Persist the user configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(config_path(), json.dumps(data, indent=2) + "\n")


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./steadyhttp.json``.

    The file uses the same shape as the user config
    (``{"client": {...}, "output": {...}}``) and may set any subset of keys.

    Returns:
        The parsed JSON as a dict, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a valid JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    return _read_json(path, "project config")


def env_overrides() -> dict[str, Any]:
    """Collect :data:`ENV_VARS` that are set, keyed by ``ClientConfig`` field name."""
    overrides: dict[str, Any] = {}
    for var, field_name in ENV_VARS.items():
        value = os.environ.get(var)
        if value:
            overrides[field_name] = value
    return overrides


# --- Precedence resolution ---


def resolve_config(
    cli_client: Optional[dict[str, Any]] = None,
    cli_format: Optional[str] = None,
) -> CliConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_client`` field overrides, ``cli_format``)
        2. Environment variables (:data:`ENV_VARS`)
        3. Project config (``./steadyhttp.json``)
        4. User config (``~/.config/steadyhttp/config.json``)
        5. Defaults

    Args:
        cli_client: ``ClientConfig`` field values from CLI flags; ``None``
            values are ignored.
        cli_format: Output format override.

    Returns:
        The effective :class:`~steadyhttp.models.CliConfig`.

    Raises:
        ConfigError: If any layer is malformed or the merged values fail
            validation.
    """
    base = load_cli_config()
    client: dict[str, Any] = base.client.model_dump()
    output: dict[str, Any] = base.output.model_dump()

    project = load_project_config()
    if project is not None:
        client.update(project.get("client") or {})
        output.update(project.get("output") or {})

    client.update(env_overrides())

    if cli_client:
        client.update({k: v for k, v in cli_client.items() if v is not None})
    if cli_format is not None:
        output["format"] = cli_format

    try:
        return CliConfig.model_validate({"client": client, "output": output})
    except ValueError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
