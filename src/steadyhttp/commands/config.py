"""Config commands -- view and modify the user configuration.

Provides the ``steadyhttp config`` sub-command group for reading, updating,
and resetting the persisted :class:`~steadyhttp.models.CliConfig`.
"""

from __future__ import annotations

from typing import Any

import typer

from steadyhttp.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the effective configuration.

    Prints the config file location to stderr and the merged configuration
    (user file, project file, environment) to stdout.

    Example::

        steadyhttp config show --json
    """
    from steadyhttp.config import config_path, resolve_config

    config = resolve_config()
    info(f"Config file: {config_path()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g., 'client.timeout')."
    ),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value in the user config file.

    The value is coerced to the type of the existing field (bool, int,
    float, or str) and the result is validated before saving.

    Example::

        steadyhttp config set client.base_url https://api.example.com
        steadyhttp config set client.retries 5
        steadyhttp config set output.format json
    """
    from steadyhttp.config import load_cli_config, save_cli_config
    from steadyhttp.models import CliConfig

    data = load_cli_config().model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=2)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target or isinstance(target[final_key], dict):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)

    try:
        coerced = _coerce(target[final_key], value)
    except ValueError:
        error(f"Expected {type(target[final_key]).__name__} for {key}, got: {value}")
        raise typer.Exit(code=2) from None

    target[final_key] = coerced

    try:
        new_config = CliConfig.model_validate(data)
    except ValueError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    save_cli_config(new_config)
    success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Reset the user configuration to defaults."""
    from steadyhttp.config import save_cli_config
    from steadyhttp.models import CliConfig

    if not force and not typer.confirm("Reset all config to defaults?"):
        info("Cancelled.")
        raise typer.Exit()

    save_cli_config(CliConfig())
    success("Configuration reset to defaults.")


def _coerce(current: Any, value: str) -> Any:
    """Convert *value* to the type of *current*."""
    if isinstance(current, bool):
        return value.lower() in ("true", "1", "yes")
    if isinstance(current, int):
        return int(value)
    if isinstance(current, float):
        return float(value)
    return value
