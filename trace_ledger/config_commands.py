"""Configuration commands for the trace-ledger CLI."""

from cyclopts import App

from trace_ledger.config import get_config

config_app = App(name="config", help="Manage configuration (ledger.path, catalog.path, actor)")


def _scope(global_: bool) -> str:
    return "global" if global_ else "local"


@config_app.command
def set(key: str, value: str, global_: bool = False) -> None:
    """Set a configuration setting.

    Args:
        key: Configuration key
        value: Configuration value
        global_: If True, set in global config. If False, set in local config.
    """
    try:
        get_config(use_global=global_).set(key, value)
    except ValueError as e:
        print(e)
        return
    print(f"Set {key} = {value} ({_scope(global_)})")


@config_app.command
def unset(key: str, global_: bool = False) -> None:
    """Unset a configuration setting."""
    if get_config(use_global=global_).unset(key):
        print(f"Unset {key} ({_scope(global_)})")
    else:
        print(f"{key} is not set ({_scope(global_)})")


@config_app.command
def get(key: str, global_: bool = False) -> None:
    """Get the value of a configuration setting."""
    value = get_config(use_global=global_).get(key)
    if value is None:
        print(f"{key} is not set")
    else:
        print(f"{key} = {value}")


@config_app.command(name="list")
def list_config(global_: bool = False) -> None:
    """List all configuration settings, including the resolved file paths and actor."""
    config = get_config(use_global=global_)
    settings = config.list()

    if settings:
        print(f"{_scope(global_).capitalize()} settings:\n")
        for key, value in settings.items():
            print(f"{key} = {value}")
    else:
        print(f"No {_scope(global_)} configuration settings")

    print(f"\nLedger file: {config.ledger_path()}")
    print(f"Catalog file: {config.catalog_path()}")
    print(f"Actor: {config.actor()}")
