"""Configuration file management for spendflow."""

import os
import tomllib
from pathlib import Path
from typing import Any

import tomli_w

from spendflow.domain.cards import CardLimits
from spendflow.domain.currency import CurrencyContext, build_currency_context
from spendflow.domain.savings import MAX_SAVINGS_ACCOUNTS

DEFAULT_CURRENCY_CODE = "GBP"


def get_xdg_config_home() -> Path:
    """Get XDG config directory, with fallback to ~/.config."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config)
    return Path.home() / ".config"


def get_config_path() -> Path:
    """Get the config file path (XDG compliant).

    Returns:
        Path to the config file.
    """
    return get_xdg_config_home() / "spendflow" / "config.toml"


def default_config(currency: str = DEFAULT_CURRENCY_CODE) -> dict[str, Any]:
    """Build the configuration written by 'spendflow init'."""
    limits = CardLimits()
    return {
        "currency": currency.upper(),
        "card_limits": {
            "debit": limits.debit,
            "credit": limits.credit,
            "total": limits.total,
        },
        "max_savings_accounts": MAX_SAVINGS_ACCOUNTS,
    }


def create_default_config(config_path: Path | None = None, currency: str = DEFAULT_CURRENCY_CODE) -> None:
    """Create default config file with secure permissions.

    Args:
        config_path: Path to config file. If None, uses default location.
        currency: ISO code of the user's currency.
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "wb") as f:
        tomli_w.dump(default_config(currency), f)

    os.chmod(config_path, 0o600)


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from TOML file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If config file doesn't exist.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "rb") as f:
        return tomllib.load(f)


def load_config_or_default(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration, falling back to defaults if the file is missing."""
    try:
        return load_config(config_path)
    except FileNotFoundError:
        return default_config()


def save_config(config: dict[str, Any], config_path: Path | None = None) -> None:
    """Save configuration to TOML file.

    Args:
        config: Configuration dictionary.
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "wb") as f:
        tomli_w.dump(config, f)

    os.chmod(config_path, 0o600)


def get_currency_context(config: dict[str, Any]) -> CurrencyContext:
    """Build the session currency context from configuration.

    Args:
        config: Configuration dictionary.

    Returns:
        CurrencyContext from the 'currency' and 'country' keys.
    """
    return build_currency_context(config.get("currency"), config.get("country"))


def get_card_limits(config: dict[str, Any]) -> CardLimits:
    """Read card count limits from configuration, using defaults for missing keys.

    Args:
        config: Configuration dictionary.

    Returns:
        CardLimits.

    Raises:
        ValueError: If a limit is not a non-negative integer.
    """
    defaults = CardLimits()
    section = config.get("card_limits", {})

    values: dict[str, int] = {}
    for key in ("debit", "credit", "total"):
        value = section.get(key, getattr(defaults, key))
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise ValueError(f"card_limits.{key} must be a non-negative integer, got {value!r}")
        values[key] = value

    return CardLimits(**values)


def get_savings_limit(config: dict[str, Any]) -> int:
    """Read the maximum number of savings accounts from configuration.

    Raises:
        ValueError: If the limit is not a non-negative integer.
    """
    value = config.get("max_savings_accounts", MAX_SAVINGS_ACCOUNTS)
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise ValueError(f"max_savings_accounts must be a non-negative integer, got {value!r}")
    return value
