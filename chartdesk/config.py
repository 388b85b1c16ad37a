# chartdesk/config.py
"""
Configuration management for the chartdesk library.

Settings are loaded from environment variables or a .env file.

Optional environment variables:
    CHARTDESK_SMA_PERIOD         - SMA window (default: 50)
    CHARTDESK_EMA_PERIOD         - EMA period (default: 20)
    CHARTDESK_BOLLINGER_PERIOD   - Bollinger window / EMA period (default: 20)
    CHARTDESK_BOLLINGER_K        - Bollinger band width in std devs (default: 2.0)
    CHARTDESK_RSI_PERIOD         - RSI period (default: 14)
    CHARTDESK_CACHE_THROTTLE_MS  - Minimum ms between render cache invalidations (default: 200)
    LOG_LEVEL                    - Logging level (default: INFO)

Example .env file:
    CHARTDESK_SMA_PERIOD=100
    CHARTDESK_CACHE_THROTTLE_MS=250
    LOG_LEVEL=DEBUG
"""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv

cwd_env = Path.cwd() / ".env"
if cwd_env.exists():
    load_dotenv(dotenv_path=cwd_env)
else:
    # Fallback to standard behavior (searches parents)
    load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{raw}'")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got '{raw}'")


def _is_int(value: Any) -> bool:
    # YAML booleans are ints to isinstance
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass
class Settings:
    """
    Global settings for the chartdesk library.

    Values are loaded from environment variables on initialization.
    Users can override these programmatically if needed:

        from chartdesk.config import settings
        settings.rsi_period = 21
    """

    sma_period: int = 50
    ema_period: int = 20
    bollinger_period: int = 20
    bollinger_k: float = 2.0
    rsi_period: int = 14
    cache_throttle_ms: int = 200
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from CHARTDESK_* environment variables."""
        defaults = cls()
        return cls(
            sma_period=_env_int("CHARTDESK_SMA_PERIOD", defaults.sma_period),
            ema_period=_env_int("CHARTDESK_EMA_PERIOD", defaults.ema_period),
            bollinger_period=_env_int("CHARTDESK_BOLLINGER_PERIOD", defaults.bollinger_period),
            bollinger_k=_env_float("CHARTDESK_BOLLINGER_K", defaults.bollinger_k),
            rsi_period=_env_int("CHARTDESK_RSI_PERIOD", defaults.rsi_period),
            cache_throttle_ms=_env_int("CHARTDESK_CACHE_THROTTLE_MS", defaults.cache_throttle_ms),
            log_level=os.getenv("LOG_LEVEL", defaults.log_level),
        )

    def with_overrides(self, overrides: Mapping[str, Any]) -> "Settings":
        """
        Return a copy with values from a config mapping applied.

        Unknown keys raise ValueError so typos in config files are not
        silently ignored.
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(unknown)}")
        return replace(self, **dict(overrides))

    def validate(self) -> None:
        """
        Validate that settings are usable.

        Raises:
            ValueError: If any period or interval is out of range
        """
        bad = []
        for name in ("sma_period", "ema_period", "bollinger_period", "rsi_period"):
            value = getattr(self, name)
            if not _is_int(value) or value <= 0:
                bad.append(f"{name}={value!r}")
        if not _is_number(self.bollinger_k) or self.bollinger_k <= 0:
            bad.append(f"bollinger_k={self.bollinger_k!r}")
        if not _is_int(self.cache_throttle_ms) or self.cache_throttle_ms < 0:
            bad.append(f"cache_throttle_ms={self.cache_throttle_ms!r}")

        if bad:
            raise ValueError(
                f"Invalid settings: {', '.join(bad)}. "
                "Periods must be positive integers, bollinger_k a number > 0 "
                "and cache_throttle_ms an integer >= 0."
            )


def load_chart_config(config_path: str | Path) -> dict:
    """
    Load chart configuration from YAML file.

    Args:
        config_path: Path to YAML config file

    Returns:
        Dictionary containing configuration
    """
    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(config_file) as f:
            config = yaml.safe_load(f)

        if config is None:
            raise ValueError(f"Empty config file: {config_path}")

        return config

    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_path}: {e}")


def settings_from_config(config_path: str | Path, base: Settings | None = None) -> Settings:
    """
    Overlay the `indicators:` section of a YAML config onto `base` (or the
    global settings) and validate the result.

    Example config:
        indicators:
          sma_period: 100
          rsi_period: 21
    """
    config = load_chart_config(config_path)
    section = config.get("indicators") or {}
    if not isinstance(section, dict):
        raise ValueError(f"'indicators' in {config_path} must be a mapping")

    result = (base or settings).with_overrides(section)
    result.validate()
    return result


# Global settings instance - loaded when module is imported
settings = Settings.from_env()
