"""Engine configuration management."""

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from .schemas import EngineConfig
from .utils import load_json_safe

CONFIG_ENV_VAR = 'GAMEDAY_CONFIG'
TOKEN_ENV_VAR = 'GAMEDAY_API_TOKEN'


def default_config_path() -> Path:
    """Path of the shipped config, overridable through GAMEDAY_CONFIG."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return Path(__file__).parent.parent / 'data' / 'engine_config.json'


@lru_cache(maxsize=1)
def get_config() -> EngineConfig:
    """
    Load engine configuration from data/engine_config.json.

    Configuration is cached after first load. A missing file yields the
    schema defaults; an invalid file raises.

    Returns:
        EngineConfig object with validated settings

    Raises:
        ValueError: If config file has invalid structure

    Example:
        from gameday.config import get_config
        config = get_config()
        print(f"Autosave debounce: {config.autosave_debounce_seconds}s")
    """
    return load_json_safe(default_config_path(), default=EngineConfig(), schema=EngineConfig)


def get_api_base_url() -> str:
    """Get the backing store base URL from config."""
    return get_config().api_base_url


def get_autosave_debounce() -> float:
    """Get the draft autosave debounce delay in seconds."""
    return get_config().autosave_debounce_seconds


def get_hydration_grace() -> float:
    """Get the post-open grace period in seconds."""
    return get_config().hydration_grace_seconds


def get_bench_range() -> tuple[int, int]:
    """Get the recommended (min, max) bench size."""
    config = get_config()
    return config.recommended_bench_min, config.recommended_bench_max


def get_api_token() -> Optional[str]:
    """Get the bearer credential from the environment, if set."""
    token = os.environ.get(TOKEN_ENV_VAR, '').strip()
    return token or None
