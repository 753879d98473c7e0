"""Configuration package for the creative journey toolkit."""

from journey.config.app_config import (
    AdaptiveConfig,
    AppConfig,
    EditorConfig,
    ScoringConfig,
    clear_config_cache,
    load_app_config,
)

__all__ = [
    "AdaptiveConfig",
    "AppConfig",
    "EditorConfig",
    "ScoringConfig",
    "clear_config_cache",
    "load_app_config",
]
