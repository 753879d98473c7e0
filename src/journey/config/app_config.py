"""Application configuration loader.

Loads centralized configuration from data/config/journey_config_v1.yaml
with fallback to built-in defaults.

Usage:
    from journey.config.app_config import load_app_config

    config = load_app_config()
    passing = config.scoring.passing_score
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("data/config/journey_config_v1.yaml")


@dataclass
class ScoringConfig:
    """Defaults for rubrics and assessments."""

    passing_score: int = 70
    default_criterion_weight: int = 10
    max_insights: int = 3


@dataclass
class AdaptiveConfig:
    """Settings for the adaptive learning loop."""

    tick_interval_seconds: float = 5.0
    max_path_items: int = 5
    difficulty_window: float = 2.0
    initial_difficulty: float = 5.0


@dataclass
class EditorConfig:
    """Settings for the journey editor."""

    history_limit: int = 50
    autosave_interval_ms: int = 2000


@dataclass
class AppConfig:
    """Application-wide configuration."""

    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    adaptive: AdaptiveConfig = field(default_factory=AdaptiveConfig)
    editor: EditorConfig = field(default_factory=EditorConfig)
    paths: dict[str, str] = field(default_factory=dict)


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "scoring": {
            "passing_score": 70,
            "default_criterion_weight": 10,
            "max_insights": 3,
        },
        "adaptive": {
            "tick_interval_seconds": 5.0,
            "max_path_items": 5,
            "difficulty_window": 2.0,
            "initial_difficulty": 5.0,
        },
        "editor": {
            "history_limit": 50,
            "autosave_interval_ms": 2000,
        },
        "paths": {
            "data_dir": "data",
            "templates_dir": "templates",
        },
    }


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    defaults = _get_defaults()

    scoring_data = {**defaults["scoring"], **(data.get("scoring") or {})}
    scoring = ScoringConfig(
        passing_score=int(scoring_data["passing_score"]),
        default_criterion_weight=int(scoring_data["default_criterion_weight"]),
        max_insights=int(scoring_data["max_insights"]),
    )

    adaptive_data = {**defaults["adaptive"], **(data.get("adaptive") or {})}
    adaptive = AdaptiveConfig(
        tick_interval_seconds=float(adaptive_data["tick_interval_seconds"]),
        max_path_items=int(adaptive_data["max_path_items"]),
        difficulty_window=float(adaptive_data["difficulty_window"]),
        initial_difficulty=float(adaptive_data["initial_difficulty"]),
    )

    editor_data = {**defaults["editor"], **(data.get("editor") or {})}
    editor = EditorConfig(
        history_limit=int(editor_data["history_limit"]),
        autosave_interval_ms=int(editor_data["autosave_interval_ms"]),
    )

    paths = {**defaults["paths"], **(data.get("paths") or {})}

    return AppConfig(scoring=scoring, adaptive=adaptive, editor=editor, paths=paths)


def load_app_config(force_reload: bool = False, config_file: Path | None = None) -> AppConfig:
    """Load application config, falling back to defaults.

    Args:
        force_reload: If True, ignore cached config and reload from file.
        config_file: Alternate config path (bypasses the cache).

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if config_file is None and _cached_config is not None and not force_reload:
        return _cached_config

    path = config_file or CONFIG_FILE
    data: dict[str, Any]

    if path.exists():
        logger.debug("loading_app_config", source=str(path))
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    else:
        logger.info("using_default_config")
        data = _get_defaults()

    config = _parse_config(data)
    if config_file is None:
        _cached_config = config
    return config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
