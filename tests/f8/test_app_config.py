"""Tests for app configuration (F8).

Tests configuration loading, overrides and fallbacks.
"""

from journey.config.app_config import (
    CONFIG_FILE,
    AdaptiveConfig,
    AppConfig,
    clear_config_cache,
    load_app_config,
)


class TestLoadAppConfig:
    """Tests for load_app_config function."""

    def test_load_config(self):
        clear_config_cache()
        config = load_app_config()

        assert isinstance(config, AppConfig)
        assert config.scoring.passing_score == 70
        assert isinstance(config.adaptive, AdaptiveConfig)
        assert config.editor.history_limit == 50

    def test_config_has_paths(self):
        config = load_app_config()
        assert config.paths["data_dir"] == "data"

    def test_cached_until_reload(self):
        clear_config_cache()
        first = load_app_config()

        assert load_app_config() is first
        assert load_app_config(force_reload=True) is not first

    def test_config_file_name(self):
        assert CONFIG_FILE.name == "journey_config_v1.yaml"


class TestConfigOverrides:
    """Tests for alternate config files."""

    def test_partial_override_keeps_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "scoring:\n  passing_score: 80\nadaptive:\n  tick_interval_seconds: 1\n",
            encoding="utf-8",
        )

        config = load_app_config(config_file=path)

        assert config.scoring.passing_score == 80
        assert config.scoring.default_criterion_weight == 10
        assert config.adaptive.tick_interval_seconds == 1.0
        assert config.adaptive.max_path_items == 5

    def test_override_bypasses_cache(self, tmp_path):
        clear_config_cache()
        cached = load_app_config()
        path = tmp_path / "config.yaml"
        path.write_text("scoring:\n  passing_score: 55\n", encoding="utf-8")

        assert load_app_config(config_file=path).scoring.passing_score == 55
        assert load_app_config() is cached

    def test_missing_file_uses_defaults(self, tmp_path):
        config = load_app_config(config_file=tmp_path / "nope.yaml")

        assert config.scoring.passing_score == 70
        assert config.adaptive.difficulty_window == 2.0

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        config = load_app_config(config_file=path)

        assert config.editor.autosave_interval_ms == 2000
