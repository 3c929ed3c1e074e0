"""Tests for configuration loading."""

import pytest

from oddsy.config_loader import build_app_config, load_app_config, reset_config_cache, resolve_env_vars


@pytest.fixture(autouse=True)
def clean_cache():
    reset_config_cache()
    yield
    reset_config_cache()


class TestResolveEnvVars:
    """Tests for ${VAR} interpolation."""

    def test_set_variable(self, monkeypatch):
        monkeypatch.setenv("ODDSY_TEST_KEY", "abc")
        assert resolve_env_vars("key=${ODDSY_TEST_KEY}") == "key=abc"

    def test_default_value(self, monkeypatch):
        monkeypatch.delenv("ODDSY_MISSING", raising=False)
        assert resolve_env_vars("${ODDSY_MISSING:-fallback}") == "fallback"

    def test_missing_without_default(self, monkeypatch):
        monkeypatch.delenv("ODDSY_MISSING", raising=False)
        assert resolve_env_vars("${ODDSY_MISSING}") == ""


class TestBuildAppConfig:
    """Tests for build_app_config."""

    def test_defaults(self, monkeypatch):
        for name in ("MAX_ORCHESTRATION_STEPS", "UPSTREAM_MAX_RETRIES", "UPSTREAM_MAX_ITEMS"):
            monkeypatch.delenv(name, raising=False)

        cfg = build_app_config({})

        assert cfg.orchestrator.max_steps == 5
        assert cfg.upstream.max_retries == 3
        assert cfg.upstream.max_items == 5

    def test_yaml_values_with_env_interpolation(self, monkeypatch):
        monkeypatch.setenv("ODDSY_TEST_ODDS_KEY", "odds-123")

        cfg = build_app_config({
            "orchestrator": {"model": "gpt-test", "max_steps": "7"},
            "upstream": {"odds_api_key": "${ODDSY_TEST_ODDS_KEY}", "timeout": 3},
            "server": {"reload": "true"},
        })

        assert cfg.orchestrator.model == "gpt-test"
        assert cfg.orchestrator.max_steps == 7
        assert cfg.upstream.odds_api_key == "odds-123"
        assert cfg.upstream.timeout == 3.0
        assert cfg.server.reload is True

    def test_env_fallback_when_section_missing(self, monkeypatch):
        monkeypatch.setenv("TAVILY_API_KEY", "tvly-env")
        cfg = build_app_config({})
        assert cfg.upstream.tavily_api_key == "tvly-env"


class TestLoadAppConfig:
    """Tests for load_app_config."""

    def test_missing_file_uses_defaults(self, tmp_path):
        cfg = load_app_config(str(tmp_path / "absent.yaml"), reload=True)
        assert cfg.version == "1.0"

    def test_loads_file_and_caches(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("version: '2.0'\norchestrator:\n  max_steps: 3\n")

        first = load_app_config(str(path), reload=True)
        second = load_app_config()

        assert first.orchestrator.max_steps == 3
        assert second is first

    def test_non_mapping_file_rejected(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ValueError, match="must contain a mapping"):
            load_app_config(str(path), reload=True)
