"""Tests for common.config module."""

from pathlib import Path

import pytest

from common.config import EnhanceConfig, is_configured_key, load_config

ENV_VARS = [
    "ENHANCE_CONFIG",
    "API_URL",
    "GOOGLE_API_KEY",
    "GOOGLE_CX",
    "ENABLE_GOOGLE_SEARCH",
    "OPENAI_API_KEY",
    "OPENAI_MODEL",
    "ENABLE_LLM_ENHANCEMENT",
    "DELAY_BETWEEN_ARTICLES",
    "DELAY_BETWEEN_SEARCHES",
    "DELAY_BETWEEN_SCRAPES",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


class TestLoadConfig:
    def test_defaults_without_file_or_env(self) -> None:
        config = load_config()
        assert config == EnhanceConfig()
        assert config.search.enabled is True
        assert config.llm.enabled is True
        assert config.pacing.delay_between_articles == 3.0
        assert config.pacing.delay_between_searches == 2.0
        assert config.search.results_per_article == 2
        assert "youtube.com" in config.search.excluded_domains

    def test_reads_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "api:\n"
            "  base_url: http://api.test/api\n"
            "llm:\n"
            "  model: gpt-4o\n"
            "  temperature: 0.2\n"
            "pacing:\n"
            "  delay_between_articles: 0\n"
        )
        config = load_config(path)
        assert config.api.base_url == "http://api.test/api"
        assert config.llm.model == "gpt-4o"
        assert config.llm.temperature == 0.2
        assert config.pacing.delay_between_articles == 0.0
        assert config.pacing.delay_between_scrapes == 1.0

    def test_config_path_from_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("search:\n  qualifier: guide\n")
        monkeypatch.setenv("ENHANCE_CONFIG", str(path))
        assert load_config().search.qualifier == "guide"

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_env_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("api:\n  base_url: http://file/api\n")
        monkeypatch.setenv("API_URL", "http://env/api")
        monkeypatch.setenv("GOOGLE_API_KEY", "gkey")
        monkeypatch.setenv("GOOGLE_CX", "gcx")
        monkeypatch.setenv("OPENAI_API_KEY", "okey")
        monkeypatch.setenv("OPENAI_MODEL", "gpt-test")

        config = load_config(path)

        assert config.api.base_url == "http://env/api"
        assert config.search.api_key == "gkey"
        assert config.search.cx == "gcx"
        assert config.llm.api_key == "okey"
        assert config.llm.model == "gpt-test"

    @pytest.mark.parametrize("value,expected", [("false", False), ("FALSE", False), ("true", True), ("0", True)])
    def test_enable_flags(self, monkeypatch: pytest.MonkeyPatch, value: str, expected: bool) -> None:
        monkeypatch.setenv("ENABLE_GOOGLE_SEARCH", value)
        monkeypatch.setenv("ENABLE_LLM_ENHANCEMENT", value)
        config = load_config()
        assert config.search.enabled is expected
        assert config.llm.enabled is expected

    def test_delay_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DELAY_BETWEEN_ARTICLES", "0.5")
        monkeypatch.setenv("DELAY_BETWEEN_SCRAPES", "not-a-number")
        config = load_config()
        assert config.pacing.delay_between_articles == 0.5
        assert config.pacing.delay_between_scrapes == 1.0


class TestIsConfiguredKey:
    def test_real_key(self) -> None:
        assert is_configured_key("sk-123")

    @pytest.mark.parametrize("value", [None, "", "   ", "your_openai_api_key_here"])
    def test_missing_or_placeholder(self, value) -> None:
        assert not is_configured_key(value)
