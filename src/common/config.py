"""Configuration loader for the article enhancement pipeline.

Priority (highest to lowest):
1. Environment variables (a ``.env`` file is loaded by the CLI)
2. YAML config file (``path`` argument or ``ENHANCE_CONFIG`` env var)
3. Dataclass defaults
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

PLACEHOLDER_KEYS = {"", "your_openai_api_key_here", "your_api_key", "your_search_engine_id"}

DEFAULT_EXCLUDED_DOMAINS = [
    "youtube.com",
    "facebook.com",
    "twitter.com",
    "linkedin.com",
]


@dataclass
class ApiConfig:
    base_url: str = "http://localhost:3000/api"
    timeout: float = 30.0
    list_limit: int = 100


@dataclass
class SearchConfig:
    enabled: bool = True
    api_key: str = ""
    cx: str = ""
    endpoint: str = "https://www.googleapis.com/customsearch/v1"
    qualifier: str = "blog article"
    results_per_article: int = 2
    max_results: int = 10
    timeout: float = 15.0
    excluded_domains: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDED_DOMAINS))


@dataclass
class ScrapeConfig:
    timeout: float = 15.0
    min_candidate_length: int = 500
    max_content_length: int = 5000
    min_source_length: int = 200


@dataclass
class LLMConfig:
    enabled: bool = True
    api_key: str = ""
    model: str = "gpt-4o-mini"
    temperature: float = 0.7
    top_p: float = 0.8
    max_tokens: int = 8192
    timeout: float = 120.0
    max_reference_chars: int = 2000


@dataclass
class PacingConfig:
    delay_between_articles: float = 3.0
    delay_between_searches: float = 2.0
    delay_between_scrapes: float = 1.0


@dataclass
class EnhanceConfig:
    api: ApiConfig = field(default_factory=ApiConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    scrape: ScrapeConfig = field(default_factory=ScrapeConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    pacing: PacingConfig = field(default_factory=PacingConfig)


def is_configured_key(value: str | None) -> bool:
    """True if an API key is set and is not a template placeholder."""
    return bool(value) and value.strip() not in PLACEHOLDER_KEYS


def _parse_bool_flag(value: str) -> bool:
    # Anything but an explicit "false" keeps the phase enabled.
    return value.strip().lower() != "false"


def load_yaml(path: Path) -> dict:
    """Load YAML file and return dict."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _parse_config(data: dict) -> EnhanceConfig:
    """Parse config dictionary into EnhanceConfig object."""
    api_data = data.get("api", {}) or {}
    search_data = data.get("search", {}) or {}
    scrape_data = data.get("scrape", {}) or {}
    llm_data = data.get("llm", {}) or {}
    pacing_data = data.get("pacing", {}) or {}

    api = ApiConfig(
        base_url=api_data.get("base_url", ApiConfig.base_url),
        timeout=float(api_data.get("timeout", ApiConfig.timeout)),
        list_limit=int(api_data.get("list_limit", ApiConfig.list_limit)),
    )

    search = SearchConfig(
        enabled=bool(search_data.get("enabled", True)),
        api_key=search_data.get("api_key", ""),
        cx=search_data.get("cx", ""),
        endpoint=search_data.get("endpoint", SearchConfig.endpoint),
        qualifier=search_data.get("qualifier", SearchConfig.qualifier),
        results_per_article=int(search_data.get("results_per_article", SearchConfig.results_per_article)),
        max_results=int(search_data.get("max_results", SearchConfig.max_results)),
        timeout=float(search_data.get("timeout", SearchConfig.timeout)),
        excluded_domains=list(search_data.get("excluded_domains", DEFAULT_EXCLUDED_DOMAINS)),
    )

    scrape = ScrapeConfig(
        timeout=float(scrape_data.get("timeout", ScrapeConfig.timeout)),
        min_candidate_length=int(scrape_data.get("min_candidate_length", ScrapeConfig.min_candidate_length)),
        max_content_length=int(scrape_data.get("max_content_length", ScrapeConfig.max_content_length)),
        min_source_length=int(scrape_data.get("min_source_length", ScrapeConfig.min_source_length)),
    )

    llm = LLMConfig(
        enabled=bool(llm_data.get("enabled", True)),
        api_key=llm_data.get("api_key", ""),
        model=llm_data.get("model", LLMConfig.model),
        temperature=float(llm_data.get("temperature", LLMConfig.temperature)),
        top_p=float(llm_data.get("top_p", LLMConfig.top_p)),
        max_tokens=int(llm_data.get("max_tokens", LLMConfig.max_tokens)),
        timeout=float(llm_data.get("timeout", LLMConfig.timeout)),
        max_reference_chars=int(llm_data.get("max_reference_chars", LLMConfig.max_reference_chars)),
    )

    pacing = PacingConfig(
        delay_between_articles=float(pacing_data.get("delay_between_articles", PacingConfig.delay_between_articles)),
        delay_between_searches=float(pacing_data.get("delay_between_searches", PacingConfig.delay_between_searches)),
        delay_between_scrapes=float(pacing_data.get("delay_between_scrapes", PacingConfig.delay_between_scrapes)),
    )

    return EnhanceConfig(api=api, search=search, scrape=scrape, llm=llm, pacing=pacing)


def _apply_env_overrides(config: EnhanceConfig) -> None:
    if os.getenv("API_URL"):
        config.api.base_url = os.getenv("API_URL")

    if os.getenv("GOOGLE_API_KEY"):
        config.search.api_key = os.getenv("GOOGLE_API_KEY")
    if os.getenv("GOOGLE_CX"):
        config.search.cx = os.getenv("GOOGLE_CX")
    if os.getenv("ENABLE_GOOGLE_SEARCH"):
        config.search.enabled = _parse_bool_flag(os.getenv("ENABLE_GOOGLE_SEARCH"))

    if os.getenv("OPENAI_API_KEY"):
        config.llm.api_key = os.getenv("OPENAI_API_KEY")
    if os.getenv("OPENAI_MODEL"):
        config.llm.model = os.getenv("OPENAI_MODEL")
    if os.getenv("ENABLE_LLM_ENHANCEMENT"):
        config.llm.enabled = _parse_bool_flag(os.getenv("ENABLE_LLM_ENHANCEMENT"))

    _env_delay_map = {
        "DELAY_BETWEEN_ARTICLES": "delay_between_articles",
        "DELAY_BETWEEN_SEARCHES": "delay_between_searches",
        "DELAY_BETWEEN_SCRAPES": "delay_between_scrapes",
    }
    for env_var, attr in _env_delay_map.items():
        val = os.getenv(env_var)
        if not val:
            continue
        try:
            setattr(config.pacing, attr, float(val))
        except ValueError:
            logger.warning("Ignoring invalid %s=%r (expected seconds)", env_var, val)


def load_config(path: str | Path | None = None) -> EnhanceConfig:
    """Load configuration from an optional YAML file and environment variables.

    Args:
        path: YAML config path. If None, uses the ENHANCE_CONFIG env var;
              if that is unset too, starts from defaults.

    Returns:
        Loaded EnhanceConfig object

    Raises:
        FileNotFoundError: If an explicitly requested config file is missing
    """
    if path is None:
        path = os.environ.get("ENHANCE_CONFIG") or None

    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        config = _parse_config(load_yaml(config_path))
    else:
        config = EnhanceConfig()

    _apply_env_overrides(config)
    return config
