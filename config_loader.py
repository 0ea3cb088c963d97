"""Configuration loading utilities.

Settings are resolved once (defaults, then config.json, then environment) and the
resulting object is passed explicitly to stores, clients and services.
"""

import json
import os
from pathlib import Path

from pydantic import BaseModel, Field

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.json"

# Environment variables that override config.json
ENV_OVERRIDES = {
    "ANTHROPIC_API_KEY": "anthropic_api_key",
    "FIRECRAWL_API_KEY": "search_api_key",
    "JOBHUNT_SEARCH_URL": "search_api_url",
    "JOBHUNT_MODEL": "completion_model",
    "JOBHUNT_DATA_DIR": "data_dir",
}


class Settings(BaseModel):
    """Runtime configuration for every pipeline component."""

    # Completion service
    anthropic_api_key: str | None = None
    completion_model: str = "claude-sonnet-4-20250514"
    completion_timeout: float = 60.0
    completion_max_tokens: int = 4096
    completion_retries: int = 3

    # Search service
    search_api_url: str = "https://api.firecrawl.dev/v1/search"
    search_api_key: str | None = None
    search_results_per_query: int = 20
    search_timeout: float = 30.0

    # Storage
    data_dir: Path = Field(default_factory=lambda: Path(__file__).parent / "data")

    # Query fan-out caps
    max_queries: int = 80
    max_query_titles: int = 6
    max_query_locations: int = 7
    site_filter_titles: int = 4
    company_query_count: int = 20

    # Batch tuning (rate-limit risk vs latency)
    search_batch_size: int = 5
    extraction_chunk_size: int = 20
    extraction_concurrency: int = 3
    scoring_chunk_size: int = 10
    scoring_concurrency: int = 3

    # Company enrichment
    enrichment_enabled: bool = True
    enrichment_top_n: int = 5
    enrichment_concurrency: int = 3


def load_config(config_path: str | None = None) -> Settings:
    """Load settings from config.json and the process environment.

    Args:
        config_path: Optional explicit path. A missing explicit path is an error;
            a missing default config.json just means "use defaults".

    Returns:
        Settings instance.
    """
    values: dict = {}

    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
    else:
        path = DEFAULT_CONFIG_PATH

    if path.exists():
        with open(path) as f:
            values.update(json.load(f))

    for env_name, field_name in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            values[field_name] = value

    return Settings(**values)


def get_anthropic_api_key(settings: Settings) -> str:
    """Get the completion service key, failing with a remediation hint."""
    if not settings.anthropic_api_key:
        raise ValueError(
            "ANTHROPIC_API_KEY environment variable not set. "
            "Set it with: export ANTHROPIC_API_KEY=your-key"
        )
    return settings.anthropic_api_key


def get_search_api_key(settings: Settings) -> str:
    """Get the search service key, failing with a remediation hint."""
    if not settings.search_api_key:
        raise ValueError(
            "FIRECRAWL_API_KEY environment variable not set. "
            "Set it with: export FIRECRAWL_API_KEY=your-key"
        )
    return settings.search_api_key
