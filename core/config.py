"""
Configuration management for the citation verification toolkit.
Uses pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # Logging
    log_level: str = "INFO"

    # Claim extraction
    min_claim_length: int = 10

    # Fetching
    proxy_url: str = "https://publicai-proxy.alaexis.workers.dev/"
    user_agent: str = "Mozilla/5.0 (compatible; BenchmarkBot/1.0)"
    request_timeout_s: int = 30
    max_retries: int = 3
    max_source_chars: int = 50000

    # Providers
    provider_timeout_s: int = 60
    provider_max_tokens: int = 1000
    provider_temperature: float = 0.1

    # Rate limiting (seconds)
    article_delay_s: float = 1.0
    source_delay_s: float = 0.5
    provider_delay_s: float = 1.0

    # Default data paths
    dataset_path: str = "benchmark_data/dataset.json"
    review_csv_path: str = "benchmark_data/dataset_review.csv"
    results_path: str = "benchmark_data/results.json"
    analysis_path: str = "benchmark_data/analysis.json"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
