"""应用配置管理."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用配置（环境变量）."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # LLM 配置
    llm_provider: Literal["openai", "anthropic", "ollama"] = "openai"

    # OpenAI 配置
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4o"

    # Anthropic 配置
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"

    # Ollama 配置
    ollama_host: str = "http://localhost:11434"
    ollama_model: str = "llama3"

    # 搜索配置
    tavily_api_key: str = ""
    search_max_results: int = 10
    ask_max_sources: int = 5

    # 应用配置
    database_url: str = "sqlite+aiosqlite:///./termiflow.db"
    refresh_interval_minutes: int = 60
    default_frequency: Literal["hourly", "daily", "weekly"] = "daily"
    feed_limit: int = 20
    feed_retention_days: int = 30

    # 策展配置
    curation_concurrency: int = 4
    llm_timeout_seconds: float = 60
    search_timeout_seconds: float = 30
    rss_timeout_seconds: float = 30

    # 全文抓取配置
    scrape_full_text: bool = False
    scrape_concurrency: int = 4


@lru_cache
def get_settings() -> Settings:
    """获取应用配置（带缓存）."""
    return Settings()
