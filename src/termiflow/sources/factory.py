"""搜索 Provider 工厂."""

from termiflow.config import Settings
from termiflow.sources.base import SearchProvider
from termiflow.sources.tavily import TavilyProvider


def create_search_provider(settings: Settings) -> SearchProvider | None:
    """根据配置创建搜索 Provider，未配置时返回 None."""
    if not settings.tavily_api_key:
        return None
    return TavilyProvider(
        api_key=settings.tavily_api_key,
        timeout=settings.search_timeout_seconds,
    )
