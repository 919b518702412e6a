"""内容来源：Web 搜索、RSS、网页正文."""

from termiflow.sources.base import Candidate, SearchError, SearchProvider, TimeRange
from termiflow.sources.factory import create_search_provider
from termiflow.sources.rss import RSSProvider
from termiflow.sources.scraper import PageScraper
from termiflow.sources.tavily import TavilyProvider

__all__ = [
    "Candidate",
    "PageScraper",
    "RSSProvider",
    "SearchError",
    "SearchProvider",
    "TavilyProvider",
    "TimeRange",
    "create_search_provider",
]
