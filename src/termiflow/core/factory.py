"""根据配置装配核心服务."""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from termiflow.config import Settings
from termiflow.core.ask import Asker
from termiflow.core.curator import Curator
from termiflow.core.scheduler import Scheduler
from termiflow.core.store import FeedStore
from termiflow.llm.base import LLMProvider
from termiflow.llm.summarize import RelevanceScorer, Summarizer
from termiflow.sources.base import SearchProvider
from termiflow.sources.rss import RSSProvider
from termiflow.sources.scraper import PageScraper


def build_curator(settings: Settings, llm_provider: LLMProvider) -> Curator:
    """创建策展器."""
    return Curator(
        scorer=RelevanceScorer(llm_provider, timeout=settings.llm_timeout_seconds),
        summarizer=Summarizer(llm_provider, timeout=settings.llm_timeout_seconds),
        concurrency=settings.curation_concurrency,
    )


def build_scheduler(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    llm_provider: LLMProvider,
    search_provider: SearchProvider | None = None,
) -> Scheduler:
    """创建刷新调度器."""
    scraper = (
        PageScraper(max_workers=settings.scrape_concurrency)
        if settings.scrape_full_text
        else None
    )
    return Scheduler(
        store=FeedStore(session_factory),
        curator=build_curator(settings, llm_provider),
        search_provider=search_provider,
        rss_provider=RSSProvider(timeout=settings.rss_timeout_seconds),
        scraper=scraper,
        search_max_results=settings.search_max_results,
    )


def build_asker(
    settings: Settings,
    llm_provider: LLMProvider,
    search_provider: SearchProvider | None = None,
) -> Asker:
    """创建问答服务."""
    return Asker(
        provider=llm_provider,
        search_provider=search_provider,
        max_sources=settings.ask_max_sources,
    )
