"""API 依赖注入."""

from collections.abc import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from termiflow.config import get_settings
from termiflow.core.store import FeedStore
from termiflow.llm import LLMProvider, create_llm_provider
from termiflow.models.database import async_session_maker
from termiflow.sources import SearchProvider, create_search_provider


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """获取会话工厂."""
    return async_session_maker()


def get_store(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> FeedStore:
    """获取持久化层."""
    return FeedStore(session_factory)


async def get_llm_provider() -> AsyncGenerator[LLMProvider, None]:
    """按配置创建 LLM Provider，请求结束后关闭."""
    provider = create_llm_provider(get_settings())
    try:
        yield provider
    finally:
        await provider.close()


async def get_search_provider() -> AsyncGenerator[SearchProvider | None, None]:
    """按配置创建搜索 Provider，未配置时为 None."""
    provider = create_search_provider(get_settings())
    try:
        yield provider
    finally:
        if provider is not None:
            await provider.close()
