"""订阅管理 API."""

import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from termiflow.api.deps import (
    get_llm_provider,
    get_search_provider,
    get_session_factory,
    get_store,
)
from termiflow.config import get_settings
from termiflow.core.factory import build_scheduler
from termiflow.core.store import FeedStore, SubscriptionExistsError
from termiflow.llm import LLMProvider
from termiflow.models.subscription import Subscription
from termiflow.sources import SearchProvider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/subscriptions", tags=["subscriptions"])


class SubscribeRequest(BaseModel):
    """订阅请求."""

    topic: str
    frequency: Literal["hourly", "daily", "weekly"] | None = None
    sources: list[str] | None = None


def _subscription_response(subscription: Subscription) -> dict:
    return {
        "id": subscription.id,
        "topic": subscription.topic,
        "category": subscription.category,
        "frequency": subscription.frequency,
        "sources": subscription.get_sources(),
        "is_active": subscription.is_active,
        "created_at": subscription.created_at.isoformat(),
        "last_fetched_at": (
            subscription.last_fetched_at.isoformat()
            if subscription.last_fetched_at
            else None
        ),
    }


@router.get("")
async def list_subscriptions(
    store: FeedStore = Depends(get_store),
) -> dict:
    """获取订阅列表（含条目总数和未读数）."""
    subscriptions = await store.list_subscriptions()

    items = []
    for subscription in subscriptions:
        response = _subscription_response(subscription)
        if subscription.id is not None:
            total, unread = await store.get_subscription_item_count(subscription.id)
            response["total_items"] = total
            response["unread_items"] = unread
        items.append(response)

    return {"total": len(subscriptions), "items": items}


@router.post("", status_code=201)
async def subscribe(
    request: SubscribeRequest,
    store: FeedStore = Depends(get_store),
) -> dict:
    """订阅话题（预置分类或自由话题）."""
    topic = request.topic.strip()
    if not topic:
        raise HTTPException(status_code=400, detail="话题不能为空")

    frequency = request.frequency or get_settings().default_frequency
    sources = [s.strip() for s in request.sources or [] if s.strip()]

    try:
        subscription = await store.create_subscription(topic, frequency, sources)
    except SubscriptionExistsError as e:
        raise HTTPException(status_code=409, detail=f"已订阅 {topic}") from e

    return _subscription_response(subscription)


@router.delete("")
async def unsubscribe_all(
    store: FeedStore = Depends(get_store),
) -> dict:
    """取消全部订阅，同时删除所有条目."""
    deleted = await store.delete_all_subscriptions()
    return {"deleted": deleted}


@router.delete("/{topic}")
async def unsubscribe(
    topic: str,
    store: FeedStore = Depends(get_store),
) -> dict:
    """取消订阅，同时删除其条目."""
    deleted = await store.delete_subscription(topic)
    if not deleted:
        raise HTTPException(status_code=404, detail=f"未订阅 {topic}")
    return {"topic": topic, "deleted": True}


@router.post("/refresh")
async def refresh_subscriptions(
    topic: str | None = Query(None, description="只刷新指定话题"),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    llm_provider: LLMProvider = Depends(get_llm_provider),
    search_provider: SearchProvider | None = Depends(get_search_provider),
) -> dict:
    """立即刷新订阅（忽略刷新频率）."""
    if not llm_provider.available():
        raise HTTPException(
            status_code=503, detail=f"LLM Provider '{llm_provider.name}' 未配置"
        )

    scheduler = build_scheduler(
        get_settings(), session_factory, llm_provider, search_provider
    )
    try:
        subscriptions = await scheduler.store.get_active_subscriptions()
        if topic:
            subscriptions = [s for s in subscriptions if s.topic == topic]
            if not subscriptions:
                raise HTTPException(status_code=404, detail=f"未找到订阅: {topic}")

        refreshed: list[dict] = []
        failed: list[str] = []
        for subscription in subscriptions:
            try:
                items = await scheduler.refresh_subscription(subscription)
            except Exception:
                logger.exception(f"订阅刷新失败: {subscription.topic}")
                failed.append(subscription.topic)
                continue
            refreshed.append({"topic": subscription.topic, "items": len(items)})
    finally:
        await scheduler.close()

    return {
        "refreshed": refreshed,
        "failed": failed,
        "total_items": sum(r["items"] for r in refreshed),
    }
