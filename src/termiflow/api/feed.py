"""策展条目 API."""

from datetime import timedelta
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query

from termiflow.api.deps import get_store
from termiflow.config import get_settings
from termiflow.core.store import FeedItemFilter, FeedStore
from termiflow.models.feed_item import FeedItem
from termiflow.utils.timeutils import utcnow

router = APIRouter(prefix="/api/feed", tags=["feed"])


def _item_response(item: FeedItem, topic: str | None) -> dict:
    return {
        "id": item.id,
        "topic": topic,
        "title": item.title,
        "summary": item.summary,
        "source_name": item.source_name,
        "source_url": item.source_url,
        "published_at": item.published_at.isoformat() if item.published_at else None,
        "fetched_at": item.fetched_at.isoformat(),
        "is_read": item.is_read,
        "relevance_score": item.relevance_score,
        "tags": item.get_tags(),
    }


@router.get("")
async def get_feed(
    topic: str | None = Query(None, description="按订阅话题筛选"),
    unread: bool = Query(True, description="只显示未读"),
    since: Literal["today", "week"] | None = Query(None, description="时间范围"),
    limit: int | None = Query(None, ge=1, le=200, description="最大条目数"),
    mark_read: bool = Query(True, description="返回后标记为已读"),
    store: FeedStore = Depends(get_store),
) -> dict:
    """获取策展条目."""
    item_filter = FeedItemFilter(
        topic=topic,
        unread=unread,
        limit=limit or get_settings().feed_limit,
    )

    now = utcnow()
    if since == "today":
        item_filter.since = now.replace(hour=0, minute=0, second=0, microsecond=0)
    elif since == "week":
        item_filter.since = now - timedelta(days=7)

    subscriptions = await store.list_subscriptions()
    topics = {s.id: s.topic for s in subscriptions}

    items = await store.get_feed_items(item_filter)

    if mark_read and items:
        await store.mark_items_read([item.id for item in items if item.id is not None])

    return {
        "total": len(items),
        "subscriptions": len(subscriptions),
        "items": [_item_response(item, topics.get(item.subscription_id)) for item in items],
    }


@router.post("/read-all")
async def mark_all_read(
    topic: str = Query(..., description="订阅话题"),
    store: FeedStore = Depends(get_store),
) -> dict:
    """标记某订阅下全部条目已读."""
    subscription = await store.get_subscription(topic)
    if subscription is None or subscription.id is None:
        raise HTTPException(status_code=404, detail=f"未订阅 {topic}")

    count = await store.mark_all_read(subscription.id)
    return {"topic": topic, "marked": count}


@router.post("/cleanup")
async def cleanup(
    days: int | None = Query(None, ge=1, description="保留天数"),
    store: FeedStore = Depends(get_store),
) -> dict:
    """删除超过保留期的条目."""
    retention = days or get_settings().feed_retention_days
    deleted = await store.delete_old_items(utcnow() - timedelta(days=retention))
    return {"deleted": deleted, "retention_days": retention}
