"""预置话题 API."""

from fastapi import APIRouter, Depends

from termiflow.api.deps import get_store
from termiflow.core.store import FeedStore
from termiflow.models.category import DEFAULT_CATEGORIES

router = APIRouter(prefix="/api/topics", tags=["topics"])


@router.get("")
async def list_topics(
    store: FeedStore = Depends(get_store),
) -> dict:
    """获取预置话题分类，并标注是否已订阅."""
    subscriptions = await store.list_subscriptions()
    subscribed = {s.topic for s in subscriptions}

    return {
        "total": len(DEFAULT_CATEGORIES),
        "items": [
            {
                "name": category.name,
                "display_name": category.display_name,
                "description": category.description,
                "keywords": category.keywords,
                "has_default_rss": bool(category.default_rss),
                "subscribed": category.name in subscribed,
            }
            for category in DEFAULT_CATEGORIES
        ],
    }
