"""数据模型."""

from termiflow.models.category import DEFAULT_CATEGORIES, Category, get_category_by_name
from termiflow.models.database import (
    async_session_maker,
    close_db,
    create_session_factory,
    init_db,
)
from termiflow.models.feed_item import FeedItem
from termiflow.models.subscription import Subscription

__all__ = [
    "DEFAULT_CATEGORIES",
    "Category",
    "FeedItem",
    "Subscription",
    "async_session_maker",
    "close_db",
    "create_session_factory",
    "get_category_by_name",
    "init_db",
]
