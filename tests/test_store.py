"""测试持久化层."""

import json
from datetime import datetime, timedelta

import pytest

from termiflow.core.store import (
    FeedItemFilter,
    FeedStore,
    SubscriptionExistsError,
    SubscriptionNotFoundError,
)
from termiflow.models.feed_item import FeedItem
from termiflow.models.subscription import Subscription
from termiflow.utils.timeutils import utcnow


def _item(
    subscription_id: int,
    url: str,
    score: float = 0.7,
    published_at: datetime | None = None,
    fetched_at: datetime | None = None,
) -> FeedItem:
    return FeedItem(
        subscription_id=subscription_id,
        title=f"title {url}",
        source_url=url,
        relevance_score=score,
        published_at=published_at,
        fetched_at=fetched_at or utcnow(),
        tags=json.dumps(["ai"]),
    )


class TestSubscriptions:
    """测试订阅操作."""

    async def test_create_subscription_for_category(self, store: FeedStore) -> None:
        """订阅预置分类时关联分类，来源默认为全部."""
        subscription = await store.create_subscription("silicon-chips", "weekly")

        assert subscription.id is not None
        assert subscription.category == "silicon-chips"
        assert subscription.frequency == "weekly"
        assert subscription.get_sources() == ["tavily", "rss"]
        assert subscription.is_active is True
        assert subscription.last_fetched_at is None

    async def test_create_free_form_topic(self, store: FeedStore) -> None:
        """自由话题不关联分类."""
        subscription = await store.create_subscription("zig compiler", "daily", ["tavily"])

        assert subscription.category is None
        assert subscription.get_sources() == ["tavily"]

    async def test_duplicate_topic_rejected(self, store: FeedStore) -> None:
        """重复订阅同一话题时报错."""
        await store.create_subscription("rust-lang")
        with pytest.raises(SubscriptionExistsError):
            await store.create_subscription("rust-lang")

    async def test_get_and_list(self, store: FeedStore) -> None:
        """按话题查询和列出订阅."""
        await store.create_subscription("rust-lang")
        await store.create_subscription("webgpu")

        assert (await store.get_subscription("webgpu")) is not None
        assert (await store.get_subscription("missing")) is None
        topics = {s.topic for s in await store.list_subscriptions()}
        assert topics == {"rust-lang", "webgpu"}

    async def test_active_subscriptions_exclude_inactive(
        self, store: FeedStore, session_factory
    ) -> None:
        """停用的订阅不参与刷新."""
        await store.create_subscription("rust-lang")
        inactive = await store.create_subscription("webgpu")

        async with session_factory() as session:
            stored = await session.get(Subscription, inactive.id)
            stored.is_active = False
            await session.commit()

        active = await store.get_active_subscriptions()
        assert [s.topic for s in active] == ["rust-lang"]

    async def test_update_last_fetched(self, store: FeedStore) -> None:
        """更新刷新时间."""
        subscription = await store.create_subscription("rust-lang")
        assert subscription.id is not None
        ts = datetime(2025, 6, 1, 8, 30)

        await store.update_last_fetched(subscription.id, ts)

        refreshed = await store.get_subscription("rust-lang")
        assert refreshed is not None
        assert refreshed.last_fetched_at == ts

    async def test_update_last_fetched_missing(self, store: FeedStore) -> None:
        """订阅不存在时报错."""
        with pytest.raises(SubscriptionNotFoundError):
            await store.update_last_fetched(999, utcnow())

    async def test_delete_subscription_removes_items(self, store: FeedStore) -> None:
        """取消订阅同时删除其条目."""
        keep = await store.create_subscription("webgpu")
        drop = await store.create_subscription("rust-lang")
        assert keep.id is not None and drop.id is not None
        await store.create_feed_item(_item(drop.id, "https://drop.com"))
        await store.create_feed_item(_item(keep.id, "https://keep.com"))

        assert await store.delete_subscription("rust-lang") is True
        assert await store.delete_subscription("rust-lang") is False

        assert await store.get_subscription("rust-lang") is None
        assert await store.item_exists_by_url("https://drop.com") is False
        assert await store.item_exists_by_url("https://keep.com") is True


    async def test_delete_all_subscriptions(self, store: FeedStore) -> None:
        """取消全部订阅同时删除所有条目."""
        rust = await store.create_subscription("rust-lang")
        gpu = await store.create_subscription("webgpu")
        assert rust.id is not None and gpu.id is not None
        await store.create_feed_item(_item(rust.id, "https://r.com"))
        await store.create_feed_item(_item(gpu.id, "https://g.com"))

        assert await store.delete_all_subscriptions() == 2

        assert await store.list_subscriptions() == []
        assert await store.get_feed_items(FeedItemFilter()) == []
        assert await store.delete_all_subscriptions() == 0


class TestFeedItems:
    """测试条目操作."""

    async def test_item_exists_by_url_is_global(self, store: FeedStore) -> None:
        """URL 存在性检查跨订阅生效."""
        a = await store.create_subscription("rust-lang")
        await store.create_subscription("webgpu")
        assert a.id is not None

        item_id = await store.create_feed_item(_item(a.id, "https://a.com"))

        assert item_id > 0
        assert await store.item_exists_by_url("https://a.com") is True
        assert await store.item_exists_by_url("https://b.com") is False

    async def test_get_feed_items_ordering(self, store: FeedStore) -> None:
        """按评分降序，评分相同时按发布时间降序，无发布时间的在后."""
        sub = await store.create_subscription("rust-lang")
        assert sub.id is not None
        now = utcnow()
        await store.create_feed_item(_item(sub.id, "low", score=0.5, published_at=now))
        await store.create_feed_item(_item(sub.id, "undated", score=0.8))
        await store.create_feed_item(_item(sub.id, "old", score=0.8, published_at=now - timedelta(days=1)))
        await store.create_feed_item(_item(sub.id, "new", score=0.8, published_at=now))

        items = await store.get_feed_items(FeedItemFilter())

        assert [i.source_url for i in items] == ["new", "old", "undated", "low"]

    async def test_get_feed_items_filters(self, store: FeedStore) -> None:
        """按话题、未读、时间和数量筛选."""
        rust = await store.create_subscription("rust-lang")
        gpu = await store.create_subscription("webgpu")
        assert rust.id is not None and gpu.id is not None
        now = utcnow()
        first = await store.create_feed_item(_item(rust.id, "r1", score=0.9))
        await store.create_feed_item(_item(rust.id, "r2", score=0.8))
        await store.create_feed_item(_item(rust.id, "r-old", score=0.7, fetched_at=now - timedelta(days=10)))
        await store.create_feed_item(_item(gpu.id, "g1", score=0.6))

        by_topic = await store.get_feed_items(FeedItemFilter(topic="webgpu"))
        assert [i.source_url for i in by_topic] == ["g1"]

        await store.mark_items_read([first])
        unread = await store.get_feed_items(FeedItemFilter(subscription_id=rust.id, unread=True))
        assert [i.source_url for i in unread] == ["r2", "r-old"]

        recent = await store.get_feed_items(FeedItemFilter(since=now - timedelta(days=1)))
        assert "r-old" not in {i.source_url for i in recent}

        limited = await store.get_feed_items(FeedItemFilter(limit=2, offset=1))
        assert [i.source_url for i in limited] == ["r2", "r-old"]

    async def test_get_subscription_item_count(self, store: FeedStore) -> None:
        """统计订阅下的条目总数和未读数，不含其他订阅的条目."""
        rust = await store.create_subscription("rust-lang")
        gpu = await store.create_subscription("webgpu")
        assert rust.id is not None and gpu.id is not None
        first = await store.create_feed_item(_item(rust.id, "a"))
        await store.create_feed_item(_item(rust.id, "b"))
        await store.create_feed_item(_item(rust.id, "c"))
        await store.create_feed_item(_item(gpu.id, "d"))
        await store.mark_items_read([first])

        assert await store.get_subscription_item_count(rust.id) == (3, 2)
        assert await store.get_subscription_item_count(gpu.id) == (1, 1)

    async def test_item_count_without_items(self, store: FeedStore) -> None:
        """没有条目时计数为零."""
        sub = await store.create_subscription("rust-lang")
        assert sub.id is not None
        assert await store.get_subscription_item_count(sub.id) == (0, 0)

    async def test_mark_all_read(self, store: FeedStore) -> None:
        """标记某订阅下全部条目已读."""
        sub = await store.create_subscription("rust-lang")
        assert sub.id is not None
        await store.create_feed_item(_item(sub.id, "a"))
        await store.create_feed_item(_item(sub.id, "b"))

        assert await store.mark_all_read(sub.id) == 2
        assert await store.get_feed_items(FeedItemFilter(unread=True)) == []

    async def test_mark_items_read_empty(self, store: FeedStore) -> None:
        """空列表不做任何操作."""
        assert await store.mark_items_read([]) == 0

    async def test_delete_old_items(self, store: FeedStore) -> None:
        """删除抓取时间早于截止时间的条目."""
        sub = await store.create_subscription("rust-lang")
        assert sub.id is not None
        now = utcnow()
        await store.create_feed_item(_item(sub.id, "old", fetched_at=now - timedelta(days=40)))
        await store.create_feed_item(_item(sub.id, "new", fetched_at=now))

        deleted = await store.delete_old_items(now - timedelta(days=30))

        assert deleted == 1
        assert await store.item_exists_by_url("old") is False
        assert await store.item_exists_by_url("new") is True

    def test_get_category_by_name(self, store: FeedStore) -> None:
        """查找预置分类."""
        category = store.get_category_by_name("silicon-chips")
        assert category is not None
        assert category.default_rss
        assert store.get_category_by_name("unknown") is None
