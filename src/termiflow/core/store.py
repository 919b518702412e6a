"""订阅与策展条目的持久化."""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import delete, func, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import select

from termiflow.models.category import Category, get_category_by_name
from termiflow.models.feed_item import FeedItem
from termiflow.models.subscription import DEFAULT_SOURCES, Subscription
from termiflow.utils.timeutils import utcnow

logger = logging.getLogger(__name__)


class SubscriptionExistsError(Exception):
    """话题已被订阅."""


class SubscriptionNotFoundError(LookupError):
    """订阅不存在."""


@dataclass
class FeedItemFilter:
    """FeedItem 查询条件."""

    subscription_id: int | None = None
    topic: str | None = None
    unread: bool = False
    since: datetime | None = None
    limit: int = 0
    offset: int = 0


class FeedStore:
    """基于 SQLModel 的持久化层，每个操作使用独立会话."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    # ---- 分类 ----

    def get_category_by_name(self, name: str) -> Category | None:
        """按名称查找预置分类."""
        return get_category_by_name(name)

    # ---- 订阅 ----

    async def create_subscription(
        self,
        topic: str,
        frequency: str = "daily",
        sources: list[str] | None = None,
    ) -> Subscription:
        """创建订阅，话题重复时抛出 SubscriptionExistsError."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(Subscription).where(Subscription.topic == topic)
            )
            if result.scalar_one_or_none() is not None:
                msg = f"已订阅话题: {topic}"
                raise SubscriptionExistsError(msg)

            category = get_category_by_name(topic)
            subscription = Subscription(
                topic=topic,
                frequency=frequency,
                category=category.name if category else None,
            )
            subscription.set_sources(sources if sources else list(DEFAULT_SOURCES))

            session.add(subscription)
            await session.commit()
            await session.refresh(subscription)
            logger.info(f"新增订阅: {topic} ({frequency})")
            return subscription

    async def get_subscription(self, topic: str) -> Subscription | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(Subscription).where(Subscription.topic == topic)
            )
            return result.scalar_one_or_none()

    async def list_subscriptions(self) -> list[Subscription]:
        """获取全部订阅（新创建的在前）."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(Subscription).order_by(Subscription.created_at.desc())  # type: ignore[attr-defined]
            )
            return list(result.scalars().all())

    async def get_active_subscriptions(self) -> list[Subscription]:
        """获取所有启用的订阅."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(Subscription)
                .where(Subscription.is_active == True)  # noqa: E712
                .order_by(Subscription.created_at.desc())  # type: ignore[attr-defined]
            )
            return list(result.scalars().all())

    async def delete_subscription(self, topic: str) -> bool:
        """删除订阅及其所有条目，返回是否存在."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(Subscription).where(Subscription.topic == topic)
            )
            subscription = result.scalar_one_or_none()
            if subscription is None:
                return False

            await session.execute(
                delete(FeedItem).where(FeedItem.subscription_id == subscription.id)  # type: ignore[arg-type]
            )
            await session.delete(subscription)
            await session.commit()
            logger.info(f"已取消订阅: {topic}")
            return True

    async def delete_all_subscriptions(self) -> int:
        """删除全部订阅及其条目，返回删除的订阅数."""
        async with self._session_factory() as session:
            await session.execute(delete(FeedItem))
            result = await session.execute(delete(Subscription))
            await session.commit()
            count = result.rowcount or 0
            logger.info(f"已取消全部订阅: {count} 个")
            return count

    async def get_subscription_item_count(self, subscription_id: int) -> tuple[int, int]:
        """返回订阅下的 (总条目数, 未读条目数)."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(FeedItem.is_read, func.count())
                .where(FeedItem.subscription_id == subscription_id)
                .group_by(FeedItem.is_read)
            )
            counts = {bool(is_read): count for is_read, count in result.all()}

        unread = counts.get(False, 0)
        return unread + counts.get(True, 0), unread

    async def update_last_fetched(
        self, subscription_id: int, timestamp: datetime | None = None
    ) -> None:
        """更新订阅的上次刷新时间."""
        timestamp = timestamp or utcnow()
        async with self._session_factory() as session:
            subscription = await session.get(Subscription, subscription_id)
            if subscription is None:
                msg = f"订阅不存在: {subscription_id}"
                raise SubscriptionNotFoundError(msg)

            subscription.last_fetched_at = timestamp
            subscription.updated_at = timestamp
            await session.commit()

    # ---- 条目 ----

    async def item_exists_by_url(self, url: str) -> bool:
        """任意订阅下是否已存在该 URL 的条目."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(func.count()).select_from(FeedItem).where(FeedItem.source_url == url)
            )
            return (result.scalar() or 0) > 0

    async def create_feed_item(self, item: FeedItem) -> int:
        """保存条目，返回新 ID."""
        async with self._session_factory() as session:
            session.add(item)
            await session.commit()
            await session.refresh(item)
            if item.id is None:
                msg = "保存条目后未获得 ID"
                raise RuntimeError(msg)
            return item.id

    async def get_feed_items(self, item_filter: FeedItemFilter) -> list[FeedItem]:
        """按条件查询条目，按相关性、发布时间降序."""
        stmt = select(FeedItem).join(
            Subscription,
            FeedItem.subscription_id == Subscription.id,  # type: ignore[arg-type]
        )

        if item_filter.subscription_id:
            stmt = stmt.where(FeedItem.subscription_id == item_filter.subscription_id)
        if item_filter.topic:
            stmt = stmt.where(Subscription.topic == item_filter.topic)
        if item_filter.unread:
            stmt = stmt.where(FeedItem.is_read == False)  # noqa: E712
        if item_filter.since is not None:
            stmt = stmt.where(FeedItem.fetched_at >= item_filter.since)

        stmt = stmt.order_by(
            FeedItem.relevance_score.desc(),  # type: ignore[attr-defined]
            FeedItem.published_at.desc().nulls_last(),  # type: ignore[union-attr]
        )

        if item_filter.limit > 0:
            stmt = stmt.limit(item_filter.limit)
        if item_filter.offset > 0:
            stmt = stmt.offset(item_filter.offset)

        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def mark_items_read(self, item_ids: list[int]) -> int:
        """批量标记已读."""
        if not item_ids:
            return 0
        async with self._session_factory() as session:
            result = await session.execute(
                update(FeedItem)
                .where(FeedItem.id.in_(item_ids))  # type: ignore[union-attr]
                .values(is_read=True)
            )
            await session.commit()
            return result.rowcount or 0

    async def mark_all_read(self, subscription_id: int) -> int:
        """标记某订阅下全部条目已读."""
        async with self._session_factory() as session:
            result = await session.execute(
                update(FeedItem)
                .where(FeedItem.subscription_id == subscription_id)  # type: ignore[arg-type]
                .values(is_read=True)
            )
            await session.commit()
            return result.rowcount or 0

    async def delete_old_items(self, older_than: datetime) -> int:
        """删除抓取时间早于 older_than 的条目，返回删除数量."""
        async with self._session_factory() as session:
            result = await session.execute(
                delete(FeedItem).where(FeedItem.fetched_at < older_than)  # type: ignore[arg-type]
            )
            await session.commit()
            count = result.rowcount or 0
            if count:
                logger.info(f"清理了 {count} 条过期条目")
            return count
