"""订阅刷新调度：多源抓取 → 去重 → 策展 → 保存."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime

from termiflow.core.curator import Curator, CuratedItem
from termiflow.core.dedup import dedup_by_url
from termiflow.core.policy import is_due, time_range_for
from termiflow.core.store import FeedStore
from termiflow.models.subscription import Subscription
from termiflow.sources.base import Candidate, SearchProvider
from termiflow.sources.rss import RSSProvider
from termiflow.sources.scraper import PageScraper
from termiflow.utils.timeutils import utcnow

logger = logging.getLogger(__name__)


@dataclass
class RefreshReport:
    """批量刷新统计."""

    checked: int = 0
    refreshed: int = 0
    skipped: int = 0
    failed: int = 0
    items: int = 0


class Scheduler:
    """订阅刷新调度器."""

    def __init__(
        self,
        store: FeedStore,
        curator: Curator,
        search_provider: SearchProvider | None = None,
        rss_provider: RSSProvider | None = None,
        scraper: PageScraper | None = None,
        search_max_results: int = 10,
    ) -> None:
        self.store = store
        self.curator = curator
        self.search_provider = search_provider
        self.rss_provider = rss_provider or RSSProvider()
        self.scraper = scraper
        self.search_max_results = search_max_results

    async def close(self) -> None:
        """关闭 RSS 客户端和正文抓取线程池."""
        await self.rss_provider.close()
        if self.scraper is not None:
            self.scraper.close()

    async def refresh_subscription(self, subscription: Subscription) -> list[CuratedItem]:
        """
        刷新单个订阅.

        来源抓取、评分和单条保存的失败都会被吞掉；只有最后更新刷新时间
        失败时才抛出异常。取消会直接向上传播，此时不更新刷新时间。

        Returns:
            本次策展得到的全部条目（包含已存在而未重复保存的条目）
        """
        if subscription.id is None:
            msg = f"订阅尚未保存: {subscription.topic}"
            raise ValueError(msg)

        # 搜索和 RSS 并发抓取，结果按“搜索在前、RSS 在后”拼接
        search_results, rss_results = await asyncio.gather(
            self._search(subscription),
            self._fetch_rss(subscription),
        )
        candidates = dedup_by_url([*search_results, *rss_results])
        logger.info(
            f"刷新订阅: {subscription.topic}, 搜索={len(search_results)}, "
            f"RSS={len(rss_results)}, 去重后={len(candidates)}"
        )

        items = await self.curator.curate(subscription.topic, candidates)

        saved = 0
        for item in items:
            item.subscription_id = subscription.id
            if await self._save(item):
                saved += 1

        await self.store.update_last_fetched(subscription.id, utcnow())
        logger.info(
            f"订阅刷新完成: {subscription.topic}, 策展={len(items)}, 新增={saved}"
        )
        return items

    async def refresh_all_subscriptions(self, now: datetime | None = None) -> RefreshReport:
        """刷新所有到期的启用订阅，单个订阅失败不影响其他订阅."""
        subscriptions = await self.store.get_active_subscriptions()
        report = RefreshReport(checked=len(subscriptions))

        for subscription in subscriptions:
            if not is_due(subscription, now):
                report.skipped += 1
                continue

            try:
                items = await self.refresh_subscription(subscription)
            except Exception:
                report.failed += 1
                logger.exception(f"订阅刷新失败: {subscription.topic}")
                continue

            report.refreshed += 1
            report.items += len(items)

        logger.info(
            f"批量刷新完成: 检查={report.checked}, 刷新={report.refreshed}, "
            f"跳过={report.skipped}, 失败={report.failed}, 条目={report.items}"
        )
        return report

    async def _search(self, subscription: Subscription) -> list[Candidate]:
        if self.search_provider is None or not self.search_provider.available():
            return []

        try:
            results = await self.search_provider.search(
                subscription.topic,
                max_results=self.search_max_results,
                time_range=time_range_for(subscription.frequency),
            )
        except Exception as e:
            logger.warning(f"搜索失败，跳过: {subscription.topic} - {e}")
            return []

        if self.scraper is not None:
            results = await self.scraper.enrich(results)
        return results

    async def _fetch_rss(self, subscription: Subscription) -> list[Candidate]:
        category = self.store.get_category_by_name(subscription.topic)
        if category is None or not category.default_rss:
            return []

        try:
            return await self.rss_provider.fetch_feeds(
                category.default_rss, since=subscription.last_fetched_at
            )
        except Exception as e:
            logger.warning(f"RSS 抓取失败，跳过: {subscription.topic} - {e}")
            return []

    async def _save(self, item: CuratedItem) -> bool:
        """保存单条条目，已存在或保存失败时返回 False."""
        # 无 URL 的条目没有身份标识，总是保存
        if item.source_url:
            try:
                exists = await self.store.item_exists_by_url(item.source_url)
            except Exception as e:
                logger.warning(f"检查条目是否存在失败，按不存在处理: {item.source_url} - {e}")
                exists = False
            if exists:
                return False

        try:
            await self.store.create_feed_item(item.to_feed_item())
        except Exception:
            logger.exception(f"保存条目失败: {item.title}")
            return False
        return True
