"""内容策展：评分、阈值过滤、摘要、排序."""

import asyncio
import json
import logging
from datetime import datetime
from functools import cmp_to_key

from pydantic import BaseModel

from termiflow.llm.summarize import RelevanceScorer, Summarizer
from termiflow.models.feed_item import FeedItem
from termiflow.sources.base import Candidate
from termiflow.utils.html_parser import truncate
from termiflow.utils.timeutils import utcnow

logger = logging.getLogger(__name__)

RELEVANCE_THRESHOLD = 0.5
MAX_CONTENT_LENGTH = 2000

RELEVANCE_WEIGHT = 0.7
RECENCY_BONUS = 0.3


class CuratedItem(BaseModel):
    """策展结果，对应一条待保存的 FeedItem."""

    subscription_id: int | None = None
    title: str
    summary: str = ""
    content: str = ""
    source_name: str = ""
    source_url: str = ""
    published_at: datetime | None = None
    relevance_score: float = 0.0
    tags: list[str] = []

    def to_feed_item(self) -> FeedItem:
        """转换为数据库模型."""
        if self.subscription_id is None:
            msg = "CuratedItem 未关联订阅"
            raise ValueError(msg)

        return FeedItem(
            subscription_id=self.subscription_id,
            title=self.title,
            summary=self.summary,
            content=self.content,
            source_name=self.source_name,
            source_url=self.source_url,
            published_at=self.published_at,
            fetched_at=utcnow(),
            relevance_score=self.relevance_score,
            tags=json.dumps(self.tags, ensure_ascii=False),
        )


def filter_by_relevance(
    items: list[CuratedItem], threshold: float = RELEVANCE_THRESHOLD
) -> list[CuratedItem]:
    """保留评分不低于阈值的条目."""
    return [item for item in items if item.relevance_score >= threshold]


def _compare(a: CuratedItem, b: CuratedItem) -> int:
    # 两条都有发布时间时，较新的一条获得时效加分
    weight_a = a.relevance_score * RELEVANCE_WEIGHT
    weight_b = b.relevance_score * RELEVANCE_WEIGHT

    if a.published_at is not None and b.published_at is not None:
        if a.published_at > b.published_at:
            weight_a += RECENCY_BONUS
        elif b.published_at > a.published_at:
            weight_b += RECENCY_BONUS

    if weight_a > weight_b:
        return -1
    if weight_b > weight_a:
        return 1
    return 0


def sort_by_relevance_and_recency(items: list[CuratedItem]) -> list[CuratedItem]:
    """按 70% 相关性 + 30% 时效性排序（稳定排序）."""
    return sorted(items, key=cmp_to_key(_compare))


class Curator:
    """对候选内容做评分、过滤、摘要和排序."""

    def __init__(
        self,
        scorer: RelevanceScorer,
        summarizer: Summarizer,
        concurrency: int = 4,
    ) -> None:
        self.scorer = scorer
        self.summarizer = summarizer
        self.concurrency = max(1, concurrency)

    async def curate(self, topic: str, candidates: list[Candidate]) -> list[CuratedItem]:
        """
        策展一批候选内容.

        每个候选独立处理，单个阶段失败只会降级（默认分、空摘要），
        不会中断整批处理。
        """
        if not candidates:
            return []

        # 每个候选最多发起 3 次 LLM 调用，信号量限制同时处理的候选数
        semaphore = asyncio.Semaphore(self.concurrency)

        async def curate_with_semaphore(candidate: Candidate) -> CuratedItem:
            async with semaphore:
                return await self._curate_one(topic, candidate)

        # gather 保持输入顺序
        items = await asyncio.gather(*(curate_with_semaphore(c) for c in candidates))

        kept = filter_by_relevance(list(items))
        logger.info(f"策展完成: 话题={topic}, 候选={len(candidates)}, 保留={len(kept)}")
        return sort_by_relevance_and_recency(kept)

    async def _curate_one(self, topic: str, candidate: Candidate) -> CuratedItem:
        item = CuratedItem(
            title=candidate.title,
            source_name=candidate.source,
            source_url=candidate.url,
            content=truncate(candidate.content, MAX_CONTENT_LENGTH),
            published_at=candidate.published_at,
        )

        item.relevance_score = await self.scorer.score(
            topic, candidate.title, candidate.snippet
        )

        # 仅对评分严格高于阈值的条目生成摘要和标签
        if item.relevance_score > RELEVANCE_THRESHOLD:
            item.summary = await self.summarizer.summarize(
                topic, candidate.title, candidate.content
            )
            item.tags = await self.summarizer.extract_tags(
                candidate.title, candidate.content
            )

        return item
