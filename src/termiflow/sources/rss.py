"""RSS 订阅源抓取."""

import asyncio
import logging
from datetime import UTC, datetime
from io import BytesIO
from typing import Any

import feedparser
import httpx

from termiflow.sources.base import Candidate, SearchError
from termiflow.utils.html_parser import html_to_text
from termiflow.utils.timeutils import as_naive_utc

logger = logging.getLogger(__name__)


def _parse_date(entry: Any) -> datetime | None:
    """从 feedparser entry 中解析发布时间（naive UTC）."""
    for attr in ("published_parsed", "updated_parsed"):
        parsed = entry.get(attr)
        if parsed:
            return datetime(*parsed[:6], tzinfo=UTC).replace(tzinfo=None)
    return None


def _entry_content(entry: Any) -> str:
    contents = entry.get("content") or []
    parts = [c.get("value", "") for c in contents if c.get("value")]
    return "\n\n".join(parts)


class RSSProvider:
    """RSS/Atom 订阅源抓取器."""

    name = "rss"

    def __init__(
        self,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": "termiflow/1.0"},
        )

    async def close(self) -> None:
        """关闭客户端."""
        await self._client.aclose()

    async def fetch_feed(
        self,
        feed_url: str,
        since: datetime | None = None,
    ) -> list[Candidate]:
        """抓取单个订阅源，跳过发布时间早于 since 的条目（无时间的条目保留）."""
        try:
            response = await self._client.get(feed_url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            msg = f"订阅源下载失败 {feed_url}: {e}"
            raise SearchError(msg) from e

        # feedparser 和 BeautifulSoup 都是同步解析，放到线程中执行
        return await asyncio.to_thread(self._parse_feed, feed_url, response.content, since)

    def _parse_feed(
        self,
        feed_url: str,
        raw: bytes,
        since: datetime | None,
    ) -> list[Candidate]:
        parsed = feedparser.parse(BytesIO(raw))
        if parsed.bozo and not parsed.entries:
            msg = f"订阅源解析失败 {feed_url}: {parsed.get('bozo_exception')}"
            raise SearchError(msg)

        feed_title = (parsed.feed.get("title") or feed_url).strip()
        cutoff = as_naive_utc(since) if since else None

        candidates: list[Candidate] = []
        for entry in parsed.entries:
            published_at = _parse_date(entry)
            if cutoff and published_at and published_at < cutoff:
                continue

            snippet = html_to_text(entry.get("summary") or entry.get("description") or "")
            content = html_to_text(_entry_content(entry)) or snippet

            candidates.append(
                Candidate(
                    title=(entry.get("title") or "").strip(),
                    url=(entry.get("link") or "").strip(),
                    snippet=snippet,
                    content=content,
                    published_at=published_at,
                    source=feed_title,
                )
            )

        return candidates

    async def fetch_feeds(
        self,
        feed_urls: list[str],
        since: datetime | None = None,
    ) -> list[Candidate]:
        """并发抓取多个订阅源，结果按 feed_urls 顺序拼接，单个失败不影响其他."""

        async def fetch_one(url: str) -> list[Candidate]:
            try:
                return await self.fetch_feed(url, since)
            except Exception as e:
                logger.warning(f"订阅源抓取失败，跳过: {url} - {e}")
                return []

        results = await asyncio.gather(*(fetch_one(url) for url in feed_urls))
        return [candidate for batch in results for candidate in batch]
