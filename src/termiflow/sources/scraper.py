"""网页正文抓取，用于补全搜索结果的内容."""

import asyncio
import logging
import re
from concurrent.futures import ThreadPoolExecutor

from trafilatura import extract, fetch_url
from trafilatura.settings import use_config

from termiflow.sources.base import Candidate

logger = logging.getLogger(__name__)

# 内容低于该长度时认为需要抓取正文
MIN_CONTENT_LENGTH = 500


class PageScraper:
    """使用 trafilatura 提取网页正文."""

    def __init__(self, max_workers: int = 4) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max_workers)
        self._semaphore = asyncio.Semaphore(max_workers)
        self._config = use_config()
        self._config.set("DEFAULT", "USER_AGENT", "termiflow/1.0")

    def close(self) -> None:
        """关闭线程池."""
        self._executor.shutdown(wait=False)

    async def scrape(self, url: str) -> str | None:
        """
        抓取指定 URL 的正文.

        trafilatura 是同步库，这里用线程池包装成异步。
        """
        loop = asyncio.get_running_loop()
        async with self._semaphore:
            return await loop.run_in_executor(self._executor, self._scrape_sync, url)

    def _scrape_sync(self, url: str) -> str | None:
        downloaded = fetch_url(url, config=self._config)
        if not downloaded:
            return None

        text = extract(
            downloaded,
            include_comments=False,
            include_tables=True,
            output_format="txt",
            favor_precision=False,
        )
        if not text:
            return None

        # 移除多余空行和控制字符
        text = re.sub(r"\n{3,}", "\n\n", text)
        text = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f]", "", text)
        return text.strip()

    async def enrich(self, candidates: list[Candidate]) -> list[Candidate]:
        """为内容过短的候选补全正文，失败时保留原样."""

        async def enrich_one(candidate: Candidate) -> Candidate:
            if not candidate.url or len(candidate.content) >= MIN_CONTENT_LENGTH:
                return candidate
            try:
                text = await self.scrape(candidate.url)
            except Exception as e:
                logger.warning(f"正文抓取失败: {candidate.url} - {e}")
                return candidate
            if not text:
                return candidate
            return candidate.model_copy(update={"content": text})

        return list(await asyncio.gather(*(enrich_one(c) for c in candidates)))
