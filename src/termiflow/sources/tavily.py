"""Tavily 搜索 API 客户端."""

from typing import Any

import httpx

from termiflow.sources.base import Candidate, SearchError, SearchProvider, TimeRange

TAVILY_API_URL = "https://api.tavily.com/search"

TIME_RANGE_DAYS: dict[str, int] = {
    "day": 1,
    "week": 7,
    "month": 30,
    "year": 365,
}


def time_range_to_days(time_range: str) -> int:
    """时间范围转换为天数，未知值按一周处理."""
    return TIME_RANGE_DAYS.get(time_range, 7)


class TavilyProvider(SearchProvider):
    """Tavily Web 搜索."""

    name = "tavily"

    def __init__(
        self,
        api_key: str,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = api_key
        self._client = client or httpx.AsyncClient(timeout=timeout)

    def available(self) -> bool:
        return bool(self.api_key)

    async def close(self) -> None:
        """关闭客户端."""
        await self._client.aclose()

    async def search(
        self,
        query: str,
        max_results: int = 10,
        time_range: TimeRange = "week",
    ) -> list[Candidate]:
        """执行搜索，返回候选内容列表."""
        payload: dict[str, Any] = {
            "api_key": self.api_key,
            "query": query,
            "search_depth": "advanced",
            "include_answer": False,
            "include_raw_content": False,
            "max_results": max_results or 5,
            "days": time_range_to_days(time_range),
        }

        try:
            response = await self._client.post(TAVILY_API_URL, json=payload)
        except httpx.HTTPError as e:
            msg = f"Tavily 请求失败: {e}"
            raise SearchError(msg) from e

        if response.status_code != 200:
            msg = f"Tavily API 错误: {response.status_code} - {response.text}"
            raise SearchError(msg)

        data = response.json()
        candidates: list[Candidate] = []
        for result in data.get("results", []):
            snippet = result.get("content", "")
            # 未抓取正文时以摘要片段作为正文
            candidates.append(
                Candidate(
                    title=result.get("title", ""),
                    url=result.get("url", ""),
                    snippet=snippet,
                    content=snippet,
                    source=self.name,
                )
            )
        return candidates
