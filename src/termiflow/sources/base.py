"""内容来源抽象."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Literal

from pydantic import BaseModel

TimeRange = Literal["day", "week", "month", "year"]


class SearchError(Exception):
    """搜索服务错误."""


class Candidate(BaseModel):
    """一次刷新中收集到的候选内容."""

    title: str = ""
    url: str = ""
    snippet: str = ""
    content: str = ""
    published_at: datetime | None = None
    source: str = ""


class SearchProvider(ABC):
    """Web 搜索服务抽象基类."""

    name: str = "base"

    @abstractmethod
    def available(self) -> bool:
        """是否已配置可用."""
        ...

    @abstractmethod
    async def search(
        self,
        query: str,
        max_results: int = 10,
        time_range: TimeRange = "week",
    ) -> list[Candidate]:
        """执行搜索."""
        ...

    async def close(self) -> None:
        """释放底层连接."""
        return None
