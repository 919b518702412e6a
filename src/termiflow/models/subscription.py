"""Subscription 订阅模型."""

import json
from datetime import datetime

from sqlmodel import Field, SQLModel

from termiflow.utils.timeutils import utcnow

FREQUENCIES = ("hourly", "daily", "weekly")
DEFAULT_SOURCES = ["tavily", "rss"]


class Subscription(SQLModel, table=True):
    """话题订阅."""

    __tablename__ = "subscriptions"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    topic: str = Field(unique=True, index=True, description="订阅话题")
    category: str | None = Field(default=None, description="关联的预置分类")
    frequency: str = Field(default="daily", description="刷新频率: hourly|daily|weekly")
    sources: str = Field(
        default=json.dumps(DEFAULT_SOURCES), description="启用的来源 (JSON 数组)"
    )
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    last_fetched_at: datetime | None = Field(default=None, description="上次刷新时间")
    is_active: bool = Field(default=True, description="是否启用")

    def get_sources(self) -> list[str]:
        """解析来源列表."""
        if not self.sources or self.sources == "null":
            return []
        return list(json.loads(self.sources))

    def set_sources(self, sources: list[str]) -> None:
        self.sources = json.dumps(sources)
