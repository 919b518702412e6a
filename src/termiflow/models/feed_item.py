"""FeedItem 策展条目模型."""

import json
from datetime import datetime

from sqlmodel import Field, SQLModel

from termiflow.utils.timeutils import utcnow


class FeedItem(SQLModel, table=True):
    """经过评分、摘要后的订阅内容."""

    __tablename__ = "feed_items"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    subscription_id: int = Field(
        foreign_key="subscriptions.id", index=True, description="所属订阅"
    )
    title: str = Field(description="标题")
    summary: str = Field(default="", description="AI 生成摘要")
    content: str = Field(default="", description="截断后的正文")
    source_name: str = Field(default="", description="来源名称")
    source_url: str = Field(default="", index=True, description="原文链接")
    published_at: datetime | None = Field(default=None, description="发布时间")
    fetched_at: datetime = Field(default_factory=utcnow, description="抓取时间")
    is_read: bool = Field(default=False, description="是否已读")
    relevance_score: float = Field(default=0.0, ge=0, le=1, description="相关性评分")
    tags: str = Field(default="[]", description="AI 生成标签 (JSON 数组)")

    def get_tags(self) -> list[str]:
        """解析标签列表."""
        if not self.tags or self.tags == "null":
            return []
        return list(json.loads(self.tags))
