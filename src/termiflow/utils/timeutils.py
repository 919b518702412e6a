"""时间工具.

数据库中统一存储不带时区的 UTC 时间.
"""

from datetime import UTC, datetime


def utcnow() -> datetime:
    """当前 UTC 时间（naive）."""
    return datetime.now(UTC).replace(tzinfo=None)


def as_naive_utc(value: datetime) -> datetime:
    """将任意 datetime 转换为 naive UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)
