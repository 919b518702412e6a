"""订阅刷新策略."""

from datetime import datetime, timedelta

from termiflow.models.subscription import Subscription
from termiflow.sources.base import TimeRange
from termiflow.utils.timeutils import as_naive_utc, utcnow

REFRESH_INTERVALS: dict[str, timedelta] = {
    "hourly": timedelta(hours=1),
    "daily": timedelta(hours=24),
    "weekly": timedelta(days=7),
}

SEARCH_TIME_RANGES: dict[str, TimeRange] = {
    "hourly": "day",
    "daily": "week",
    "weekly": "month",
}


def refresh_interval(frequency: str) -> timedelta:
    """频率对应的刷新间隔，未知频率按 daily 处理."""
    return REFRESH_INTERVALS.get(frequency, REFRESH_INTERVALS["daily"])


def is_due(subscription: Subscription, now: datetime | None = None) -> bool:
    """判断订阅是否需要刷新，从未刷新过的订阅总是需要刷新."""
    if subscription.last_fetched_at is None:
        return True

    now = as_naive_utc(now) if now else utcnow()
    elapsed = now - as_naive_utc(subscription.last_fetched_at)
    return elapsed >= refresh_interval(subscription.frequency)


def time_range_for(frequency: str) -> TimeRange:
    """频率对应的搜索时间范围，未知频率按 week 处理."""
    return SEARCH_TIME_RANGES.get(frequency, "week")
