"""核心业务逻辑."""

from termiflow.core.ask import Asker, AskResult
from termiflow.core.curator import CuratedItem, Curator
from termiflow.core.dedup import dedup_by_url
from termiflow.core.policy import is_due, time_range_for
from termiflow.core.scheduler import RefreshReport, Scheduler
from termiflow.core.store import FeedItemFilter, FeedStore

__all__ = [
    "AskResult",
    "Asker",
    "CuratedItem",
    "Curator",
    "FeedItemFilter",
    "FeedStore",
    "RefreshReport",
    "Scheduler",
    "dedup_by_url",
    "is_due",
    "time_range_for",
]
