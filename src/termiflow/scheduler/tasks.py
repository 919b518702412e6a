"""定时任务定义."""

import logging
from datetime import timedelta

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from termiflow.config import Settings

logger = logging.getLogger(__name__)

_scheduler: AsyncIOScheduler | None = None


async def refresh_task(settings: Settings) -> None:
    """刷新任务：刷新所有到期的订阅."""
    from termiflow.core.factory import build_scheduler
    from termiflow.llm import create_llm_provider
    from termiflow.models.database import async_session_maker
    from termiflow.sources import create_search_provider

    llm_provider = create_llm_provider(settings)
    if not llm_provider.available():
        logger.warning(f"LLM Provider '{llm_provider.name}' 未配置，跳过刷新")
        await llm_provider.close()
        return

    search_provider = create_search_provider(settings)
    scheduler = build_scheduler(
        settings, async_session_maker(), llm_provider, search_provider
    )

    logger.info("开始刷新订阅...")
    try:
        report = await scheduler.refresh_all_subscriptions()
        logger.info(f"刷新任务完成: 刷新={report.refreshed}, 条目={report.items}")
    except Exception as e:
        logger.exception(f"刷新任务失败: {e}")
    finally:
        await scheduler.close()
        await llm_provider.close()
        if search_provider is not None:
            await search_provider.close()


async def cleanup_task(settings: Settings) -> None:
    """清理任务：删除超过保留期的条目."""
    from termiflow.core.store import FeedStore
    from termiflow.models.database import async_session_maker
    from termiflow.utils.timeutils import utcnow

    store = FeedStore(async_session_maker())
    older_than = utcnow() - timedelta(days=settings.feed_retention_days)
    try:
        count = await store.delete_old_items(older_than)
        logger.info(f"清理任务完成: 删除 {count} 条")
    except Exception as e:
        logger.exception(f"清理任务失败: {e}")


def create_scheduler(settings: Settings) -> AsyncIOScheduler:
    """创建并启动定时任务调度器."""
    global _scheduler

    _scheduler = AsyncIOScheduler()

    # 同一时间只允许一个刷新任务，避免同一订阅被并发刷新
    _scheduler.add_job(
        refresh_task,
        "interval",
        minutes=settings.refresh_interval_minutes,
        args=[settings],
        id="refresh_task",
        name="订阅刷新",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )

    # 启动时立即执行一次刷新
    _scheduler.add_job(
        refresh_task,
        "date",  # 一次性任务
        args=[settings],
        id="refresh_task_initial",
        name="初始刷新",
    )

    _scheduler.add_job(
        cleanup_task,
        "interval",
        hours=24,
        args=[settings],
        id="cleanup_task",
        name="过期条目清理",
        replace_existing=True,
    )

    _scheduler.start()
    logger.info(
        f"定时任务调度器已启动，刷新间隔: {settings.refresh_interval_minutes} 分钟"
    )

    return _scheduler


async def shutdown_scheduler() -> None:
    """关闭定时任务调度器."""
    global _scheduler
    if _scheduler:
        _scheduler.shutdown(wait=False)
        logger.info("定时任务调度器已关闭")
        _scheduler = None
