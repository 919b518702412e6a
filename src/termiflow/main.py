"""termiflow 主应用入口."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from termiflow.api import ask, feed, subscriptions, topics
from termiflow.config import get_settings
from termiflow.models.database import close_db, init_db
from termiflow.scheduler import create_scheduler, shutdown_scheduler

# 配置日志
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """应用生命周期管理."""
    app_settings = get_settings()

    logger.info("正在初始化数据库...")
    await init_db(app_settings.database_url)

    logger.info("正在启动定时任务...")
    create_scheduler(app_settings)

    logger.info(f"termiflow 启动完成！LLM Provider: {app_settings.llm_provider}")
    yield

    logger.info("正在关闭...")
    await shutdown_scheduler()
    await close_db()
    logger.info("termiflow 已关闭")


app = FastAPI(
    title="termiflow",
    description="话题订阅与 AI 策展 - 搜索、RSS 聚合、相关性评分与摘要",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册路由
app.include_router(topics.router)
app.include_router(subscriptions.router)
app.include_router(feed.router)
app.include_router(ask.router)


@app.get("/")
async def root() -> dict:
    """根路径."""
    return {
        "name": "termiflow",
        "version": "0.1.0",
        "description": "话题订阅与 AI 策展",
    }


@app.get("/health")
async def health() -> dict:
    """健康检查."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "termiflow.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
