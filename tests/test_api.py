"""测试 HTTP API."""

from collections.abc import AsyncGenerator

import pytest
from httpx import AsyncClient

from fakes import FakeLLMProvider
from termiflow.api import ask as ask_api
from termiflow.api.deps import get_llm_provider, get_search_provider
from termiflow.core.store import FeedItemFilter, FeedStore
from termiflow.main import app
from termiflow.models.feed_item import FeedItem


@pytest.fixture
def llm_override() -> FakeLLMProvider:
    """用假 LLM 替换依赖，不配置搜索."""
    llm = FakeLLMProvider(score="0.9", summary="X", tags="rust, async")

    async def _llm() -> AsyncGenerator[FakeLLMProvider, None]:
        yield llm

    async def _search() -> AsyncGenerator[None, None]:
        yield None

    app.dependency_overrides[get_llm_provider] = _llm
    app.dependency_overrides[get_search_provider] = _search
    return llm


class TestBasics:
    """测试基础端点."""

    async def test_health(self, client: AsyncClient) -> None:
        """健康检查."""
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    async def test_topics(self, client: AsyncClient, store: FeedStore) -> None:
        """列出预置话题并标注订阅状态."""
        await store.create_subscription("webgpu")

        response = await client.get("/api/topics")

        data = response.json()
        assert data["total"] == 6
        by_name = {t["name"]: t for t in data["items"]}
        assert by_name["webgpu"]["subscribed"] is True
        assert by_name["rust-lang"]["subscribed"] is False
        assert by_name["silicon-chips"]["has_default_rss"] is True


class TestSubscriptionsApi:
    """测试订阅管理端点."""

    async def test_subscribe_and_list(self, client: AsyncClient) -> None:
        """订阅后出现在列表中."""
        response = await client.post(
            "/api/subscriptions", json={"topic": "rust-lang", "frequency": "hourly"}
        )
        assert response.status_code == 201
        assert response.json()["frequency"] == "hourly"
        assert response.json()["category"] == "rust-lang"

        response = await client.get("/api/subscriptions")
        assert [s["topic"] for s in response.json()["items"]] == ["rust-lang"]

    async def test_subscribe_defaults_and_conflict(self, client: AsyncClient) -> None:
        """未指定频率时使用默认值，重复订阅返回 409."""
        response = await client.post("/api/subscriptions", json={"topic": "zig"})
        assert response.json()["frequency"] == "daily"
        assert response.json()["sources"] == ["tavily", "rss"]

        response = await client.post("/api/subscriptions", json={"topic": "zig"})
        assert response.status_code == 409

    async def test_subscribe_rejects_invalid_input(self, client: AsyncClient) -> None:
        """空话题返回 400，非法频率返回 422."""
        assert (await client.post("/api/subscriptions", json={"topic": "  "})).status_code == 400
        response = await client.post(
            "/api/subscriptions", json={"topic": "zig", "frequency": "monthly"}
        )
        assert response.status_code == 422

    async def test_unsubscribe(self, client: AsyncClient, store: FeedStore) -> None:
        """取消订阅，未订阅时返回 404."""
        await store.create_subscription("rust-lang")

        assert (await client.delete("/api/subscriptions/rust-lang")).status_code == 200
        assert (await client.delete("/api/subscriptions/rust-lang")).status_code == 404

    async def test_list_includes_item_counts(
        self, client: AsyncClient, store: FeedStore
    ) -> None:
        """订阅列表包含条目总数和未读数."""
        subscription = await store.create_subscription("rust-lang")
        assert subscription.id is not None
        first = await store.create_feed_item(
            FeedItem(subscription_id=subscription.id, title="a", source_url="https://r.com/a")
        )
        await store.create_feed_item(
            FeedItem(subscription_id=subscription.id, title="b", source_url="https://r.com/b")
        )
        await store.mark_items_read([first])

        response = await client.get("/api/subscriptions")

        item = response.json()["items"][0]
        assert item["total_items"] == 2
        assert item["unread_items"] == 1

    async def test_unsubscribe_all(self, client: AsyncClient, store: FeedStore) -> None:
        """取消全部订阅并删除所有条目."""
        rust = await store.create_subscription("rust-lang")
        await store.create_subscription("webgpu")
        assert rust.id is not None
        await store.create_feed_item(
            FeedItem(subscription_id=rust.id, title="a", source_url="https://r.com/a")
        )

        response = await client.delete("/api/subscriptions")

        assert response.status_code == 200
        assert response.json() == {"deleted": 2}
        assert (await client.get("/api/subscriptions")).json()["total"] == 0
        assert await store.item_exists_by_url("https://r.com/a") is False

    async def test_refresh(
        self, client: AsyncClient, store: FeedStore, llm_override: FakeLLMProvider
    ) -> None:
        """手动刷新：无搜索源、无默认 RSS 时没有条目，但刷新时间被更新."""
        await store.create_subscription("rust-lang")

        response = await client.post("/api/subscriptions/refresh")

        assert response.status_code == 200
        assert response.json() == {
            "refreshed": [{"topic": "rust-lang", "items": 0}],
            "failed": [],
            "total_items": 0,
        }
        subscription = await store.get_subscription("rust-lang")
        assert subscription is not None
        assert subscription.last_fetched_at is not None

    async def test_refresh_unknown_topic(
        self, client: AsyncClient, llm_override: FakeLLMProvider
    ) -> None:
        """刷新未订阅的话题返回 404."""
        response = await client.post("/api/subscriptions/refresh", params={"topic": "nope"})
        assert response.status_code == 404


class TestFeedApi:
    """测试条目端点."""

    async def _seed(self, store: FeedStore) -> int:
        subscription = await store.create_subscription("rust-lang")
        assert subscription.id is not None
        await store.create_feed_item(
            FeedItem(
                subscription_id=subscription.id,
                title="Rust async",
                source_url="https://r.com/1",
                relevance_score=0.9,
                tags='["rust"]',
            )
        )
        await store.create_feed_item(
            FeedItem(
                subscription_id=subscription.id,
                title="Rust traits",
                source_url="https://r.com/2",
                relevance_score=0.6,
            )
        )
        return subscription.id

    async def test_get_feed(self, client: AsyncClient, store: FeedStore) -> None:
        """返回条目及所属话题."""
        await self._seed(store)

        response = await client.get("/api/feed")

        data = response.json()
        assert data["total"] == 2
        assert data["items"][0]["title"] == "Rust async"
        assert data["items"][0]["topic"] == "rust-lang"
        assert data["items"][0]["tags"] == ["rust"]

    async def test_get_feed_marks_read_by_default(
        self, client: AsyncClient, store: FeedStore
    ) -> None:
        """默认返回后标记为已读，mark_read=false 时保持未读."""
        await self._seed(store)

        response = await client.get("/api/feed", params={"mark_read": False})
        assert response.json()["total"] == 2
        assert len(await store.get_feed_items(FeedItemFilter(unread=True))) == 2

        response = await client.get("/api/feed")
        assert response.json()["total"] == 2
        assert await store.get_feed_items(FeedItemFilter(unread=True)) == []

    async def test_get_feed_mark_read(self, client: AsyncClient, store: FeedStore) -> None:
        """mark_read 后未读列表为空."""
        await self._seed(store)

        response = await client.get("/api/feed", params={"limit": 1, "mark_read": True})
        assert response.json()["total"] == 1

        unread = await store.get_feed_items(FeedItemFilter(unread=True))
        assert [i.title for i in unread] == ["Rust traits"]

    async def test_read_all(self, client: AsyncClient, store: FeedStore) -> None:
        """标记话题下全部已读."""
        await self._seed(store)

        response = await client.post("/api/feed/read-all", params={"topic": "rust-lang"})

        assert response.json()["marked"] == 2
        assert (await client.get("/api/feed")).json()["total"] == 0
        assert (await client.get("/api/feed", params={"unread": False})).json()["total"] == 2

    async def test_cleanup(self, client: AsyncClient, store: FeedStore) -> None:
        """新条目不会被清理."""
        await self._seed(store)

        response = await client.post("/api/feed/cleanup", params={"days": 7})

        assert response.json() == {"deleted": 0, "retention_days": 7}


class TestAskApi:
    """测试问答端点."""

    async def test_ask(self, client: AsyncClient, llm_override: FakeLLMProvider) -> None:
        """返回回答，未配置搜索时没有来源."""
        response = await client.post("/api/ask", json={"question": "What is Rust?"})

        assert response.status_code == 200
        assert response.json() == {"answer": "The answer.", "sources": []}

    async def test_ask_empty_question(
        self, client: AsyncClient, llm_override: FakeLLMProvider
    ) -> None:
        """空问题返回 400."""
        response = await client.post("/api/ask", json={"question": ""})
        assert response.status_code == 400

    async def test_ask_stream(
        self, client: AsyncClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """流式返回纯文本."""
        monkeypatch.setattr(
            ask_api, "create_llm_provider", lambda settings: FakeLLMProvider(answer="a b c")
        )
        monkeypatch.setattr(ask_api, "create_search_provider", lambda settings: None)

        response = await client.post("/api/ask/stream", json={"question": "q"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == "a b c "
