"""一次性问答：可选的搜索增强 + LLM 回答."""

import logging
from collections.abc import AsyncIterator

from pydantic import BaseModel

from termiflow.llm.base import LLMProvider, Message
from termiflow.sources.base import Candidate, SearchProvider

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful assistant that provides accurate, well-researched answers. "
    "Use the provided sources to inform your response. Be concise but thorough."
)


class AskResult(BaseModel):
    """问答结果."""

    answer: str
    sources: list[Candidate] = []


def build_prompt(question: str, sources: list[Candidate]) -> str:
    """构建带编号来源的提问."""
    parts: list[str] = []

    if sources:
        parts.append("Use the following sources to inform your answer:\n\n")
        for i, source in enumerate(sources, 1):
            parts.append(f"Source {i}: {source.title}\n")
            parts.append(f"URL: {source.url}\n")
            if source.snippet:
                parts.append(f"Content: {source.snippet}\n")
            parts.append("\n")
        parts.append("---\n\n")

    parts.append(f"Question: {question}")
    return "".join(parts)


class Asker:
    """问答服务."""

    def __init__(
        self,
        provider: LLMProvider,
        search_provider: SearchProvider | None = None,
        max_sources: int = 5,
    ) -> None:
        self.provider = provider
        self.search_provider = search_provider
        self.max_sources = max_sources

    async def ask(self, question: str) -> AskResult:
        """检索来源并生成完整回答，LLM 调用失败时抛出异常."""
        sources = await self._search(question)
        response = await self.provider.complete(
            self._build_messages(question, sources),
            max_tokens=2048,
            temperature=0.7,
        )
        return AskResult(answer=response.content, sources=sources)

    async def ask_stream(self, question: str) -> AsyncIterator[str]:
        """流式回答，逐步返回文本片段."""
        sources = await self._search(question)
        async for chunk in self.provider.stream(
            self._build_messages(question, sources),
            max_tokens=2048,
            temperature=0.7,
        ):
            if chunk.error:
                logger.warning(f"流式回答中断: {chunk.error}")
                break
            if chunk.content:
                yield chunk.content
            if chunk.done:
                break

    async def _search(self, question: str) -> list[Candidate]:
        if self.search_provider is None or not self.search_provider.available():
            return []
        try:
            return await self.search_provider.search(
                question, max_results=self.max_sources, time_range="week"
            )
        except Exception as e:
            logger.warning(f"问答检索失败，不使用来源: {e}")
            return []

    def _build_messages(self, question: str, sources: list[Candidate]) -> list[Message]:
        return [
            Message(role="system", content=SYSTEM_PROMPT),
            Message(role="user", content=build_prompt(question, sources)),
        ]
