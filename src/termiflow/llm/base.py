"""LLM 抽象基类."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from pydantic import BaseModel


class ProviderError(Exception):
    """LLM 服务调用错误."""


class Message(BaseModel):
    """对话消息."""

    role: str  # "system" | "user" | "assistant"
    content: str


class Usage(BaseModel):
    """Token 用量."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class CompletionResponse(BaseModel):
    """完整响应."""

    content: str
    finish_reason: str = ""
    usage: Usage = Usage()


class StreamChunk(BaseModel):
    """流式响应片段，done 或 error 表示流结束."""

    content: str = ""
    done: bool = False
    error: str | None = None


class LLMConfig(BaseModel):
    """LLM 配置."""

    model: str
    temperature: float = 0.7
    max_tokens: int = 2000


class LLMProvider(ABC):
    """LLM 服务提供者抽象基类."""

    name: str = "base"

    def __init__(self, config: LLMConfig) -> None:
        self.config = config

    def available(self) -> bool:
        """是否已配置可用."""
        return True

    async def close(self) -> None:
        """释放底层连接."""
        return None

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> CompletionResponse:
        """同步对话，返回完整响应."""
        ...

    @abstractmethod
    def stream(
        self,
        messages: list[Message],
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> AsyncIterator[StreamChunk]:
        """流式对话，逐步返回响应片段."""
        ...

    def _max_tokens(self, max_tokens: int | None) -> int:
        return max_tokens if max_tokens is not None else self.config.max_tokens

    def _temperature(self, temperature: float | None) -> float:
        return temperature if temperature is not None else self.config.temperature
