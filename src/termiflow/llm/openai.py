"""OpenAI LLM Provider."""

from collections.abc import AsyncIterator
from typing import Any

from openai import AsyncOpenAI, OpenAIError

from termiflow.llm.base import (
    CompletionResponse,
    LLMConfig,
    LLMProvider,
    Message,
    ProviderError,
    StreamChunk,
    Usage,
)


class OpenAIProvider(LLMProvider):
    """OpenAI API Provider（支持所有 OpenAI 兼容接口）."""

    name = "openai"

    def __init__(
        self,
        config: LLMConfig,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
    ) -> None:
        super().__init__(config)
        self.api_key = api_key
        self.client = AsyncOpenAI(api_key=api_key or "missing", base_url=base_url)

    def available(self) -> bool:
        return bool(self.api_key)

    async def close(self) -> None:
        await self.client.close()

    async def complete(
        self,
        messages: list[Message],
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> CompletionResponse:
        """同步对话，返回完整响应."""
        openai_messages: list[dict[str, Any]] = [
            {"role": m.role, "content": m.content} for m in messages
        ]

        try:
            response = await self.client.chat.completions.create(
                model=self.config.model,
                messages=openai_messages,
                temperature=self._temperature(temperature),
                max_tokens=self._max_tokens(max_tokens),
            )
        except OpenAIError as e:
            msg = f"OpenAI 调用失败: {e}"
            raise ProviderError(msg) from e

        if not response.choices:
            msg = "OpenAI 返回空响应"
            raise ProviderError(msg)

        choice = response.choices[0]
        usage = Usage()
        if response.usage:
            usage = Usage(
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
                total_tokens=response.usage.total_tokens,
            )

        return CompletionResponse(
            content=choice.message.content or "",
            finish_reason=choice.finish_reason or "",
            usage=usage,
        )

    async def stream(
        self,
        messages: list[Message],
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> AsyncIterator[StreamChunk]:
        """流式对话，逐步返回响应片段."""
        openai_messages: list[dict[str, Any]] = [
            {"role": m.role, "content": m.content} for m in messages
        ]

        try:
            stream = await self.client.chat.completions.create(
                model=self.config.model,
                messages=openai_messages,
                temperature=self._temperature(temperature),
                max_tokens=self._max_tokens(max_tokens),
                stream=True,
            )
            async for chunk in stream:
                if chunk.choices and chunk.choices[0].delta.content:
                    yield StreamChunk(content=chunk.choices[0].delta.content)
        except OpenAIError as e:
            yield StreamChunk(error=str(e), done=True)
            return

        yield StreamChunk(done=True)
