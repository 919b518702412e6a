"""Ollama LLM Provider."""

import json
from collections.abc import AsyncIterator
from typing import Any

import httpx

from termiflow.llm.base import (
    CompletionResponse,
    LLMConfig,
    LLMProvider,
    Message,
    ProviderError,
    StreamChunk,
    Usage,
)


class OllamaProvider(LLMProvider):
    """Ollama 本地模型 Provider."""

    name = "ollama"

    def __init__(
        self,
        config: LLMConfig,
        host: str = "http://localhost:11434",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(config)
        self.host = host.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=120.0)

    def available(self) -> bool:
        return bool(self.host)

    async def close(self) -> None:
        """关闭客户端."""
        await self._client.aclose()

    def _payload(
        self,
        messages: list[Message],
        max_tokens: int | None,
        temperature: float | None,
        stream: bool,
    ) -> dict[str, Any]:
        return {
            "model": self.config.model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "stream": stream,
            "options": {
                "temperature": self._temperature(temperature),
                "num_predict": self._max_tokens(max_tokens),
            },
        }

    async def complete(
        self,
        messages: list[Message],
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> CompletionResponse:
        """同步对话，返回完整响应."""
        url = f"{self.host}/api/chat"
        payload = self._payload(messages, max_tokens, temperature, stream=False)

        try:
            response = await self._client.post(url, json=payload)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, json.JSONDecodeError) as e:
            msg = f"Ollama 调用失败: {e}"
            raise ProviderError(msg) from e

        prompt_tokens = int(data.get("prompt_eval_count", 0))
        completion_tokens = int(data.get("eval_count", 0))
        return CompletionResponse(
            content=data.get("message", {}).get("content", ""),
            finish_reason=data.get("done_reason", "stop"),
            usage=Usage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            ),
        )

    async def stream(
        self,
        messages: list[Message],
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> AsyncIterator[StreamChunk]:
        """流式对话，逐步返回响应片段."""
        url = f"{self.host}/api/chat"
        payload = self._payload(messages, max_tokens, temperature, stream=True)

        try:
            async with self._client.stream("POST", url, json=payload) as response:
                response.raise_for_status()
                async for line in response.aiter_lines():
                    if not line:
                        continue
                    data = json.loads(line)
                    content = data.get("message", {}).get("content", "")
                    if content:
                        yield StreamChunk(content=content)
                    if data.get("done", False):
                        break
        except (httpx.HTTPError, json.JSONDecodeError) as e:
            yield StreamChunk(error=str(e), done=True)
            return

        yield StreamChunk(done=True)
