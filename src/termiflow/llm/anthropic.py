"""Anthropic Messages API Provider."""

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

ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"


class AnthropicProvider(LLMProvider):
    """Anthropic Claude Provider."""

    name = "anthropic"

    def __init__(
        self,
        config: LLMConfig,
        api_key: str,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(config)
        self.api_key = api_key
        self._client = client or httpx.AsyncClient(timeout=120.0)

    def available(self) -> bool:
        return bool(self.api_key)

    async def close(self) -> None:
        """关闭客户端."""
        await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        return {
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }

    def _payload(
        self,
        messages: list[Message],
        max_tokens: int | None,
        temperature: float | None,
        stream: bool,
    ) -> dict[str, Any]:
        # system 消息需要放在顶层字段
        system_parts = [m.content for m in messages if m.role == "system"]
        payload: dict[str, Any] = {
            "model": self.config.model,
            "max_tokens": self._max_tokens(max_tokens),
            "temperature": self._temperature(temperature),
            "messages": [
                {"role": m.role, "content": m.content}
                for m in messages
                if m.role != "system"
            ],
        }
        if system_parts:
            payload["system"] = "\n\n".join(system_parts)
        if stream:
            payload["stream"] = True
        return payload

    async def complete(
        self,
        messages: list[Message],
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> CompletionResponse:
        """同步对话，返回完整响应."""
        payload = self._payload(messages, max_tokens, temperature, stream=False)

        try:
            response = await self._client.post(
                ANTHROPIC_API_URL, json=payload, headers=self._headers()
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, json.JSONDecodeError) as e:
            msg = f"Anthropic 调用失败: {e}"
            raise ProviderError(msg) from e

        text = "".join(
            block.get("text", "")
            for block in data.get("content", [])
            if block.get("type") == "text"
        )
        usage = data.get("usage", {})
        input_tokens = int(usage.get("input_tokens", 0))
        output_tokens = int(usage.get("output_tokens", 0))

        return CompletionResponse(
            content=text,
            finish_reason=data.get("stop_reason") or "",
            usage=Usage(
                prompt_tokens=input_tokens,
                completion_tokens=output_tokens,
                total_tokens=input_tokens + output_tokens,
            ),
        )

    async def stream(
        self,
        messages: list[Message],
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> AsyncIterator[StreamChunk]:
        """流式对话，解析 SSE 事件."""
        payload = self._payload(messages, max_tokens, temperature, stream=True)

        try:
            async with self._client.stream(
                "POST", ANTHROPIC_API_URL, json=payload, headers=self._headers()
            ) as response:
                response.raise_for_status()
                async for line in response.aiter_lines():
                    if not line.startswith("data:"):
                        continue
                    event = json.loads(line[5:].strip())
                    event_type = event.get("type")
                    if event_type == "content_block_delta":
                        text = event.get("delta", {}).get("text", "")
                        if text:
                            yield StreamChunk(content=text)
                    elif event_type == "message_stop":
                        break
                    elif event_type == "error":
                        error = event.get("error", {}).get("message", "unknown error")
                        yield StreamChunk(error=error, done=True)
                        return
        except (httpx.HTTPError, json.JSONDecodeError) as e:
            yield StreamChunk(error=str(e), done=True)
            return

        yield StreamChunk(done=True)
