"""问答 API."""

from collections.abc import AsyncIterator

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from termiflow.api.deps import get_llm_provider, get_search_provider
from termiflow.config import get_settings
from termiflow.core.factory import build_asker
from termiflow.llm import LLMProvider, ProviderError, create_llm_provider
from termiflow.sources import SearchProvider, create_search_provider

router = APIRouter(prefix="/api/ask", tags=["ask"])


class AskRequest(BaseModel):
    """问答请求."""

    question: str


@router.post("")
async def ask(
    request: AskRequest,
    llm_provider: LLMProvider = Depends(get_llm_provider),
    search_provider: SearchProvider | None = Depends(get_search_provider),
) -> dict:
    """提问并返回完整回答."""
    if not request.question.strip():
        raise HTTPException(status_code=400, detail="问题不能为空")
    if not llm_provider.available():
        raise HTTPException(
            status_code=503, detail=f"LLM Provider '{llm_provider.name}' 未配置"
        )

    asker = build_asker(get_settings(), llm_provider, search_provider)
    try:
        result = await asker.ask(request.question)
    except ProviderError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e

    return {
        "answer": result.answer,
        "sources": [
            {"title": s.title, "url": s.url, "snippet": s.snippet}
            for s in result.sources
        ],
    }


@router.post("/stream")
async def ask_stream(request: AskRequest) -> StreamingResponse:
    """流式回答（text/plain）."""
    if not request.question.strip():
        raise HTTPException(status_code=400, detail="问题不能为空")

    settings = get_settings()
    llm_provider = create_llm_provider(settings)
    if not llm_provider.available():
        await llm_provider.close()
        raise HTTPException(
            status_code=503, detail=f"LLM Provider '{llm_provider.name}' 未配置"
        )

    search_provider = create_search_provider(settings)
    asker = build_asker(settings, llm_provider, search_provider)

    # Provider 的生命周期跟随响应流
    async def generate() -> AsyncIterator[str]:
        try:
            async for chunk in asker.ask_stream(request.question):
                yield chunk
        finally:
            await llm_provider.close()
            if search_provider is not None:
                await search_provider.close()

    return StreamingResponse(generate(), media_type="text/plain; charset=utf-8")
