"""LLM 抽象层."""

from termiflow.llm.anthropic import AnthropicProvider
from termiflow.llm.base import (
    CompletionResponse,
    LLMConfig,
    LLMProvider,
    Message,
    ProviderError,
    StreamChunk,
    Usage,
)
from termiflow.llm.factory import create_llm_provider
from termiflow.llm.ollama import OllamaProvider
from termiflow.llm.openai import OpenAIProvider
from termiflow.llm.summarize import RelevanceScorer, Summarizer

__all__ = [
    "AnthropicProvider",
    "CompletionResponse",
    "LLMConfig",
    "LLMProvider",
    "Message",
    "OllamaProvider",
    "OpenAIProvider",
    "ProviderError",
    "RelevanceScorer",
    "StreamChunk",
    "Summarizer",
    "Usage",
    "create_llm_provider",
]
