"""LLM Provider 工厂."""

from termiflow.config import Settings
from termiflow.llm.anthropic import AnthropicProvider
from termiflow.llm.base import LLMConfig, LLMProvider
from termiflow.llm.ollama import OllamaProvider
from termiflow.llm.openai import OpenAIProvider

# 调用方未指定时使用的采样参数
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 2000


def _config_for(model: str) -> LLMConfig:
    return LLMConfig(
        model=model,
        temperature=DEFAULT_TEMPERATURE,
        max_tokens=DEFAULT_MAX_TOKENS,
    )


def create_llm_provider(settings: Settings) -> LLMProvider:
    """
    根据配置创建 LLM Provider.

    未识别的 llm_provider 按 openai 处理；Provider 是否可用由
    available() 判断，这里不校验 API Key。
    """
    provider = settings.llm_provider

    if provider == "ollama":
        return OllamaProvider(
            config=_config_for(settings.ollama_model),
            host=settings.ollama_host,
        )

    if provider == "anthropic":
        return AnthropicProvider(
            config=_config_for(settings.anthropic_model),
            api_key=settings.anthropic_api_key,
        )

    return OpenAIProvider(
        config=_config_for(settings.openai_model),
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
    )
