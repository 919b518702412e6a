"""相关性评分、摘要与标签提取.

所有方法都采用 fail-open 策略：LLM 调用失败、超时或输出无法解析时返回
安全默认值，不向调用方抛出异常（取消除外）。
"""

import asyncio
import logging
import math

from termiflow.llm.base import LLMProvider, Message

logger = logging.getLogger(__name__)

DEFAULT_SCORE = 0.5
MAX_PROMPT_CONTENT_LENGTH = 8000

SCORE_PROMPT_TEMPLATE = """You are evaluating if a piece of content is relevant to a user's topic subscription.

Topic: {topic}
Content Title: {title}
Content Snippet: {snippet}

Rate the relevance from 0.0 to 1.0 where:
- 0.0-0.3: Not relevant
- 0.4-0.6: Somewhat relevant
- 0.7-0.9: Highly relevant
- 1.0: Perfectly relevant

Respond with only a number between 0.0 and 1.0."""

SUMMARY_PROMPT_TEMPLATE = """Summarize the following article in 2-3 sentences for a developer interested in "{topic}".
Focus on the key technical insights and why it matters.

Title: {title}
Content: {content}

Summary:"""

TAGS_PROMPT_TEMPLATE = """Extract 2-4 relevant technical tags from this content. Return only lowercase tags separated by commas.

Title: {title}
Content: {content}

Tags:"""


def parse_score(text: str) -> float:
    """解析评分文本，无法解析时返回默认分，超出范围时截断到 [0, 1]."""
    try:
        score = float(text.strip())
    except ValueError:
        return DEFAULT_SCORE

    if math.isnan(score):
        return DEFAULT_SCORE
    return min(1.0, max(0.0, score))


def parse_tags(text: str) -> list[str]:
    """解析逗号分隔的标签列表."""
    tags: list[str] = []
    for fragment in text.strip().split(","):
        tag = fragment.strip().lower().removeprefix("#").strip()
        if tag:
            tags.append(tag)
    return tags


def _clip(content: str) -> str:
    if len(content) > MAX_PROMPT_CONTENT_LENGTH:
        return content[:MAX_PROMPT_CONTENT_LENGTH]
    return content


async def _complete_text(
    provider: LLMProvider,
    prompt: str,
    max_tokens: int,
    temperature: float,
    timeout: float | None,
) -> str:
    messages = [Message(role="user", content=prompt)]
    response = await asyncio.wait_for(
        provider.complete(messages, max_tokens=max_tokens, temperature=temperature),
        timeout=timeout,
    )
    return response.content


class RelevanceScorer:
    """基于 LLM 的相关性评分器."""

    def __init__(self, provider: LLMProvider, timeout: float | None = 60) -> None:
        self.provider = provider
        self.timeout = timeout

    async def score(self, topic: str, title: str, snippet: str) -> float:
        """返回 0.0-1.0 的相关性评分."""
        prompt = SCORE_PROMPT_TEMPLATE.format(topic=topic, title=title, snippet=snippet)
        try:
            text = await _complete_text(
                self.provider, prompt, max_tokens=10, temperature=0.1, timeout=self.timeout
            )
        except Exception as e:
            logger.warning(f"相关性评分失败，使用默认分 {DEFAULT_SCORE}: {title} - {e}")
            return DEFAULT_SCORE

        return parse_score(text)


class Summarizer:
    """基于 LLM 的摘要与标签生成器."""

    def __init__(self, provider: LLMProvider, timeout: float | None = 60) -> None:
        self.provider = provider
        self.timeout = timeout

    async def summarize(self, topic: str, title: str, content: str) -> str:
        """生成 2-3 句摘要，失败时返回空字符串."""
        prompt = SUMMARY_PROMPT_TEMPLATE.format(
            topic=topic, title=title, content=_clip(content)
        )
        try:
            text = await _complete_text(
                self.provider, prompt, max_tokens=200, temperature=0.5, timeout=self.timeout
            )
        except Exception as e:
            logger.warning(f"摘要生成失败: {title} - {e}")
            return ""

        return text.strip()

    async def extract_tags(self, title: str, content: str) -> list[str]:
        """提取 2-4 个小写标签，失败时返回空列表."""
        prompt = TAGS_PROMPT_TEMPLATE.format(title=title, content=_clip(content))
        try:
            text = await _complete_text(
                self.provider, prompt, max_tokens=50, temperature=0.3, timeout=self.timeout
            )
        except Exception as e:
            logger.warning(f"标签提取失败: {title} - {e}")
            return []

        return parse_tags(text)
