"""候选内容去重."""

from collections.abc import Iterable

from termiflow.sources.base import Candidate


def dedup_by_url(candidates: Iterable[Candidate]) -> list[Candidate]:
    """按 URL 去重，保留首次出现的候选；URL 为空的候选互不去重."""
    seen: set[str] = set()
    unique: list[Candidate] = []

    for candidate in candidates:
        if candidate.url:
            if candidate.url in seen:
                continue
            seen.add(candidate.url)
        unique.append(candidate)

    return unique
