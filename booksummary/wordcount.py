"""Word counting over book chapters, with a small configuration."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass
class WordcountConfig:
    """Settings from the ``output.wordcount`` table."""

    ignores: list[str] = field(default_factory=list)
    deny_odds: bool = False


class OddWordCountError(ValueError):
    """A chapter has an odd number of words while odd counts are denied."""

    def __init__(self, name: str, words: int, counts: list[tuple[str, int]]):
        super().__init__(f"{name} has an odd number of words!")
        self.name = name
        self.words = words
        self.counts = counts


def parse_config(data: Any) -> WordcountConfig:
    """Read a config table with kebab-case keys.

    Missing keys take their defaults; a table that does not fit yields the
    default config as a whole.
    """
    if data is None or not isinstance(data, Mapping):
        return WordcountConfig()
    ignores = data.get("ignores", [])
    deny_odds = data.get("deny-odds", False)
    if not isinstance(ignores, list) or not all(isinstance(n, str) for n in ignores):
        return WordcountConfig()
    if not isinstance(deny_odds, bool):
        return WordcountConfig()
    return WordcountConfig(list(ignores), deny_odds)


def count_words(text: str) -> int:
    """Count whitespace-separated words."""
    return len(text.split())


def count_chapters(
    chapters: Iterable[tuple[str, str]], config: WordcountConfig | None = None
) -> list[tuple[str, int]]:
    """Count the words of each ``(name, content)`` chapter not ignored.

    Raises :class:`OddWordCountError` at the first odd count when the
    config denies them; the error carries the counts made so far.
    """
    config = config or WordcountConfig()
    counts: list[tuple[str, int]] = []
    for name, content in chapters:
        if name in config.ignores:
            continue
        words = count_words(content)
        counts.append((name, words))
        if config.deny_odds and words % 2 == 1:
            raise OddWordCountError(name, words, counts)
    return counts