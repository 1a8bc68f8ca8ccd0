"""Data types describing a parsed ``SUMMARY.md``."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Union


@dataclass
class SectionNumber:
    """A hierarchical chapter number such as ``1.2.``."""

    parts: list[int] = field(default_factory=list)

    def child(self, index: int) -> SectionNumber:
        """Return the number of the ``index``-th sub-section of this one."""
        return SectionNumber([*self.parts, index])

    def __iter__(self) -> Iterator[int]:
        return iter(self.parts)

    def __len__(self) -> int:
        return len(self.parts)

    def __str__(self) -> str:
        return "".join(f"{part}." for part in self.parts)


@dataclass
class Link:
    """An entry in the summary, roughly ``[Some section](./path/to/file.md)``.

    A ``location`` of ``None`` marks a draft chapter.
    """

    name: str = ""
    location: Optional[str] = ""
    number: Optional[SectionNumber] = None
    nested_items: list[SummaryItem] = field(default_factory=list)

    @property
    def is_draft(self) -> bool:
        """Whether this chapter has no source file yet."""
        return self.location is None


@dataclass(frozen=True)
class Separator:
    """A horizontal rule (``---``) between chapters."""


@dataclass(frozen=True)
class PartTitle:
    """A title introducing a part of the numbered chapters."""

    title: str


SummaryItem = Union[Link, Separator, PartTitle]


@dataclass
class Summary:
    """The parsed ``SUMMARY.md``, specifying how the book is laid out."""

    title: Optional[str] = None
    prefix_chapters: list[SummaryItem] = field(default_factory=list)
    numbered_chapters: list[SummaryItem] = field(default_factory=list)
    suffix_chapters: list[SummaryItem] = field(default_factory=list)