"""A flat stream of Markdown events, the input of the summary parser.

The document is parsed as CommonMark and flattened into start/end pairs for
container elements and leaf events for text, code, HTML, breaks and rules.
Every event carries the character offset in the source where it begins, so
errors can point at a line and column.

Tag names used by :class:`Event`: ``paragraph``, ``heading``, ``list``,
``item``, ``block_quote``, ``html_block``, ``code_block``, ``link``,
``image``, ``emphasis`` and ``strong``.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from markdown_it import MarkdownIt
from markdown_it.token import Token

PARAGRAPH = "paragraph"
HEADING = "heading"
LIST = "list"
ITEM = "item"
BLOCK_QUOTE = "block_quote"
HTML_BLOCK = "html_block"
CODE_BLOCK = "code_block"
LINK = "link"
IMAGE = "image"
EMPHASIS = "emphasis"
STRONG = "strong"


class EventKind(Enum):
    """What sort of event an :class:`Event` is."""

    START = "start"
    END = "end"
    TEXT = "text"
    CODE = "code"
    HTML = "html"
    INLINE_HTML = "inline_html"
    SOFT_BREAK = "soft_break"
    HARD_BREAK = "hard_break"
    RULE = "rule"


@dataclass(frozen=True)
class Event:
    """One Markdown event.

    ``tag`` is set for start and end events, ``level`` for headings,
    ``dest_url`` for the start of links and images and ``text`` for leaf
    events. ``offset`` is not part of equality.
    """

    kind: EventKind
    tag: Optional[str] = None
    level: int = 0
    text: str = ""
    dest_url: str = ""
    offset: int = field(default=0, compare=False)

    def is_start(self, tag: str, level: Optional[int] = None) -> bool:
        """Whether this opens ``tag`` (at heading ``level`` if given)."""
        return (
            self.kind is EventKind.START
            and self.tag == tag
            and (level is None or self.level == level)
        )

    def is_end(self, tag: str, level: Optional[int] = None) -> bool:
        """Whether this closes ``tag`` (at heading ``level`` if given)."""
        return (
            self.kind is EventKind.END
            and self.tag == tag
            and (level is None or self.level == level)
        )

    def closes(self, start: Event) -> bool:
        """Whether this is the end event matching the start event ``start``."""
        return self.kind is EventKind.END and self.tag == start.tag and self.level == start.level


_PARSER = MarkdownIt("commonmark")
# Keep link destinations as written instead of percent-encoding them.
_PARSER.normalizeLink = str  # type: ignore[method-assign,assignment]

_BLOCK_TAGS = {
    "paragraph": PARAGRAPH,
    "heading": HEADING,
    "bullet_list": LIST,
    "ordered_list": LIST,
    "list_item": ITEM,
    "blockquote": BLOCK_QUOTE,
}

_INLINE_TAGS = {
    "em": EMPHASIS,
    "strong": STRONG,
    "link": LINK,
}


class _Locator:
    """Maps parser positions back to character offsets in the source."""

    def __init__(self, text: str):
        self.text = text
        self.line_starts = [0] + [m.end() for m in re.finditer("\n", text)]

    def line_start(self, line: int) -> int:
        return self.line_starts[min(line, len(self.line_starts) - 1)]

    def block_start(self, token: Token) -> Optional[int]:
        if not token.map:
            return None
        start = self.line_start(token.map[0])
        end = len(self.text)
        while start < end and self.text[start] in " \t":
            start += 1
        return start

    def find(self, content: str, start: int) -> Optional[int]:
        first_line = content.split("\n", 1)[0]
        if not first_line:
            return None
        pos = self.text.find(first_line, start)
        return pos if pos >= 0 else None


def _heading_level(token: Token) -> int:
    return int(token.tag[1:]) if token.tag[1:].isdigit() else 0


def _inline_events(children: Sequence[Token], locator: _Locator, cursor: int) -> Iterator[Event]:
    for child in children:
        kind = child.type
        if kind in ("text", "text_special", "code_inline"):
            found = locator.find(child.content, cursor)
            offset = cursor if found is None else found
            if found is not None:
                cursor = found + len(child.content.split("\n", 1)[0])
            event_kind = EventKind.CODE if kind == "code_inline" else EventKind.TEXT
            yield Event(event_kind, text=child.content, offset=offset)
        elif kind == "softbreak":
            yield Event(EventKind.SOFT_BREAK, offset=cursor)
        elif kind == "hardbreak":
            yield Event(EventKind.HARD_BREAK, offset=cursor)
        elif kind == "html_inline":
            yield Event(EventKind.INLINE_HTML, text=child.content, offset=cursor)
        elif kind == "image":
            src = str(child.attrGet("src") or "")
            yield Event(EventKind.START, IMAGE, dest_url=src, offset=cursor)
            yield from _inline_events(child.children or [], locator, cursor)
            yield Event(EventKind.END, IMAGE, offset=cursor)
        elif child.nesting != 0:
            prefix = kind.rsplit("_", 1)[0]
            tag = _INLINE_TAGS.get(prefix, prefix)
            if child.nesting > 0:
                dest = str(child.attrGet("href") or "") if tag == LINK else ""
                yield Event(EventKind.START, tag, dest_url=dest, offset=cursor)
            else:
                yield Event(EventKind.END, tag, offset=cursor)
        elif child.content:
            yield Event(EventKind.TEXT, text=child.content, offset=cursor)


def iter_events(text: str) -> Iterator[Event]:
    """Parse ``text`` as CommonMark and yield its events in document order.

    Paragraphs of tight list items produce no events of their own.
    """
    locator = _Locator(text)
    tokens = _PARSER.parse(text)
    open_offsets: list[int] = []
    last_offset = 0

    for token, following in zip(tokens, [*tokens[1:], None]):
        kind = token.type
        start = locator.block_start(token)
        if start is None:
            start = open_offsets[-1] if open_offsets else last_offset

        if kind == "inline":
            base = locator.block_start(token)
            base = last_offset if base is None else base
            found = locator.find(token.content, base)
            yield from _inline_events(token.children or [], locator, base if found is None else found)
            continue

        if kind in ("paragraph_open", "paragraph_close") and token.hidden:
            continue

        if token.nesting > 0:
            prefix = kind.rsplit("_", 1)[0]
            tag = _BLOCK_TAGS.get(prefix, prefix)
            if tag == PARAGRAPH and following is not None and following.type == "inline":
                found = locator.find(following.content, start)
                if found is not None:
                    start = found
            level = _heading_level(token) if tag == HEADING else 0
            open_offsets.append(start)
            last_offset = start
            yield Event(EventKind.START, tag, level=level, offset=start)
        elif token.nesting < 0:
            prefix = kind.rsplit("_", 1)[0]
            tag = _BLOCK_TAGS.get(prefix, prefix)
            level = _heading_level(token) if tag == HEADING else 0
            offset = open_offsets.pop() if open_offsets else last_offset
            yield Event(EventKind.END, tag, level=level, offset=offset)
        elif kind == "hr":
            last_offset = start
            yield Event(EventKind.RULE, offset=start)
        elif kind == "html_block":
            last_offset = start
            yield Event(EventKind.START, HTML_BLOCK, offset=start)
            yield Event(EventKind.HTML, text=token.content, offset=start)
            yield Event(EventKind.END, HTML_BLOCK, offset=start)
        elif kind in ("code_block", "fence"):
            last_offset = start
            yield Event(EventKind.START, CODE_BLOCK, offset=start)
            if token.content:
                yield Event(EventKind.TEXT, text=token.content, offset=start)
            yield Event(EventKind.END, CODE_BLOCK, offset=start)
        elif token.content:
            last_offset = start
            yield Event(EventKind.TEXT, text=token.content, offset=start)


def stringify_events(events: Iterable[Event]) -> str:
    """Drop the styling from ``events`` and return just the plain text."""
    pieces = []
    for event in events:
        if event.kind in (EventKind.TEXT, EventKind.CODE):
            pieces.append(event.text)
        elif event.kind is EventKind.SOFT_BREAK:
            pieces.append(" ")
    return "".join(pieces)