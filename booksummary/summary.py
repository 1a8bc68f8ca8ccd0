"""Parsing the text of a ``SUMMARY.md`` into a :class:`Summary`.

The summary format, roughly::

    summary           ::= title prefix_chapters numbered_chapters suffix_chapters
    title             ::= "# " TEXT | EPSILON
    prefix_chapters   ::= item*
    suffix_chapters   ::= item*
    numbered_chapters ::= part+
    part              ::= title dotted_item+
    dotted_item       ::= INDENT* DOT_POINT item
    item              ::= link | separator
    separator         ::= "---"
    link              ::= "[" TEXT "]" "(" TEXT ")"
    DOT_POINT         ::= "-" | "*"
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Optional

from .events import (
    HEADING,
    HTML_BLOCK,
    ITEM,
    LINK,
    LIST,
    PARAGRAPH,
    Event,
    EventKind,
    iter_events,
    stringify_events,
)
from .model import Link, PartTitle, SectionNumber, Separator, Summary, SummaryItem

log = logging.getLogger(__name__)


class SummaryError(ValueError):
    """The summary text could not be parsed."""


def parse_summary(text: str) -> Summary:
    """Parse the text of a ``SUMMARY.md`` file."""
    return SummaryParser(text).parse()


def _debug_path(path: str) -> str:
    escaped = path.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _check_for_duplicates(items: Iterable[SummaryItem], seen: set[str]) -> None:
    for item in items:
        if not isinstance(item, Link):
            continue
        if item.location is not None:
            if item.location in seen:
                raise SummaryError(
                    f"Duplicate file in SUMMARY.md: {_debug_path(item.location)}"
                )
            seen.add(item.location)
        _check_for_duplicates(item.nested_items, seen)


def _update_section_numbers(items: Iterable[SummaryItem], level: int, by: int) -> None:
    for item in items:
        if isinstance(item, Link):
            if item.number is not None:
                item.number.parts[level] += by
            _update_section_numbers(item.nested_items, level, by)


def _last_link(items: list[SummaryItem]) -> Link:
    links = [item for item in items if isinstance(item, Link)]
    if not links:
        raise SummaryError(
            "Unable to get last link because the list of SummaryItems "
            "doesn't contain any Links"
        )
    return links[-1]


class SummaryParser:
    """A recursive descent parser over the Markdown events of a summary."""

    def __init__(self, text: str):
        self._src = text
        self._stream = iter_events(text)
        self._offset = 0
        self._back: Optional[Event] = None

    def current_location(self) -> tuple[int, int]:
        """Return ``(line, column)`` of the last event read, for errors."""
        previous = self._src[: self._offset]
        line = previous.count("\n") + 1
        start_of_line = max(previous.rfind("\n"), 0)
        col = len(self._src[start_of_line : self._offset])
        return line, col

    def _parse_error(self, message: str) -> SummaryError:
        line, col = self.current_location()
        return SummaryError(
            f"failed to parse SUMMARY.md line {line}, column {col}: {message}"
        )

    def next_event(self) -> Optional[Event]:
        """Return the next event, or ``None`` at the end of the text."""
        if self._back is not None:
            event, self._back = self._back, None
            return event
        event = next(self._stream, None)
        if event is not None:
            self._offset = event.offset
        return event

    def back(self, event: Event) -> None:
        """Put ``event`` back so the next call to :meth:`next_event` returns it."""
        if self._back is not None:
            raise RuntimeError("an event has already been put back")
        self._back = event

    def _collect_until(self, is_delimiter: Callable[[Event], bool]) -> list[Event]:
        events = []
        for event in self._stream:
            if is_delimiter(event):
                return events
            events.append(event)
        log.debug("Reached end of stream without finding the closing pattern")
        return events

    def _collect_heading(self) -> str:
        return stringify_events(self._collect_until(lambda e: e.is_end(HEADING, 1)))

    def parse(self) -> Summary:
        """Parse the whole summary."""
        title = self.parse_title()
        try:
            prefix = self.parse_affix(True)
        except SummaryError as exc:
            raise SummaryError("There was an error parsing the prefix chapters") from exc
        try:
            numbered = self.parse_parts()
        except SummaryError as exc:
            raise SummaryError("There was an error parsing the numbered chapters") from exc
        try:
            suffix = self.parse_affix(False)
        except SummaryError as exc:
            raise SummaryError("There was an error parsing the suffix chapters") from exc

        seen: set[str] = set()
        for part in (prefix, numbered, suffix):
            _check_for_duplicates(part, seen)

        return Summary(title, prefix, numbered, suffix)

    def parse_title(self) -> Optional[str]:
        """Parse a leading level-1 heading, skipping HTML such as comments."""
        while True:
            event = self.next_event()
            if event is None:
                return None
            if event.is_start(HEADING, 1):
                log.debug("Found a h1 in the SUMMARY")
                return self._collect_heading()
            if (
                event.kind in (EventKind.HTML, EventKind.INLINE_HTML)
                or event.is_start(HTML_BLOCK)
                or event.is_end(HTML_BLOCK)
            ):
                continue
            self.back(event)
            return None

    def parse_affix(self, is_prefix: bool) -> list[SummaryItem]:
        """Parse prefix (or suffix) chapters: unnumbered links and separators."""
        items: list[SummaryItem] = []
        log.debug("Parsing %s items", "prefix" if is_prefix else "suffix")
        while True:
            event = self.next_event()
            if event is None:
                break
            if event.is_start(LIST) or event.is_start(HEADING, 1):
                if is_prefix:
                    self.back(event)
                    break
                raise self._parse_error("Suffix chapters cannot be followed by a list")
            if event.is_start(LINK):
                items.append(self.parse_link(event.dest_url))
            elif event.kind is EventKind.RULE:
                items.append(Separator())
        return items

    def parse_parts(self) -> list[SummaryItem]:
        """Parse the numbered chapters, split into optionally titled parts."""
        parts: list[SummaryItem] = []
        root_number = SectionNumber()
        root_items = 0
        while True:
            event = self.next_event()
            if event is None:
                break
            if event.is_start(PARAGRAPH):
                self.back(event)
                break
            if event.is_start(HEADING, 1):
                log.debug("Found a h1 in the SUMMARY")
                title: Optional[str] = self._collect_heading()
            else:
                self.back(event)
                title = None

            try:
                chapters, root_items = self.parse_numbered(root_items, root_number)
            except SummaryError as exc:
                raise SummaryError(
                    "There was an error parsing the numbered chapters"
                ) from exc

            if title is not None:
                parts.append(PartTitle(title))
            parts.extend(chapters)
        return parts

    def parse_link(self, href: str) -> Link:
        """Finish a link whose start event has been read."""
        href = href.replace("%20", " ")
        name = stringify_events(self._collect_until(lambda e: e.is_end(LINK)))
        return Link(name=name, location=href or None)

    def parse_numbered(
        self, root_items: int = 0, root_number: Optional[SectionNumber] = None
    ) -> tuple[list[SummaryItem], int]:
        """Parse one part's numbered chapters.

        Returns the items and the updated count of root items, so numbering
        continues across separators and parts.
        """
        parent = root_number if root_number is not None else SectionNumber()
        items: list[SummaryItem] = []
        first = True
        while True:
            event = self.next_event()
            if event is None:
                break
            if event.is_start(PARAGRAPH):
                if not first:
                    self.back(event)
                    break
            elif event.is_start(HEADING, 1):
                self.back(event)
                break
            elif event.is_start(LIST):
                self.back(event)
                bunch = self._parse_nested_numbered(parent)
                _update_section_numbers(bunch, 0, root_items)
                root_items += len(bunch)
                items.extend(bunch)
            elif event.kind is EventKind.START:
                while (inner := self.next_event()) is not None:
                    if inner.closes(event):
                        break
            elif event.kind is EventKind.RULE:
                items.append(Separator())
            first = False
        return items, root_items

    def _parse_nested_numbered(self, parent: SectionNumber) -> list[SummaryItem]:
        log.debug("Parsing numbered chapters at level %s", parent)
        items: list[SummaryItem] = []
        while True:
            event = self.next_event()
            if event is None or event.is_end(LIST):
                break
            if event.is_start(ITEM):
                items.append(self._parse_nested_item(parent, len(items)))
            elif event.is_start(LIST):
                if not items:
                    continue
                last = _last_link(items)
                if last.number is None:
                    raise SummaryError("All numbered chapters have numbers")
                last.nested_items = self._parse_nested_numbered(last.number)
        return items

    def _parse_nested_item(self, parent: SectionNumber, existing: int) -> SummaryItem:
        while True:
            event = self.next_event()
            if event is not None and event.is_start(PARAGRAPH):
                continue
            if event is not None and event.is_start(LINK):
                link = self.parse_link(event.dest_url)
                link.number = parent.child(existing + 1)
                return link
            log.warning("Expected a start of a link, actually got %r", event)
            raise self._parse_error(
                "The link items for nested chapters must only contain a hyperlink"
            )