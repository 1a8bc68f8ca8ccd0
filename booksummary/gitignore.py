"""A small gitignore matcher used to filter watched paths."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Optional, Union

log = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


@dataclass(frozen=True)
class _Rule:
    regex: re.Pattern[str]
    negate: bool
    dir_only: bool


def _class_end(pattern: str, start: int) -> int:
    j = start + 1
    if j < len(pattern) and pattern[j] in "!^":
        j += 1
    if j < len(pattern) and pattern[j] == "]":
        j += 1
    while j < len(pattern) and pattern[j] != "]":
        j += 1
    return j


def _translate(pattern: str) -> str:
    out = []
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        if pattern.startswith("**", i) and (i == 0 or pattern[i - 1] == "/"):
            if i + 2 == n:
                out.append(".*")
                i += 2
                continue
            if pattern[i + 2] == "/":
                out.append("(?:.*/)?")
                i += 3
                continue
        if c == "*":
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "[":
            j = _class_end(pattern, i)
            if j >= n:
                out.append(re.escape(c))
            else:
                body = pattern[i + 1 : j].replace("\\", "\\\\")
                if body[:1] in ("!", "^"):
                    body = "^" + body[1:]
                out.append(f"[{body}]")
                i = j
        elif c == "\\" and i + 1 < n:
            i += 1
            out.append(re.escape(pattern[i]))
        else:
            out.append(re.escape(c))
        i += 1
    return "".join(out)


def _strip_trailing_spaces(line: str) -> str:
    while line.endswith(" ") and not line.endswith("\\ "):
        line = line[:-1]
    return line


class Gitignore:
    """Gitignore rules relative to a root directory.

    Later rules override earlier ones; ``!`` re-includes a path.
    """

    def __init__(self, root: PathLike):
        self.root = Path(root)
        self._rules: list[_Rule] = []

    def __len__(self) -> int:
        return len(self._rules)

    def add_line(self, line: str) -> Gitignore:
        """Add one line of gitignore syntax; blank lines and comments are skipped."""
        line = _strip_trailing_spaces(line.rstrip("\r\n"))
        if not line or line.startswith("#"):
            return self
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        elif line.startswith(("\\!", "\\#")):
            line = line[1:]
        dir_only = line.endswith("/")
        line = line.rstrip("/")
        if not line:
            return self
        anchored = "/" in line
        line = line.lstrip("/")
        if not anchored and not line.startswith("**/"):
            line = "**/" + line
        regex = re.compile(_translate(line) + "(?:/.*)?" if line.endswith("/**") else _translate(line))
        self._rules.append(_Rule(regex, negate, dir_only))
        return self

    def _relative(self, path: PathLike) -> str:
        pure = PurePath(path)
        if pure.is_absolute():
            try:
                pure = pure.relative_to(self.root)
            except ValueError:
                pass
        parts = [part for part in pure.parts if part != "."]
        return "/".join(parts)

    def matched(self, path: PathLike, is_dir: bool) -> Optional[bool]:
        """Match ``path`` itself.

        Returns ``True`` if it is ignored, ``False`` if it is explicitly
        re-included, and ``None`` if no rule matches.
        """
        rel = self._relative(path)
        if not rel:
            return None
        for rule in reversed(self._rules):
            if rule.dir_only and not is_dir:
                continue
            if rule.regex.fullmatch(rel):
                return not rule.negate
        return None

    def matched_path_or_any_parents(self, path: PathLike, is_dir: bool) -> bool:
        """Whether ``path`` or any of its parent directories is ignored."""
        result = self.matched(path, is_dir)
        if result is not None:
            return result
        for parent in PurePath(self._relative(path)).parents:
            if str(parent) in ("", "."):
                break
            result = self.matched(parent, True)
            if result is not None:
                return result
        return False


def load_gitignore(path: PathLike) -> Gitignore:
    """Read a ``.gitignore`` file; its directory becomes the root.

    An unreadable file is logged and yields an empty matcher.
    """
    file = Path(path)
    ignore = Gitignore(file.parent)
    try:
        text = file.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        log.warning("error reading gitignore `%s`: %s", file, exc)
        return ignore
    for line in text.splitlines():
        ignore.add_line(line)
    return ignore


def find_gitignore(book_root: PathLike) -> Optional[Path]:
    """Find the nearest ``.gitignore`` in ``book_root`` or its ancestors."""
    root = Path(book_root)
    for directory in (root, *root.parents):
        candidate = directory / ".gitignore"
        if candidate.exists():
            return candidate
    return None