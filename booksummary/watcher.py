"""Polling for changed book files, filtered through gitignore rules."""

from __future__ import annotations

import logging
import os
import stat
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from .gitignore import Gitignore, find_gitignore, load_gitignore

log = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


class WatcherKind(Enum):
    """The filesystem watching technique."""

    POLL = "poll"
    NATIVE = "native"


def parse_watcher_kind(name: str) -> WatcherKind:
    """Return the watcher kind called ``name`` (``poll`` or ``native``)."""
    try:
        return WatcherKind(name)
    except ValueError:
        raise ValueError(f"unsupported watcher {name}") from None


@dataclass(frozen=True)
class PathData:
    """What the watcher remembers about one file between scans."""

    file_type: int
    mtime_ns: int
    size: int

    @classmethod
    def from_stat(cls, st: os.stat_result) -> PathData:
        return cls(stat.S_IFMT(st.st_mode), st.st_mtime_ns, st.st_size)


def _canonical(path: Path) -> Path:
    try:
        return path.resolve(strict=True)
    except OSError:
        return path


def _is_ignored(ignore: Gitignore, ignore_root: Path, path: Path) -> bool:
    if not path.is_absolute():
        raise ValueError("One of the paths should be an absolute")
    relative = os.path.relpath(path, ignore_root)
    return ignore.matched_path_or_any_parents(relative, path.is_dir())


class Watcher:
    """A simple poll-watcher that scans root paths for modified files."""

    def __init__(self, book_root: PathLike):
        self.root_paths: list[Path] = []
        self.path_data: dict[Path, PathData] = {}
        self.ignore: Optional[tuple[Path, Gitignore]] = None
        gitignore_path = find_gitignore(book_root)
        if gitignore_path is not None:
            ignore = load_gitignore(gitignore_path)
            self.ignore = (ignore.root.resolve(), ignore)

    def set_roots(self, paths: Iterable[PathLike]) -> None:
        """Set the files and directories where scanning starts."""
        self.root_paths = [Path(p) for p in paths]

    def _allowed(self, path: Path) -> bool:
        if self.ignore is None:
            return True
        ignore_root, ignore = self.ignore
        canonical = _canonical(path)
        if _is_ignored(ignore, ignore_root, canonical):
            log.debug("ignoring %s", canonical)
            return False
        return True

    def _walk(self, root: Path) -> Iterator[Path]:
        if not self._allowed(root):
            return
        if not root.is_dir():
            yield root
            return
        stack = [root]
        seen: set[Path] = set()
        while stack:
            directory = stack.pop()
            key = _canonical(directory)
            if key in seen:
                continue
            seen.add(key)
            try:
                entries = sorted(directory.iterdir())
            except OSError as exc:
                log.debug("failed to scan %s: %s", directory, exc)
                continue
            for entry in entries:
                if not self._allowed(entry):
                    continue
                if entry.is_dir():
                    stack.append(entry)
                else:
                    yield entry

    def _snapshot(self) -> dict[Path, PathData]:
        snapshot: dict[Path, PathData] = {}
        for root in self.root_paths:
            if not root.exists():
                continue
            for path in self._walk(root):
                try:
                    st = path.stat()
                except OSError as exc:
                    log.debug("failed to scan %s: %s", path, exc)
                    continue
                snapshot[path] = PathData.from_stat(st)
        return snapshot

    def scan(self) -> list[Path]:
        """Scan the roots and return the paths added, changed or removed."""
        new_data = self._snapshot()
        changed = [
            path
            for path, data in new_data.items()
            if self.path_data.get(path) != data
        ]
        changed.extend(path for path in self.path_data if path not in new_data)
        self.path_data = new_data
        return changed


def filter_ignored_files(ignore: Gitignore, paths: Iterable[PathLike]) -> list[Path]:
    """Keep the absolute ``paths`` that ``ignore`` does not ignore."""
    ignore_root = ignore.root.resolve()
    return [
        Path(path)
        for path in paths
        if not _is_ignored(ignore, ignore_root, Path(path))
    ]


def remove_ignored_files(book_root: PathLike, paths: Iterable[PathLike]) -> list[Path]:
    """Drop paths ignored by the nearest ``.gitignore`` of ``book_root``."""
    paths = [Path(p) for p in paths]
    if not paths:
        return []
    gitignore_path = find_gitignore(book_root)
    if gitignore_path is None:
        return paths
    return filter_ignored_files(load_gitignore(gitignore_path), paths)