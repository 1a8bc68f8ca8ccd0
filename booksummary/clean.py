"""Removing a built book and reporting what was removed."""

from __future__ import annotations

import math
import os
import shutil
from dataclasses import dataclass
from pathlib import Path

_UNITS = ("B", "KiB", "MiB", "GiB", "TiB", "PiB", "EiB")


def human_readable_bytes(num_bytes: int) -> tuple[float, str]:
    """Format a byte count as ``(quantity, unit)`` using binary prefixes."""
    value = float(num_bytes)
    if value <= 0:
        index = 0
    else:
        index = max(0, min(int(math.log2(value) / 10.0), len(_UNITS) - 1))
    return value / 1024.0**index, _UNITS[index]


@dataclass
class CleanReport:
    """Counts of what a clean removed."""

    num_files_removed: int = 0
    num_dirs_removed: int = 0
    total_bytes_removed: int = 0

    def __str__(self) -> str:
        files, dirs = self.num_files_removed, self.num_dirs_removed
        if files == 0:
            if dirs == 0:
                what = "0 files"
            elif dirs == 1:
                what = "1 directory"
            else:
                what = f"{dirs} directories"
        elif files == 1:
            what = "1 file"
        else:
            what = f"{files} files"
        text = f"Removed {what}"

        total = self.total_bytes_removed
        if total == 0:
            return text
        if total < 1024:
            return f"{text}, {total}B total"
        quantity, unit = human_readable_bytes(total)
        return f"{text}, {quantity:.2f}{unit} total"


def clean_dir(path: str | os.PathLike[str]) -> CleanReport:
    """Delete ``path`` recursively and report how much was removed.

    A missing directory is not an error; nothing is counted then.
    """
    root = Path(path)
    report = CleanReport()
    if not root.exists():
        return report

    pending = [root]
    while pending:
        children: list[Path] = []
        for entry in pending:
            try:
                # May over-count hard links and ignores block sizes.
                report.total_bytes_removed += entry.stat().st_size
            except OSError:
                pass
            if entry.is_file():
                report.num_files_removed += 1
            elif entry.is_dir():
                report.num_dirs_removed += 1
                children.extend(entry.iterdir())
        pending = children

    try:
        shutil.rmtree(root)
    except OSError as exc:
        raise OSError(f"Unable to remove the build directory: {exc}") from exc
    return report