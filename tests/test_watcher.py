from pathlib import Path

import pytest

from booksummary.gitignore import Gitignore
from booksummary.watcher import (
    PathData,
    Watcher,
    WatcherKind,
    filter_ignored_files,
    parse_watcher_kind,
    remove_ignored_files,
)


def _init_book(book_root: Path) -> None:
    (book_root / "src").mkdir(parents=True, exist_ok=True)
    (book_root / "book.toml").write_text("[book]\n")
    (book_root / "src" / "SUMMARY.md").write_text("# Summary\n\n- [Chapter 1](./chapter_1.md)\n")
    (book_root / "src" / "chapter_1.md").write_text("# Chapter 1\n")


def _check_watch_behavior(
    tmp_path, gitignore_path, gitignore, book_root_path, ignored, not_ignored, extra_roots=()
):
    root = tmp_path.resolve()
    book_root = root / book_root_path
    _init_book(book_root)
    (root / gitignore_path).write_text(gitignore)

    def create(paths):
        made = []
        for rel in paths:
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("initial content")
            made.append(path.resolve())
        return sorted(made)

    ignored_paths = create(ignored)
    not_ignored_paths = create(not_ignored)

    watcher = Watcher(book_root)
    roots = [book_root / "src", book_root / "theme", book_root / "book.toml"]
    roots.extend(book_root / extra for extra in extra_roots)
    watcher.set_roots(roots)
    watcher.scan()
    assert watcher.scan() == []

    for path in ignored_paths + not_ignored_paths:
        path.write_text("modified")
    changed = sorted(p.resolve() for p in watcher.scan())
    assert changed == not_ignored_paths
    assert watcher.scan() == []


def test_ignore(tmp_path):
    _check_watch_behavior(
        tmp_path,
        "foo/.gitignore",
        "*.tmp",
        "foo",
        ["foo/src/somefile.tmp"],
        ["foo/src/chapter.md"],
    )


def test_ignore_in_parent(tmp_path):
    _check_watch_behavior(
        tmp_path,
        ".gitignore",
        "*.tmp\nsomedir/\n/inroot\n/foo/src/inbook\n",
        "foo",
        [
            "foo/src/somefile.tmp",
            "foo/src/somedir/somefile",
            "inroot/somefile",
            "foo/src/inbook/somefile",
        ],
        ["foo/src/inroot/somefile"],
    )


def test_ignore_canonical(tmp_path):
    _check_watch_behavior(
        tmp_path,
        ".gitignore",
        "*.tmp\nsomedir/\n/foo/src/inbook\n",
        "bar/../foo",
        [
            "foo/src/somefile.tmp",
            "foo/src/somedir/somefile",
            "foo/src/inbook/somefile",
        ],
        ["foo/src/chapter.md"],
    )


def test_scan_extra_watch(tmp_path):
    _check_watch_behavior(
        tmp_path,
        ".gitignore",
        "*.tmp\n/outside-root/ignoreme\n/foo/examples/ignoreme\n",
        "foo",
        [
            "foo/src/somefile.tmp",
            "foo/examples/example.tmp",
            "outside-root/somefile.tmp",
            "outside-root/ignoreme",
            "foo/examples/ignoreme",
        ],
        [
            "foo/src/chapter.md",
            "foo/examples/example.rs",
            "foo/examples/example2.rs",
            "outside-root/image.png",
        ],
        extra_roots=["examples", "../outside-root"],
    )


def test_scan_reports_new_and_removed_files(tmp_path):
    root = tmp_path.resolve()
    (root / "src").mkdir()
    watcher = Watcher(root)
    watcher.set_roots([root / "src"])
    assert watcher.scan() == []

    new_file = root / "src" / "new.md"
    new_file.write_text("hello")
    assert watcher.scan() == [new_file]
    assert watcher.scan() == []

    new_file.unlink()
    assert watcher.scan() == [new_file]
    assert watcher.path_data == {}


def test_scan_skips_missing_roots(tmp_path):
    root = tmp_path.resolve()
    watcher = Watcher(root)
    watcher.set_roots([root / "missing", root / "also-missing.toml"])
    assert watcher.scan() == []


def test_scan_watches_single_file_root(tmp_path):
    root = tmp_path.resolve()
    toml = root / "book.toml"
    toml.write_text("[book]\n")
    watcher = Watcher(root)
    watcher.set_roots([toml])
    assert watcher.scan() == [toml]
    assert watcher.path_data[toml].size == len("[book]\n")


def test_path_data_equality(tmp_path):
    path = tmp_path / "a.txt"
    path.write_text("abc")
    first = PathData.from_stat(path.stat())
    assert first == PathData.from_stat(path.stat())
    path.write_text("abcdef")
    assert PathData.from_stat(path.stat()).size == 6


def test_filter_ignored_files(tmp_path):
    current_dir = tmp_path.resolve()
    ignore = Gitignore(current_dir).add_line("*.html")
    should_remain = current_dir / "record.text"
    should_filter = current_dir / "index.html"
    assert filter_ignored_files(ignore, [should_remain, should_filter]) == [should_remain]


def test_filter_ignored_files_should_handle_parent_dir(tmp_path):
    current_dir = tmp_path.resolve()
    ignore = Gitignore(current_dir).add_line("*.html")
    parent_dir = current_dir / ".."
    should_remain = parent_dir / "record.text"
    should_filter = parent_dir / "index.html"
    assert filter_ignored_files(ignore, [should_remain, should_filter]) == [should_remain]


def test_filter_ignored_files_requires_absolute_paths(tmp_path):
    ignore = Gitignore(tmp_path).add_line("*.html")
    with pytest.raises(ValueError):
        filter_ignored_files(ignore, [Path("relative.md")])


def test_remove_ignored_files_uses_found_gitignore(tmp_path):
    root = tmp_path.resolve()
    (root / ".gitignore").write_text("*.tmp\n")
    book = root / "book"
    book.mkdir()
    paths = [book / "a.md", book / "b.tmp"]
    assert remove_ignored_files(book, paths) == [book / "a.md"]


def test_remove_ignored_files_empty(tmp_path):
    assert remove_ignored_files(tmp_path, []) == []


@pytest.mark.parametrize(
    "name, kind", [("poll", WatcherKind.POLL), ("native", WatcherKind.NATIVE)]
)
def test_parse_watcher_kind(name, kind):
    assert parse_watcher_kind(name) is kind


def test_parse_watcher_kind_unsupported():
    with pytest.raises(ValueError, match="unsupported watcher inotify"):
        parse_watcher_kind("inotify")