from pathlib import Path

from booksummary.gitignore import Gitignore, find_gitignore, load_gitignore


def make(root, *lines):
    ignore = Gitignore(root)
    for line in lines:
        ignore.add_line(line)
    return ignore


def test_extension_pattern_matches_at_any_depth(tmp_path):
    ignore = make(tmp_path, "*.html")
    assert ignore.matched_path_or_any_parents("index.html", False) is True
    assert ignore.matched_path_or_any_parents("deep/dir/index.html", False) is True
    assert ignore.matched_path_or_any_parents("record.text", False) is False


def test_parent_relative_path_is_matched(tmp_path):
    ignore = make(tmp_path, "*.html")
    assert ignore.matched_path_or_any_parents("../index.html", False) is True
    assert ignore.matched_path_or_any_parents("../record.text", False) is False


def test_absolute_path_under_root(tmp_path):
    ignore = make(tmp_path, "*.tmp")
    assert ignore.matched_path_or_any_parents(tmp_path / "src" / "a.tmp", False) is True
    assert ignore.matched_path_or_any_parents(tmp_path / "src" / "a.md", False) is False


def test_dir_only_pattern_applies_through_parents(tmp_path):
    ignore = make(tmp_path, "somedir/")
    assert ignore.matched_path_or_any_parents("foo/src/somedir/somefile", False) is True
    assert ignore.matched("somedir", False) is None


def test_anchored_patterns(tmp_path):
    ignore = make(tmp_path, "/inroot", "/foo/src/inbook")
    assert ignore.matched_path_or_any_parents("inroot/somefile", False) is True
    assert ignore.matched_path_or_any_parents("foo/src/inroot/somefile", False) is False
    assert ignore.matched_path_or_any_parents("foo/src/inbook/somefile", False) is True


def test_negation_reincludes(tmp_path):
    ignore = make(tmp_path, "*.log", "!keep.log")
    assert ignore.matched("keep.log", False) is False
    assert ignore.matched("drop.log", False) is True


def test_comments_and_blanks_are_skipped(tmp_path):
    ignore = make(tmp_path, "# comment", "", "   ")
    assert len(ignore) == 0
    assert ignore.matched("anything", False) is None


def test_load_gitignore_uses_file_directory(tmp_path):
    file = tmp_path / ".gitignore"
    file.write_text("*.tmp\n/out\n")
    ignore = load_gitignore(file)
    assert ignore.root == tmp_path
    assert len(ignore) == 2
    assert ignore.matched_path_or_any_parents(tmp_path / "out" / "x", False) is True


def test_load_missing_gitignore_is_empty(tmp_path):
    ignore = load_gitignore(tmp_path / "missing" / ".gitignore")
    assert len(ignore) == 0


def test_find_gitignore_in_ancestor(tmp_path):
    (tmp_path / ".gitignore").write_text("*.tmp\n")
    book = tmp_path / "foo" / "bar"
    book.mkdir(parents=True)
    assert find_gitignore(book) == tmp_path / ".gitignore"


def test_find_gitignore_prefers_nearest(tmp_path):
    (tmp_path / ".gitignore").write_text("")
    book = tmp_path / "foo"
    book.mkdir()
    (book / ".gitignore").write_text("")
    assert find_gitignore(book) == Path(book) / ".gitignore"