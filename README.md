# booksummary

Tools for working with a Markdown book laid out by a `SUMMARY.md` file.

- `booksummary.summary` parses a `SUMMARY.md` into a `Summary`.
- `booksummary.model` holds the data types: `Summary`, `Link`,
  `Separator`, `PartTitle` and `SectionNumber`.
- `booksummary.events` flattens CommonMark into the event stream the parser
  reads (`iter_events`, `stringify_events`).
- `booksummary.wordcount` counts the words in chapters.
- `booksummary.clean` removes a build directory and reports what went.
- `booksummary.gitignore` and `booksummary.watcher` poll files for changes
  while leaving out paths matched by `.gitignore` rules.

## Installation

```
pip install booksummary
```

## Parsing a summary

```python
from booksummary.model import Link
from booksummary.summary import parse_summary

text = """# Summary

[Introduction](intro.md)

- [First](first.md)
  - [Nested](nested.md)
- [Second](second.md)

---

[Appendix](appendix.md)
"""

summary = parse_summary(text)
print(summary.title)                      # Summary
print(summary.prefix_chapters[0].name)    # Introduction
for item in summary.numbered_chapters:
    if isinstance(item, Link):
        print(item.number, item.name)     # 1. First / 2. Second
print(summary.suffix_chapters[0].location)  # appendix.md
```

A `Summary` has an optional `title` and three lists, `prefix_chapters`,
`numbered_chapters` and `suffix_chapters`. Their items are:

- `Link` – `name`, `location` (the file, with `%20` turned into a space),
  `number` (a `SectionNumber` for numbered chapters, printed as `1.2.`) and
  `nested_items`. An empty target such as `[Draft]()` gives a `location` of
  `None`; `link.is_draft` is then true.
- `Separator` – a `---` rule.
- `PartTitle` – a `# Title` heading that starts a new part of the numbered
  chapters. Numbering continues across parts and separators.

HTML comments before the title are skipped. Headings of level 2 and deeper
between numbered chapters are skipped as well.

Malformed outlines raise `SummaryError`. Errors found while parsing one
section are raised as "There was an error parsing the … chapters", with the
detailed error as the exception's `__cause__`; that one names the line and
column, e.g.
`failed to parse SUMMARY.md line 2, column 1: Suffix chapters cannot be followed by a list`.
A file listed twice raises `SummaryError("Duplicate file in SUMMARY.md: \"./a.md\"")`.

`SummaryParser` exposes the individual steps (`parse_title`, `parse_affix`,
`parse_parts`, `parse_numbered`, `parse_link`) for callers that need to
parse only a piece of an outline.

## Counting words

```python
from booksummary.wordcount import OddWordCountError, count_chapters, parse_config

config = parse_config({"ignores": ["Foreword"], "deny-odds": True})
try:
    counts = count_chapters([("Chapter 1", "Some words here")], config)
except OddWordCountError as err:
    print(err)          # Chapter 1 has an odd number of words!
    print(err.counts)   # [('Chapter 1', 3)]
```

`count_chapters` takes `(name, content)` pairs and returns `(name, words)`
pairs. `parse_config` reads the kebab-case keys `ignores` and `deny-odds`;
a table it cannot read gives the default `WordcountConfig`.

## Cleaning a build directory

```python
from booksummary.clean import clean_dir

report = clean_dir("book")
print(report)   # e.g. "Removed 12 files, 3.41KiB total"
```

A missing directory is not an error; the report then reads `Removed 0 files`.
`human_readable_bytes(n)` returns a `(quantity, unit)` pair such as
`(1.5, "KiB")`.

## Watching for changes

```python
from booksummary.watcher import Watcher

watcher = Watcher("path/to/book")
watcher.set_roots(["path/to/book/src", "path/to/book/book.toml"])
watcher.scan()             # the first scan records the starting state
changed = watcher.scan()   # later scans return paths added, changed or removed
```

Changes are found by comparing file type, modification time and size.
Files matched by the nearest `.gitignore`, searched for in the book root and
its parent directories, are left out. `remove_ignored_files(book_root, paths)`
and `filter_ignored_files(ignore, paths)` apply the same rules to a list of
absolute paths, and `Gitignore` can also be built by hand with `add_line`.

## What this package does not do

There is no command-line tool. It does not load a book's configuration,
render or build a book, or serve it with live reload. The watcher only
polls: `scan` has to be called by you, and it watches only the roots you
pass to `set_roots`. `parse_watcher_kind` accepts `"native"`, but no
native (operating-system notification) watcher is provided.