[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "booksummary"
version = "0.1.0"
description = "Parse book SUMMARY.md outlines, count chapter words, clean build output and poll sources for changes"
requires-python = ">=3.10"
dependencies = [
    "markdown-it-py",
]
keywords = ["markdown", "summary", "book", "outline", "wordcount", "gitignore", "watcher"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Processing :: Markup :: Markdown",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["booksummary"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
