"""Parse SUMMARY.md outlines, count chapter words, clean build output and poll for changes."""

__version__ = "0.1.0"