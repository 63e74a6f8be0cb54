"""Scanners for git sources."""

from .git_diff import (
    GitDiffScanner,
    filter_kotlin_files,
    get_staged_files,
    get_staged_kotlin_files,
)

__all__ = [
    "GitDiffScanner",
    "filter_kotlin_files",
    "get_staged_files",
    "get_staged_kotlin_files",
]
