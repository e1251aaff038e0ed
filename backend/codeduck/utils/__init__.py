"""Utility functions for codeduck."""

from .file_utils import (
    walk_source_files,
    split_lines,
)

__all__ = [
    "walk_source_files",
    "split_lines",
]
