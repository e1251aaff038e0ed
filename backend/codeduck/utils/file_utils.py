"""File utility functions."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator, List


def walk_source_files(root: Path, extension: str, skip_dirs: Iterable[str] = ("target",)) -> Iterator[Path]:
    """Yield files under ``root`` ending in ``extension``, depth first.

    Entries are visited in sorted name order so repeated runs over the same
    tree produce the same sequence. Directories whose name is in
    ``skip_dirs`` are not descended into, and neither are symlinked
    directories, which could loop back into the tree.
    """
    skip = set(skip_dirs)
    for entry in sorted(root.iterdir(), key=lambda p: p.name):
        if entry.is_dir():
            if entry.name in skip or entry.is_symlink():
                continue
            yield from walk_source_files(entry, extension, skip)
        elif entry.suffix == extension:
            yield entry


def split_lines(text: str) -> List[str]:
    """Split on ``\\n`` only, dropping a trailing ``\\r`` from each line.

    ``str.splitlines`` also breaks on form feeds and unicode separators,
    which would put line numbers out of step with the parser's rows.
    """
    return [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]
