"""Indexer Interface."""

from __future__ import annotations

from pathlib import Path
from typing import Dict


class Indexer:
    """Abstract base class for code indexing."""

    def index(self, root: Path, cfg: Dict) -> int:
        raise NotImplementedError
