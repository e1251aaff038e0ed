"""Shared pytest fixtures for codeduck tests."""

import hashlib
import math
import re
import textwrap

import pytest

from codeduck.core import CODE_DIM, TEXT_DIM, Embedder, EmbeddingGenerator


class HashingEmbedder(Embedder):
    """Deterministic bag-of-words embedder used in place of the neural models."""

    def __init__(self, name, dimension):
        self.name = name
        self.dimension = dimension
        self.calls = []

    def embed(self, texts):
        self.calls.append(list(texts))
        return [self._vector(text) for text in texts]

    def _vector(self, text):
        vector = [0.0] * self.dimension
        for word in re.findall(r"[a-z0-9]+", text.lower()):
            bucket = int(hashlib.md5(word.encode("utf-8")).hexdigest(), 16) % self.dimension
            vector[bucket] += 1.0
        norm = math.sqrt(sum(v * v for v in vector)) or 1.0
        return [v / norm for v in vector]


@pytest.fixture
def code_embedder():
    return HashingEmbedder("fake-code", CODE_DIM)


@pytest.fixture
def text_embedder():
    return HashingEmbedder("fake-text", TEXT_DIM)


@pytest.fixture
def generator(code_embedder, text_embedder):
    return EmbeddingGenerator(code_embedder, text_embedder)


@pytest.fixture
def write_source(tmp_path):
    """Write a dedented source file under ``tmp_path`` and return its path."""

    def _write(relative, content):
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
        return path

    return _write


POINT_SOURCE = """
struct Point { x: i32, y: i32 }

fn distance(a: &Point, b: &Point) -> f32 {
    let dx = (a.x - b.x) as f32;
    let dy = (a.y - b.y) as f32;
    (dx * dx + dy * dy).sqrt()
}
"""
