"""Configuration management for codeduck."""

from __future__ import annotations

import copy
import os
from typing import Dict, Optional


DEFAULT_CONFIG: Dict = {
    "extractor": {
        "extension": ".rs",
        "skip_dirs": ["target"],
    },
    "embedding": {
        "backend": "sentence_transformers",
        "code_model": "jinaai/jina-embeddings-v2-base-code",
        "text_model": "sentence-transformers/all-MiniLM-L6-v2",
        "code_dim": 768,
        "text_dim": 384,
        "batch_size": 32,
        "device": None,
        "hf_token": None,
    },
    "search": {"top_k": 4},
    "vector_store": {
        "backend": "qdrant",
        "qdrant": {
            "url": None,
            "host": "localhost",
            "port": 6333,
            "grpc_port": 6334,
            "prefer_grpc": False,
            "api_key": None,
            "timeout": None,
            "collection_name": "codeduck",
            "upsert_batch_size": 100,
        },
    },
    "server": {
        "host": "127.0.0.1",
        "port": 8000,
    },
}


def _deep_merge(base: Dict, overrides: Dict) -> Dict:
    """Merge ``overrides`` into ``base`` in place, descending into dicts."""
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def _env_overrides() -> Dict:
    qdrant: Dict = {}
    if os.getenv("QDRANT_URL"):
        qdrant["url"] = os.environ["QDRANT_URL"]
    if os.getenv("QDRANT_HOST"):
        qdrant["host"] = os.environ["QDRANT_HOST"]
    if os.getenv("QDRANT_PORT"):
        qdrant["port"] = int(os.environ["QDRANT_PORT"])
    if os.getenv("QDRANT_API_KEY"):
        qdrant["api_key"] = os.environ["QDRANT_API_KEY"]
    if os.getenv("QDRANT_COLLECTION"):
        qdrant["collection_name"] = os.environ["QDRANT_COLLECTION"]

    embedding: Dict = {}
    if os.getenv("HF_TOKEN"):
        embedding["hf_token"] = os.environ["HF_TOKEN"]
    if os.getenv("CODEDUCK_DEVICE"):
        embedding["device"] = os.environ["CODEDUCK_DEVICE"]

    return {"vector_store": {"qdrant": qdrant}, "embedding": embedding}


def load_config(overrides: Optional[Dict] = None) -> Dict:
    """Load configuration.

    Defaults first, then environment variables, then ``overrides``.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    _deep_merge(config, _env_overrides())
    if overrides:
        _deep_merge(config, copy.deepcopy(overrides))
    return config
