"""Semantic code search over Rust sources."""

__version__ = "0.1.0"
