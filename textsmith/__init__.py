"""Deterministic rule-based text rewriting and analysis service."""

__version__ = "1.0.0"
