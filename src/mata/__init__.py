"""Mata: local retrieval-augmented chat engine."""

__version__ = "0.1.0"
