"""Derivation, normalization and validation engine for tokenized property records."""

__version__ = "0.1.0"
