"""Concrete implementations of cimatrix ports."""

from cimatrix.adapters.random import SeededRandomAdapter, SequenceRandomAdapter

__all__ = ["SeededRandomAdapter", "SequenceRandomAdapter"]
