"""Parallel per-class Randoop test generation."""

__version__ = "0.1.0"
