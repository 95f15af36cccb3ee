"""HLSA - Human-Likeness Scoring Assistant."""

__version__ = "0.1.0"
