"""Chronos - Living History Engine orchestration core."""

__version__ = "0.1.0"
