"""Detect files whose content changed since the previous run."""

__version__ = "0.1.0"
