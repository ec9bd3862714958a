"""Ardis Utilities - personal shell-utility toolkit."""

__version__ = "1.0.0"
