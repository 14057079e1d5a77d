"""Scorecard scoring-session core for SLP golf groups."""

__version__ = "0.1.0"
