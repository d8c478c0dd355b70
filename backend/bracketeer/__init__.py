"""Bracketeer: single-elimination bracket service for training-platform events."""

__version__ = "0.1.0"
