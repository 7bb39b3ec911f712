"""Command-line interface for flexipage XML round-trips and validation."""

from .main import main

__all__ = ["main"]
