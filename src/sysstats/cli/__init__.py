"""Command line entry points."""

from .sysstats_cli import main

__all__ = ["main"]
