"""Command-line interface for reading mtree manifests."""

from .main import mtree_cli

__all__ = ["mtree_cli"]
