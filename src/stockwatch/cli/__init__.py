"""
Command-line interface for stockwatch.

Provides Click-based CLI commands for movers, search, company details,
charts and cache management.
"""

from stockwatch.cli.main import cli

__all__ = ["cli"]
