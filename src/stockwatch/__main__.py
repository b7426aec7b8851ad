"""
CLI entry point for running stockwatch as a module.

Usage: python -m stockwatch [OPTIONS] COMMAND [ARGS]...
"""

from stockwatch.cli.main import cli

if __name__ == "__main__":
    cli()
