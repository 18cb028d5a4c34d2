"""
Entry point for running HymnForge as a module.

Usage:
    python -m hymnforge --help
    python -m hymnforge analyze --example 1
    python -m hymnforge keys list
"""
from .cli import app


if __name__ == "__main__":
    app()
