"""
GRAPHE - Command Line Interface

Main CLI entry point for building and querying scripture.
"""
from cli.main import app, main

__all__ = ["app", "main"]
