"""
HyperClass CLI - Command Line Interface for HyperClass

Provides terminal commands for:
- Training a classifier from raw or encoded datasets
- Viewing the effective configuration
"""

from .main import cli, main

__all__ = ["cli", "main"]
