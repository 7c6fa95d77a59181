"""
MScript Command-Line Interface
==============================

This package provides the command-line tools for MScript:

- **msc**: Compiles scripts and prints the reduced tree of every line

The tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["msc"]
