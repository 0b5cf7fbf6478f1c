"""
Kaleidoscope Command-Line Interface
===================================

This package provides the command-line tools for the Kaleidoscope
front-end:

- **kparse**: parse a program (or an interactive session) and print the
  constructs it contains

Each tool is a Click-based CLI application.
"""

__all__ = ["kparse"]
