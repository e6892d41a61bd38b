"""Command line tools for X11 connection setup."""

__version__ = "0.1.0"
