"""vyb: context memory runtime for a command-line coding assistant."""

__version__ = "0.1.0"
