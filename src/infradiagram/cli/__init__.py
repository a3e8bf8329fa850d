"""Command line interface for infradiagram."""
