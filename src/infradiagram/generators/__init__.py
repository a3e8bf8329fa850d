"""Generators for diagram exports."""

from infradiagram.generators.mermaid import generate_mermaid

__all__ = [
    "generate_mermaid",
]
