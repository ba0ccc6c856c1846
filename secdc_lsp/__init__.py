"""secdc Language Server package.

This package provides:
- A pygls-based Language Server publishing secdc compile diagnostics.
- A lightweight indexer that scans documents for top-level definitions without compiling.
"""

__all__ = [
    "server",
    "indexer",
]
