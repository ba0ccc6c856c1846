from __future__ import annotations

from secdc import SExpression


def to_source(expr: SExpression) -> str:
    """Render a form back to its source text, e.g. for listing comments."""
    if isinstance(expr, list):
        return "(" + " ".join(to_source(e) for e in expr) + ")"
    return str(expr)
