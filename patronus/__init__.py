"""Interned bit-vector and array expressions with type checking, evaluation, transformation and simplification."""

__version__ = "0.35.0"

__all__ = [
    "analysis",
    "builder",
    "context",
    "evaluate",
    "meta",
    "nodes",
    "simplify",
    "simplify_bits",
    "simplify_logic",
    "transform",
    "traversal",
    "typecheck",
    "values",
    "witness",
]