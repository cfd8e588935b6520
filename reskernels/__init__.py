"""Redundant kernel execution, fault injection, file-backed checkpointing and size expressions."""

__version__ = "0.1.0"

__all__ = [
    "duplicates",
    "expression",
    "injector",
    "resilient",
    "stdfile_accessor",
    "stdfile_space",
]