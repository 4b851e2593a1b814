"""Utility helpers."""

from .validation import validate_problem

__all__ = ["validate_problem"]
