"""Shared helpers for the triage core."""

from .similarity import cosine_similarities, cosine_similarity

__all__ = [
    "cosine_similarities",
    "cosine_similarity",
]
