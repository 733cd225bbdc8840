"""Confidence combiner — probabilistic union of independent rule matches."""

from __future__ import annotations

from typing import Iterable


def combine_confidences(confidences: Iterable[float]) -> float:
    """Return ``1 - Π(1 - cᵢ)`` for the confidences of all matching rules.

    Accumulated as ``p + c·(1 - p)``: a lone confidence comes back exactly,
    and each added term is non-negative so the result never decreases.
    """
    combined = 0.0
    for c in confidences:
        combined = combined + c * (1.0 - combined)
    return min(combined, 1.0)
