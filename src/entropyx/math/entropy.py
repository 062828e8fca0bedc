"""Information theory: Shannon entropy of a size distribution."""

import math
from collections.abc import Iterable
from typing import Union


class Entropy:
    """Information entropy calculations."""

    @staticmethod
    def of_weights(weights: Iterable[Union[int, float]]) -> float:
        """
        Compute Shannon entropy H(X) = -Σ p(x) log₂ p(x) of non-negative weights.

        Zero weights contribute nothing. Fewer than two positive weights, or
        a zero total, yield 0.0. The result is independent of input order.

        Args:
            weights: Sizes or counts, one per event

        Returns:
            Entropy in bits
        """
        positive = [w for w in weights if w > 0]
        if len(positive) < 2:
            return 0.0

        total = math.fsum(positive)
        if total <= 0:
            return 0.0

        entropy = 0.0
        for w in sorted(positive):
            p = w / total
            entropy -= p * math.log2(p)

        # Guard against -0.0 and rounding below zero
        return max(0.0, entropy)
