"""Quantizer arithmetic for the per-scene search."""

from typing import Sequence

import numpy as np
from numpy.polynomial import polynomial as P

from ..core.video.types import QuantizerRange
from ..encoding.params import get_encoder

# Trial offsets in units of the quantizer step, and the output name of each.
# Larger quantizers give lower quality.
TRIAL_OFFSETS = (2, 1, -1, -2)
TRIAL_SUFFIXES = {
    2: "_lowest",
    1: "_low",
    -1: "_high",
    -2: "_highest",
}

CURVE_DEGREE = 3


def trial_quantizer(base: float, step: float, offset: int, quantizer_range: QuantizerRange) -> float:
    """Quantizer of one trial, clamped into the range."""
    return quantizer_range.clamp(base + step * offset)


def fit_quality_curve(
    scores: Sequence[float],
    quantizers: Sequence[float],
    degree: int = CURVE_DEGREE
) -> np.ndarray:
    """Least squares polynomial mapping score to quantizer.

    The degree drops to fit the number of distinct scores. With fewer than
    two distinct scores there is no curve and all coefficients are zero.

    Returns:
        Coefficients, lowest order first
    """
    x = np.asarray(scores, dtype=np.float64)
    y = np.asarray(quantizers, dtype=np.float64)
    if x.shape != y.shape:
        raise ValueError(f"Got {x.size} scores for {y.size} quantizers")
    distinct = np.unique(x).size
    if distinct < 2:
        return np.zeros(degree + 1)
    coefficients = np.zeros(degree + 1)
    fitted = P.polyfit(x, y, min(degree, distinct - 1))
    coefficients[:fitted.size] = fitted
    return coefficients


def solve_quantizer(
    coefficients: Sequence[float],
    target_quality: float,
    quantizer_range: QuantizerRange
) -> float:
    """Evaluate the curve at the target quality.

    A degenerate (all zero) curve solves to the top of the range, the least
    aggressive compression.
    """
    coefficients = np.asarray(coefficients, dtype=np.float64)
    if not coefficients.any():
        return quantizer_range.maximum
    return quantizer_range.clamp(float(P.polyval(target_quality, coefficients)))


def round_quantizer(encoder: str, quantizer: float) -> float:
    """Snap a solved quantizer onto the encoder's grid."""
    return get_encoder(encoder).round_quantizer(quantizer)
