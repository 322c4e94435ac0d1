import numpy as np


def eval_poly(coeffs, x):
    """Evaluate polynomial coefficients (highest power first) using Horner's method."""
    coeffs = list(coeffs)
    if len(coeffs) == 0:
        return 0.0

    result = 0.0
    for c in coeffs:
        result = result * x + c
    return result


def round_decimals(value: float, decimals: int = 2) -> float:
    """
    Round the way a printf-style "%.Nf" format does (the text representation is
    parsed back into a float), so repeated roundings are reproducible.
    """
    return float(f"{value:.{decimals}f}")


def round_half_away(value: float) -> int:
    """Round to the nearest integer, ties away from zero."""
    return int(np.sign(value) * np.floor(np.abs(value) + 0.5))
