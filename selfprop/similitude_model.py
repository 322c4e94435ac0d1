"""Similitude quantities for the model-to-ship extrapolation.

- Froude length number and Reynolds number of model and ship.
- Grigson frictional resistance coefficient, the ITTC-accepted alternative to
  the ITTC-1957 line, as a piecewise cubic in log10(log10(Re)).
- Towing force (skin friction correction force) FD applied to the model at
  the self-propulsion point so that the model frictional resistance matches
  the ship's:

      CFD = (1+k)(CFm - CFs) - CA
      FD  = 0.5 rho Vm^2 Sm CFD
"""

from __future__ import annotations

from typing import Tuple

import numpy as np
from typeguard import typechecked

from selfprop.analysis_error import DomainError
from tanktools.models import eval_poly, round_decimals

# Grigson correlation, highest power of log10(log10(Re)) first
GRIGSON_THRESHOLD = 1e7
GRIGSON_LOW_COEFFS = (5.15283, -10.8843, 2.98651)
GRIGSON_HIGH_COEFFS = (10.8914, -30.8285, 26.6084, -9.57459)


def _check_positive(**values: float) -> None:
    for name, value in values.items():
        if not np.isfinite(value) or value <= 0:
            raise DomainError(f"Invalid {name}={value}, must be finite and > 0")


@typechecked
def froude_number(speed: float, reference_length: float, gravity: float) -> float:
    _check_positive(speed=speed, reference_length=reference_length, gravity=gravity)
    return float(speed / np.sqrt(gravity * reference_length))


@typechecked
def reynolds_number(
    speed: float, reference_length: float, kinematic_viscosity: float
) -> float:
    _check_positive(
        speed=speed,
        reference_length=reference_length,
        kinematic_viscosity=kinematic_viscosity,
    )
    return float(speed * reference_length / kinematic_viscosity)


@typechecked
def rounded_froude_number(speed: float, reference_length: float, gravity: float) -> float:
    """Froude number used to bucket runs by speed.

    The mean speed is rounded to two decimals first, then the Froude number of
    the rounded speed is rounded again. Both roundings are kept: they decide
    which bucket a run lands in near the bucket boundaries.
    """
    rounded_speed = round_decimals(speed, 2)
    return round_decimals(froude_number(rounded_speed, reference_length, gravity), 2)


@typechecked
def friction_coefficient(reynolds: float) -> float:
    """Grigson frictional resistance coefficient CF for a Reynolds number."""
    if not np.isfinite(reynolds) or reynolds <= 1:
        raise DomainError(f"Invalid reynolds={reynolds}, must be > 1")

    L = np.log10(np.log10(reynolds))
    if reynolds < GRIGSON_THRESHOLD:
        exponent = eval_poly(GRIGSON_LOW_COEFFS, L)
    else:
        exponent = eval_poly(GRIGSON_HIGH_COEFFS, L)
    return float(10.0**exponent)


@typechecked
def towing_force(
    density: float,
    speed: float,
    wetted_area: float,
    form_factor: float,
    cf_model: float,
    cf_full: float,
    correlation_allowance: float,
) -> Tuple[float, float]:
    """Towing force coefficient CFD and towing force FD (N)."""
    coefficient = form_factor * (cf_model - cf_full) - correlation_allowance
    force = 0.5 * density * speed**2 * wetted_area * coefficient
    return float(coefficient), float(force)


@typechecked
def calm_water_resistance(froude: float, coeffs: Tuple[float, ...]) -> float:
    """Bare hull calm-water resistance (N) from a polynomial in Froude number."""
    return float(eval_poly(coeffs, froude))
