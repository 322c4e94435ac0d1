"""Self-propulsion points from runs grouped by speed.

Within one speed group the model was towed at the same speed with varying
waterjet flow rates. Gross thrust is fitted linearly against the measured
bare hull resistance (drag); the self-propulsion point at model scale is the
gross thrust of that line at the towing force FD, and the force at zero gross
thrust is where the line crosses TG = 0.

The reverse fit (resistance against gross thrust) gives dR/dTG; 1 + dR/dTG is
reported as the slope-based thrust deduction fraction.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Dict, List, Literal, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from scipy.interpolate import CubicSpline
from typeguard import typechecked

from selfprop.analysis_error import InsufficientDataError
from selfprop.run_data import RunRecord, SelfPropulsionPoint
from selfprop.similitude_model import calm_water_resistance

THRUST_FIELDS = {
    "A": "total_gross_thrust_a",  # TG = rho Q vj
    "B": "total_gross_thrust_b",  # TG = rho Q (vj - vi)
}

Method = Literal["direct", "spline"]


@typechecked
def split(records: Sequence[RunRecord]) -> Dict[float, List[RunRecord]]:
    """Groups run records by their (rounded) Froude number, keeping input order."""
    groups: Dict[float, List[RunRecord]] = {}
    for record in records:
        groups.setdefault(float(record.froude_number), []).append(record)
    return dict(sorted(groups.items()))


@typechecked
def require_complete(groups: Dict[float, List[RunRecord]], expected: Sequence[float]) -> None:
    """Raises unless there is exactly one group per expected speed."""
    missing = sorted(set(expected) - set(groups))
    if missing or len(groups) != len(expected):
        raise InsufficientDataError(
            f"Dataset is not complete: {len(groups)} of {len(expected)} speeds,"
            f" missing Fr = {missing}"
        )


def _interpolate(x: np.ndarray, y: np.ndarray, xq: float) -> float:
    x, index = np.unique(x, return_index=True)
    if x.size < 2:
        raise InsufficientDataError("Need at least 2 distinct values to interpolate")
    return float(CubicSpline(x, y[index])(xq))


def _fit_line(x: np.ndarray, y: np.ndarray, what: str) -> Tuple[float, float]:
    if np.unique(x).size < 2:
        raise InsufficientDataError(f"Need at least 2 distinct {what} values to fit a line")
    slope, intercept = np.polyfit(x, y, 1)
    return float(slope), float(intercept)


@typechecked
def solve(
    group: Sequence[RunRecord],
    thrust_definition: Literal["A", "B"] = "A",
    *,
    method: Method = "direct",
    calm_water_coeffs: Optional[Tuple[float, ...]] = None,
) -> SelfPropulsionPoint:
    """Solves the self-propulsion point of one speed group.

    Args:
        group (Sequence[RunRecord]): runs sharing one Froude number
        thrust_definition (str): "A" for TG = rho Q vj, "B" for TG = rho Q (vj - vi)
        method (str): "direct" evaluates the fitted line; "spline" evaluates a
            cubic spline through the fitted values, as the legacy scripts did
        calm_water_coeffs (Tuple[float, ...]): bare hull calm-water resistance
            polynomial in Froude number; when given, the thrust deduction
            fraction at the self-propulsion point is computed

    Returns:
        SelfPropulsionPoint: the fitted lines and the interpolated points
    """
    if len(group) < 2:
        raise InsufficientDataError(
            f"Speed group has {len(group)} run(s), at least 2 are needed"
        )

    thrust_field = THRUST_FIELDS[thrust_definition]
    resistance = np.array([r.drag for r in group], dtype=float)
    thrust = np.array([getattr(r, thrust_field) for r in group], dtype=float)
    froude_number = float(group[0].froude_number)
    towing_force = float(group[0].towing_force)

    slope, intercept = _fit_line(resistance, thrust, "resistance")
    resistance_slope, _ = _fit_line(thrust, resistance, "gross thrust")

    if method == "spline":
        fitted = np.polyval([slope, intercept], resistance)
        thrust_at_towing_force = _interpolate(resistance, fitted, towing_force)
        force_at_zero_thrust = _interpolate(fitted, resistance, 0.0)
    else:
        if slope == 0:
            raise InsufficientDataError("Fitted gross thrust does not vary with resistance")
        thrust_at_towing_force = slope * towing_force + intercept
        force_at_zero_thrust = -intercept / slope

    thrust_deduction = None
    if calm_water_coeffs is not None and thrust_at_towing_force != 0:
        resistance_calm = calm_water_resistance(froude_number, calm_water_coeffs)
        thrust_deduction = np.float64(
            (thrust_at_towing_force + towing_force - resistance_calm)
            / thrust_at_towing_force
        )

    return SelfPropulsionPoint(
        froude_number=np.float64(froude_number),
        thrust_definition=thrust_definition,
        towing_force=np.float64(towing_force),
        gross_thrust_at_towing_force=np.float64(thrust_at_towing_force),
        towing_force_at_zero_thrust=np.float64(force_at_zero_thrust),
        thrust_slope=np.float64(slope),
        thrust_intercept=np.float64(intercept),
        resistance_slope=np.float64(resistance_slope),
        thrust_deduction_from_slope=np.float64(resistance_slope + 1),
        thrust_deduction=thrust_deduction,
    )


def points_frame(points: Sequence[SelfPropulsionPoint]) -> pd.DataFrame:
    columns = list(SelfPropulsionPoint.__dataclass_fields__.keys())
    return pd.DataFrame([asdict(p) for p in points], columns=columns)
