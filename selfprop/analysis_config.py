"""Static constants of one self-propulsion analysis pass.

Defaults describe the 1:21.6 scale waterjet catamaran model tested in the
100 m towing tank (runs 70 to 109). Each analysis pass uses its own
`AnalysisConfig`; passes differing only by the correlation allowance are built
with `with_correlation_allowance`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import FrozenSet, Optional, Tuple

import numpy as np
from typeguard import typechecked

from selfprop.analysis_error import DomainError
from selfprop.waterjet_model import (
    PIECEWISE_CALIBRATION,
    KielProbeCalibration,
    WakeFractionTable,
)

CAMPAIGN_FROUDE_NUMBERS = (0.24, 0.26, 0.28, 0.30, 0.32, 0.34, 0.36, 0.38, 0.40)

CAMPAIGN_RUNS_PER_SPEED = (
    (101, 102, 103, 107),  # Fr = 0.24
    (98, 99, 100, 108),  # Fr = 0.26
    (95, 96, 97, 109),  # Fr = 0.28
    (70, 104, 71, 72, 73, 74),  # Fr = 0.30
    (75, 76, 78, 77),  # Fr = 0.32
    (79, 80, 81),  # Fr = 0.34
    (82, 83, 84),  # Fr = 0.36
    (85, 86, 87, 88, 89, 105, 106),  # Fr = 0.38
    (90, 91, 92, 93, 94),  # Fr = 0.40
)

# Runs 90 to 109 were driven at a set motor shaft speed
CAMPAIGN_SHAFT_SPEED_RUNS = frozenset(range(90, 110))

# Bare hull calm-water resistance (N) vs. Froude number, highest power first
CAMPAIGN_CALM_WATER_RESISTANCE = (-7932.12, 13710.12, -9049.96, 2989.46, -386.61, 18.6)

CORRELATION_ALLOWANCES = (0.0, 0.00035, 0.00059)


@typechecked
def ittc_kinematic_viscosity(temperature: float) -> float:
    """ITTC fresh water kinematic viscosity (m^2/s) at a temperature (degrees C)."""
    dt = temperature - 12.0
    return float(((0.585e-3 * dt - 0.03361) * dt + 1.235) * 1e-6)


def campaign_wake_fraction_table(
    fractions: Tuple[Tuple[float, float], ...],
) -> WakeFractionTable:
    """Wake fraction table over the campaign run-number buckets."""
    return WakeFractionTable.from_sequences(CAMPAIGN_RUNS_PER_SPEED, fractions)


@dataclass(frozen=True)
class AnalysisConfig:
    wake_fractions: WakeFractionTable

    # Environment
    gravity: float = 9.806  # [m/s^2]
    water_temperature: float = 18.5  # [degrees C]
    full_scale_kinematic_viscosity: float = 0.0000011581  # [m^2/s]
    fresh_water_density: float = 1000.0  # [kg/m^3]
    salt_water_density: float = 1025.0  # [kg/m^3]

    # Model
    scale_ratio: float = 21.6  # full scale to model scale
    model_lwl: float = 4.30  # [m]
    model_wetted_area: float = 1.501  # [m^2]
    model_draft: float = 0.133  # [m]
    full_scale_effective_nozzle_diameter: float = 0.72  # [m]

    # Extrapolation
    form_factor: float = 1.18  # (1+k)
    correlation_allowance: float = 0.0  # CA
    knots: float = 0.514444  # [m/s]

    port_calibration: KielProbeCalibration = PIECEWISE_CALIBRATION
    stbd_calibration: KielProbeCalibration = PIECEWISE_CALIBRATION
    shaft_speed_runs: FrozenSet[int] = CAMPAIGN_SHAFT_SPEED_RUNS
    froude_numbers: Tuple[float, ...] = CAMPAIGN_FROUDE_NUMBERS
    calm_water_resistance: Tuple[float, ...] = CAMPAIGN_CALM_WATER_RESISTANCE

    # Full scale resistance and waterjet
    hull_roughness: float = 150e-6  # [m]
    air_drag_coefficient: float = 0.446
    air_density: float = 1.2041  # [kg/m^3]
    full_scale_projected_area: float = 341.5 / 2  # above water, per demihull [m^2]
    full_scale_nozzle_area: float = 0.4072  # [m^2]
    nozzle_efficiency: float = 0.98

    # Overrides the ITTC value at water_temperature
    measured_model_kinematic_viscosity: Optional[float] = None  # [m^2/s]

    @property
    def model_kinematic_viscosity(self) -> float:
        if self.measured_model_kinematic_viscosity is not None:
            return self.measured_model_kinematic_viscosity
        return ittc_kinematic_viscosity(self.water_temperature)

    def validate(self) -> None:
        vals = {
            "gravity": self.gravity,
            "model_kinematic_viscosity": self.model_kinematic_viscosity,
            "full_scale_kinematic_viscosity": self.full_scale_kinematic_viscosity,
            "fresh_water_density": self.fresh_water_density,
            "salt_water_density": self.salt_water_density,
            "scale_ratio": self.scale_ratio,
            "model_lwl": self.model_lwl,
            "model_wetted_area": self.model_wetted_area,
            "model_draft": self.model_draft,
            "full_scale_effective_nozzle_diameter": self.full_scale_effective_nozzle_diameter,
            "form_factor": self.form_factor,
            "knots": self.knots,
            "hull_roughness": self.hull_roughness,
            "air_density": self.air_density,
            "full_scale_projected_area": self.full_scale_projected_area,
            "full_scale_nozzle_area": self.full_scale_nozzle_area,
            "nozzle_efficiency": self.nozzle_efficiency,
        }
        for k, v in vals.items():
            if not np.isfinite(v) or v <= 0:
                raise DomainError(f"Invalid {k}={v}")
        if not np.isfinite(self.correlation_allowance):
            raise DomainError(f"Invalid correlation_allowance={self.correlation_allowance}")

    @property
    def full_scale_lwl(self) -> float:
        return self.model_lwl * self.scale_ratio

    @property
    def full_scale_wetted_area(self) -> float:
        return self.model_wetted_area * self.scale_ratio**2

    @property
    def full_scale_draft(self) -> float:
        return self.model_draft * self.scale_ratio

    @property
    def model_nozzle_area(self) -> float:
        """Model nozzle area (m^2) from the full scale effective nozzle diameter."""
        return float(
            np.pi * (self.full_scale_effective_nozzle_diameter / 2 / self.scale_ratio) ** 2
        )

    def with_correlation_allowance(self, correlation_allowance: float) -> AnalysisConfig:
        return replace(self, correlation_allowance=correlation_allowance)
