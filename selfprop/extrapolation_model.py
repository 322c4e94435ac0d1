"""Model-to-ship extrapolation of a waterjet self-propulsion point.

Only the gross thrust TG = rho Q (vj - vi) is extrapolated. For each speed group:

- Ship resistance keeps the model residual resistance coefficient:

      CRm = CTm - (1+k) CFm
      CTs = (1+k) CFs + dCF + CA + CRm + CAA

  with the ITTC-78 roughness allowance dCF, correlation coefficient CA and air
  resistance coefficient CAA.
- Ship gross thrust per waterjet TGs = TGm lambda^3 rho_s / rho_m, split into
  port and stbd by the model thrust shares.
- Ship jet flow rate Q from TGs = rho_s Q (Q / An - (1-ws) Vs), with the model
  wake scaled by the friction ratio, ws = wm CFs / CFm.
- Pump effective power PPE = E7 / eta_nozzle - eta_ideal E1, delivered power
  PD = PPE / eta_pump, and overall propulsive efficiency eta_D = PE / PD.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np
from typeguard import typechecked

from selfprop.analysis_config import AnalysisConfig
from selfprop.analysis_error import DomainError, InsufficientDataError
from selfprop.run_data import FullScaleRecord, RunRecord, SelfPropulsionPoint
from selfprop.similitude_model import (
    calm_water_resistance,
    friction_coefficient,
    reynolds_number,
)

SHAFT_EFFICIENCY = 0.98
GEARBOX_EFFICIENCY = 0.98


@dataclass
class FullScalePoint:
    """Ship scale prediction at one speed group.

    Pairs are (port, stbd).
    """

    froude_number: float
    model_speed: float  # [m/s]
    ship_speed: float  # [m/s]
    ship_speed_knots: float
    ship_reynolds_number: float
    friction_coefficient: float  # CFs
    residual_resistance_coefficient: float  # CR
    total_resistance_coefficient: float  # CTs
    total_resistance: float  # RT [N]
    effective_power: float  # PE [W]
    thrust_deduction: float  # t
    wake_fraction: Tuple[float, float]  # ws
    gross_thrust: Tuple[float, float]  # [N]
    volume_flow_rate: Tuple[float, float]  # [m^3/s]
    jet_velocity: Tuple[float, float]  # [m/s]
    inlet_velocity: Tuple[float, float]  # [m/s]
    pump_effective_power: Tuple[float, float]  # PPE [W]
    delivered_power: Tuple[float, float]  # PD [W]
    brake_power: Tuple[float, float]  # PB [W]
    overall_propulsive_efficiency: float  # PE / (PD port + PD stbd)
    correlation_allowance: float  # of the towing force

    def record(self) -> FullScaleRecord:
        return FullScaleRecord(
            froude_number=np.float64(self.froude_number),
            ship_speed_knots=np.float64(self.ship_speed_knots),
            port_delivered_power=np.float64(self.delivered_power[0]),
            stbd_delivered_power=np.float64(self.delivered_power[1]),
            overall_propulsive_efficiency=np.float64(self.overall_propulsive_efficiency),
            correlation_allowance=np.float64(self.correlation_allowance),
        )


@typechecked
def roughness_allowance(reynolds: float, roughness: float, length: float) -> float:
    """ITTC-78 roughness allowance dCF."""
    return float(
        0.044 * ((roughness / length) ** (1 / 3) - 10 * reynolds ** (-1 / 3)) + 0.000125
    )


@typechecked
def correlation_coefficient(reynolds: float) -> float:
    """ITTC-78 correlation allowance CA of the ship resistance."""
    return float((5.68 - 0.6 * np.log10(reynolds)) * 1e-3)


@typechecked
def jet_volume_flow_rate(
    gross_thrust: float, density: float, nozzle_area: float, inlet_velocity: float
) -> float:
    """Positive root Q (m^3/s) of TG = rho Q (Q / An - vi)."""
    a = density / nozzle_area
    b = density * inlet_velocity
    discriminant = b**2 + 4 * a * gross_thrust
    if discriminant < 0:
        raise DomainError(f"No jet flow rate delivers a gross thrust of {gross_thrust} N")
    return float((b + np.sqrt(discriminant)) / (2 * a))


@typechecked
def pump_effective_power(
    density: float,
    volume_flow_rate: float,
    jet_velocity: float,
    inlet_velocity: float,
    wake_fraction: float,
    nozzle_efficiency: float,
) -> float:
    """Pump effective power PPE = E7 / eta_nozzle - eta_ideal E1 (W)."""
    if inlet_velocity <= 0:
        raise DomainError(f"Invalid inlet_velocity={inlet_velocity}, must be > 0")
    e1 = 0.5 * density * volume_flow_rate * inlet_velocity**2 * (1 - wake_fraction) ** 2
    e7 = 0.5 * density * volume_flow_rate * jet_velocity**2
    ideal_efficiency = 2 / (1 + jet_velocity / inlet_velocity)
    return float(e7 / nozzle_efficiency - ideal_efficiency * e1)


def _thrust_deduction(point: SelfPropulsionPoint) -> float:
    if point.thrust_deduction is not None:
        return float(point.thrust_deduction)
    # zero-thrust towing force stands in for the bare hull resistance
    return float(
        (point.towing_force - point.towing_force_at_zero_thrust)
        / point.gross_thrust_at_towing_force
        + 1
    )


def _shares(group: Sequence[RunRecord]) -> Tuple[float, float]:
    total = np.array([r.total_gross_thrust_b for r in group], dtype=float)
    if np.any(total == 0):
        raise DomainError("Zero total gross thrust, port and stbd shares are undefined")
    port = np.array([r.port_gross_thrust_b for r in group], dtype=float)
    stbd = np.array([r.stbd_gross_thrust_b for r in group], dtype=float)
    return float(np.mean(port / total)), float(np.mean(stbd / total))


@typechecked
def extrapolate(
    point: SelfPropulsionPoint,
    group: Sequence[RunRecord],
    config: AnalysisConfig,
    pump_efficiency: Tuple[float, float],
) -> FullScalePoint:
    """Extrapolates the self-propulsion point of a speed group to the ship.

    Args:
        point (SelfPropulsionPoint): solved point, gross thrust TG = rho Q (vj - vi)
        group (Sequence[RunRecord]): the runs of the speed group
        config (AnalysisConfig): model, ship and environment constants
        pump_efficiency (Tuple[float, float]): ship pump efficiency, port and stbd

    Returns:
        FullScalePoint: ship scale resistance, thrust, flow and powers
    """
    if point.thrust_definition != "B":
        raise ValueError(
            f"Only gross thrust B extrapolates, got {point.thrust_definition}"
        )
    if len(group) == 0:
        raise InsufficientDataError("No runs to extrapolate")
    for efficiency in pump_efficiency:
        if not np.isfinite(efficiency) or not 0 < efficiency <= 1:
            raise DomainError(f"Invalid pump_efficiency={efficiency}, must be in (0, 1]")

    froude = float(point.froude_number)
    rho_m = config.fresh_water_density
    rho_s = config.salt_water_density

    model_speed = float(np.mean([r.model_speed for r in group]))
    model_cf = friction_coefficient(
        reynolds_number(model_speed, config.model_lwl, config.model_kinematic_viscosity)
    )
    model_rt = calm_water_resistance(froude, config.calm_water_resistance)
    model_ct = model_rt / (0.5 * rho_m * config.model_wetted_area * model_speed**2)
    residual = model_ct - config.form_factor * model_cf

    ship_speed = model_speed * float(np.sqrt(config.scale_ratio))
    ship_re = reynolds_number(
        ship_speed, config.full_scale_lwl, config.full_scale_kinematic_viscosity
    )
    ship_cf = friction_coefficient(ship_re)
    air = (
        config.air_drag_coefficient
        * config.air_density
        * config.full_scale_projected_area
        / (rho_s * config.full_scale_wetted_area)
    )
    ship_ct = (
        config.form_factor * ship_cf
        + roughness_allowance(ship_re, config.hull_roughness, config.full_scale_lwl)
        + correlation_coefficient(ship_re)
        + residual
        + air
    )
    ship_rt = 0.5 * rho_s * ship_speed**2 * config.full_scale_wetted_area * ship_ct
    effective_power = ship_rt * ship_speed

    model_wake = (
        1 - float(np.mean([r.port_wake_fraction for r in group])),
        1 - float(np.mean([r.stbd_wake_fraction for r in group])),
    )
    thrust_scale = config.scale_ratio**3 * rho_s / rho_m

    sides: List[Tuple[float, ...]] = []
    for share, wm, efficiency in zip(_shares(group), model_wake, pump_efficiency):
        ws = wm * ship_cf / model_cf
        thrust = float(point.gross_thrust_at_towing_force) * share * thrust_scale
        vi = (1 - ws) * ship_speed
        q = jet_volume_flow_rate(thrust, rho_s, config.full_scale_nozzle_area, vi)
        vj = q / config.full_scale_nozzle_area
        ppe = pump_effective_power(rho_s, q, vj, vi, ws, config.nozzle_efficiency)
        pd = ppe / efficiency
        pb = pd / SHAFT_EFFICIENCY / GEARBOX_EFFICIENCY
        sides.append((ws, thrust, q, vj, vi, ppe, pd, pb))
    port, stbd = sides

    def pair(i: int) -> Tuple[float, float]:
        return float(port[i]), float(stbd[i])

    return FullScalePoint(
        froude_number=froude,
        model_speed=model_speed,
        ship_speed=ship_speed,
        ship_speed_knots=ship_speed / config.knots,
        ship_reynolds_number=ship_re,
        friction_coefficient=ship_cf,
        residual_resistance_coefficient=float(residual),
        total_resistance_coefficient=float(ship_ct),
        total_resistance=float(ship_rt),
        effective_power=float(effective_power),
        thrust_deduction=_thrust_deduction(point),
        wake_fraction=pair(0),
        gross_thrust=pair(1),
        volume_flow_rate=pair(2),
        jet_velocity=pair(3),
        inlet_velocity=pair(4),
        pump_effective_power=pair(5),
        delivered_power=pair(6),
        brake_power=pair(7),
        overall_propulsive_efficiency=float(effective_power / (port[6] + stbd[6])),
        correlation_allowance=config.correlation_allowance,
    )
