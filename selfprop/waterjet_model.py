from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional, Sequence, Tuple

from typeguard import typechecked

from selfprop.analysis_error import DomainError, MissingInputError
from tanktools.models import eval_poly


@dataclass(frozen=True)
class KielProbeCalibration:
    """Waterjet pump flow rate calibration, Kiel probe voltage to mass flow rate.

    Attributes:
    ----------
    coeffs_above (Tuple[float, ...])
        Polynomial coefficients (highest power first) used above the threshold,
        or everywhere when no lower segment is given.
    coeffs_below (Optional[Tuple[float, ...]])
        Polynomial coefficients used at or below the threshold.
    threshold (float)
        Kiel probe voltage (V) separating the two segments.

    """

    coeffs_above: Tuple[float, ...]
    coeffs_below: Optional[Tuple[float, ...]] = None
    threshold: float = 1.86

    @typechecked
    def mass_flow_rate(self, voltage: float) -> float:
        """Solves the mass flow rate (kg/s) for a Kiel probe voltage (V)."""
        if self.coeffs_below is None or voltage > self.threshold:
            return float(eval_poly(self.coeffs_above, voltage))
        return float(eval_poly(self.coeffs_below, voltage))


# Flow rate measurements of June 2013
PIECEWISE_CALIBRATION = KielProbeCalibration(
    coeffs_above=(0.1133, -1.0326, 4.3652, -2.6737),
    coeffs_below=(0.4186, -4.5094, 19.255, -41.064, 45.647, -19.488),
    threshold=1.86,
)

# Flow rate measurements of September 2014, one curve per waterjet
SEPT_2014_PORT_CALIBRATION = KielProbeCalibration(
    coeffs_above=(-0.0421, 0.5718, -2.9517, 7.8517, -5.1976),
)
SEPT_2014_STBD_CALIBRATION = KielProbeCalibration(
    coeffs_above=(-0.0946, 1.1259, -5.0067, 11.0896, -6.8705),
)


@typechecked
def mass_flow_rate(
    voltage: float, calibration: KielProbeCalibration = PIECEWISE_CALIBRATION
) -> float:
    return calibration.mass_flow_rate(voltage)


@typechecked
def flow_rates(
    mass_flow_rate: float, density: float, nozzle_area: float
) -> Tuple[float, float]:
    """Volume flow rate (m^3/s) and jet velocity (m/s) from the mass flow rate."""
    if density <= 0 or nozzle_area <= 0:
        raise DomainError(
            f"Invalid density={density} or nozzle_area={nozzle_area}, must be > 0"
        )
    volume_flow_rate = mass_flow_rate / density
    jet_velocity = volume_flow_rate / nozzle_area
    return float(volume_flow_rate), float(jet_velocity)


@dataclass(frozen=True)
class WakeFractionTable:
    """Pre-measured wake fractions (1-w), one (port, stbd) pair per speed bucket.

    Runs are assigned to buckets by membership in disjoint run-number sets. A
    bucket listed in `runs` but without a matching entry in `fractions` is a
    missing table entry.
    """

    runs: Tuple[FrozenSet[int], ...]
    fractions: Tuple[Tuple[float, float], ...]
    _bucket_of: Dict[int, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        bucket_of: Dict[int, int] = {}
        for bucket, run_numbers in enumerate(self.runs):
            for run_number in run_numbers:
                if run_number in bucket_of:
                    raise ValueError(
                        f"Run {run_number} is listed in speed buckets "
                        f"{bucket_of[run_number]} and {bucket}"
                    )
                bucket_of[run_number] = bucket
        object.__setattr__(self, "_bucket_of", bucket_of)

    @classmethod
    def from_sequences(
        cls,
        runs: Sequence[Sequence[int]],
        fractions: Sequence[Tuple[float, float]],
    ) -> WakeFractionTable:
        return cls(
            runs=tuple(frozenset(r) for r in runs),
            fractions=tuple((float(p), float(s)) for p, s in fractions),
        )

    def bucket(self, run_number: int) -> Optional[int]:
        return self._bucket_of.get(run_number)


@typechecked
def wake_fraction(run_number: int, table: WakeFractionTable) -> Tuple[float, float]:
    """(port, stbd) wake fraction (1-w) of a run, (1.0, 1.0) when the run is in no bucket."""
    bucket = table.bucket(run_number)
    if bucket is None:
        return 1.0, 1.0
    if bucket >= len(table.fractions):
        raise MissingInputError(f"wake fraction of speed bucket {bucket + 1}", run_number)
    return table.fractions[bucket]


@typechecked
def inlet_velocity(model_speed: float, wake_fraction: float) -> float:
    return float(model_speed * wake_fraction)


@typechecked
def gross_thrust(
    mass_flow_rate: float, jet_velocity: float, inlet_velocity: float
) -> Tuple[float, float]:
    """Gross thrust (N) of one waterjet under both momentum flux definitions.

    Returns:
        Tuple[float, float]: (A) TG = rho Q vj, and (B) TG = rho Q (vj - vi)
    """
    definition_a = mass_flow_rate * jet_velocity
    definition_b = mass_flow_rate * (jet_velocity - inlet_velocity)
    return float(definition_a), float(definition_b)


@typechecked
def total_gross_thrust(
    port: Tuple[float, float], stbd: Tuple[float, float]
) -> Tuple[float, float]:
    """Sums port and stbd gross thrust, definition by definition."""
    return port[0] + stbd[0], port[1] + stbd[1]
