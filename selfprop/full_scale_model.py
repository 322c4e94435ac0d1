import numpy as np

from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union
from typeguard import typechecked

from selfprop.analysis_error import DomainError, InsufficientDataError
from selfprop.run_data import FullScaleRecord

SEA_TRIAL_FIT_DEGREE = 5
KNOT_SPEEDS = tuple(range(13, 26))  # [knots]
CAMPAIGN_TRIPLETS = ((0, 1, 2),)


@dataclass
class ComparisonBand:
    """Mean and population standard deviation across repeated condition sets.

    Attributes:
    ----------
    condition_sets (Tuple[int, ...])
        Indexes of the condition sets averaged in this band.
    speed_mean (np.ndarray)
        Per-row mean ship speed, in knots.
    power_mean (np.ndarray)
        Per-row mean delivered power, in MW.
    power_std (np.ndarray)
        Per-row population standard deviation of the delivered power, in MW.
    efficiency_mean (np.ndarray)
        Per-row mean overall propulsive efficiency.
    efficiency_std (np.ndarray)
        Per-row population standard deviation of the overall propulsive efficiency.

    """

    condition_sets: Tuple[int, ...]
    speed_mean: np.ndarray
    power_mean: np.ndarray
    power_std: np.ndarray
    efficiency_mean: np.ndarray
    efficiency_std: np.ndarray


@dataclass
class ComparisonReport:
    sea_trial_coeffs: np.ndarray  # highest power first
    knot_speeds: np.ndarray  # [knots]
    sea_trial_power: np.ndarray  # fitted corrected power at knot_speeds [MW]
    bands: List[ComparisonBand]


@typechecked
def fit_sea_trials(
    speeds: Union[np.ndarray, Sequence[float]],
    power: Union[np.ndarray, Sequence[float]],
    degree: int = SEA_TRIAL_FIT_DEGREE,
) -> np.ndarray:
    """Least squares polynomial of the sea trial corrected power against speed.

    Args:
        speeds (np.ndarray): ship speeds, in knots
        power (np.ndarray): corrected delivered power at those speeds
        degree (int): polynomial degree

    Returns:
        np.ndarray: polynomial coefficients, highest power first
    """
    speeds = np.asarray(speeds, dtype=float)
    power = np.asarray(power, dtype=float)
    if speeds.shape != power.shape:
        raise InsufficientDataError(
            f"Sea trial speeds and power differ in length: {speeds.size} vs {power.size}"
        )
    if np.unique(speeds).size <= degree:
        raise InsufficientDataError(
            f"A degree {degree} fit needs more than {degree} distinct sea trial speeds,"
            f" got {np.unique(speeds).size}"
        )
    return np.polyfit(speeds, power, degree)


@typechecked
def delivered_power_mw(record: FullScaleRecord, propulsor_sets: int = 2) -> float:
    """Total delivered power (MW) of the ship, port and stbd of every demihull."""
    total = (record.port_delivered_power + record.stbd_delivered_power) * propulsor_sets
    return float(total / 1e6)


@typechecked
def condition_sets_by_correlation_allowance(
    records: Sequence[FullScaleRecord], expected: int = 3
) -> List[List[FullScaleRecord]]:
    """Splits full scale results into condition sets, one per correlation allowance.

    Sets are ordered by increasing correlation allowance; rows keep their input order.
    """
    sets = {}
    for record in records:
        sets.setdefault(float(record.correlation_allowance), []).append(record)
    if len(sets) != expected:
        raise InsufficientDataError(
            f"Expected {expected} condition sets, found {len(sets)}: {sorted(sets)}"
        )
    return [sets[ca] for ca in sorted(sets)]


def _stack(condition_sets: Sequence[Sequence[FullScaleRecord]], value) -> np.ndarray:
    rows = {len(s) for s in condition_sets}
    if len(rows) != 1:
        raise InsufficientDataError(
            f"Condition sets differ in row count: {[len(s) for s in condition_sets]}"
        )
    return np.array([[value(r) for r in s] for s in condition_sets], dtype=float)


@typechecked
def band(
    condition_sets: Sequence[Sequence[FullScaleRecord]], indexes: Tuple[int, ...]
) -> ComparisonBand:
    """Per-row mean and population standard deviation across some condition sets."""
    for i in indexes:
        if i < 0:
            raise DomainError(f"Invalid condition set index {i}")
        if i >= len(condition_sets):
            raise InsufficientDataError(
                f"Condition set {i} requested, only {len(condition_sets)} available"
            )
    chosen = [condition_sets[i] for i in indexes]

    speed = _stack(chosen, lambda r: r.ship_speed_knots)
    power = _stack(chosen, delivered_power_mw)
    efficiency = _stack(chosen, lambda r: r.overall_propulsive_efficiency)

    return ComparisonBand(
        condition_sets=indexes,
        speed_mean=speed.mean(axis=0),
        power_mean=power.mean(axis=0),
        power_std=power.std(axis=0, ddof=0),
        efficiency_mean=efficiency.mean(axis=0),
        efficiency_std=efficiency.std(axis=0, ddof=0),
    )


@typechecked
def compare(
    sea_trial_speeds: Union[np.ndarray, Sequence[float]],
    sea_trial_power: Union[np.ndarray, Sequence[float]],
    condition_sets: Sequence[Sequence[FullScaleRecord]],
    triplets: Sequence[Tuple[int, ...]] = CAMPAIGN_TRIPLETS,
    knot_speeds: Sequence[int] = KNOT_SPEEDS,
) -> ComparisonReport:
    """Compares the extrapolated full scale power against the sea trials.

    Args:
        sea_trial_speeds (np.ndarray): sea trial ship speeds, in knots
        sea_trial_power (np.ndarray): sea trial corrected power, in MW
        condition_sets (Sequence[Sequence[FullScaleRecord]]): full scale results
            of repeated analysis passes, row by row at the same nominal speeds
        triplets (Sequence[Tuple[int, ...]]): groups of condition set indexes
            averaged together
        knot_speeds (Sequence[int]): speeds at which the sea trial fit is sampled

    Returns:
        ComparisonReport: sea trial fit sampled at knot_speeds and one band per triplet
    """
    coeffs = fit_sea_trials(sea_trial_speeds, sea_trial_power)
    knots = np.asarray(knot_speeds, dtype=float)
    return ComparisonReport(
        sea_trial_coeffs=coeffs,
        knot_speeds=knots,
        sea_trial_power=np.polyval(coeffs, knots),
        bands=[band(condition_sets, tuple(t)) for t in triplets],
    )
