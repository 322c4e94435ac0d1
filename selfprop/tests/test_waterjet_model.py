import numpy as np
import pytest
from hypothesis import given, strategies

import selfprop.waterjet_model as waterjet_model
from selfprop.analysis_error import DomainError, MissingInputError
from tanktools.models import eval_poly


def test_mass_flow_rate_above_threshold():
    assert np.isclose(waterjet_model.mass_flow_rate(2.0), 2.8327)


def test_mass_flow_rate_below_threshold():
    v = 1.5
    expected = (
        0.4186 * v**5
        - 4.5094 * v**4
        + 19.255 * v**3
        - 41.064 * v**2
        + 45.647 * v
        - 19.488
    )

    assert np.isclose(waterjet_model.mass_flow_rate(v), expected)


def test_mass_flow_rate_threshold_uses_lower_curve():
    calibration = waterjet_model.PIECEWISE_CALIBRATION

    assert waterjet_model.mass_flow_rate(1.86) == eval_poly(calibration.coeffs_below, 1.86)


@pytest.mark.parametrize("eps", [1e-3, 1e-6])
def test_mass_flow_rate_continuity(eps: float):
    below = waterjet_model.mass_flow_rate(1.86 - eps)
    above = waterjet_model.mass_flow_rate(1.86 + eps)

    assert np.isclose(below, above, rtol=1e-2)


def test_sept_2014_calibrations():
    v = 2.0
    port = -0.0421 * v**4 + 0.5718 * v**3 - 2.9517 * v**2 + 7.8517 * v - 5.1976
    stbd = -0.0946 * v**4 + 1.1259 * v**3 - 5.0067 * v**2 + 11.0896 * v - 6.8705

    assert np.isclose(
        waterjet_model.mass_flow_rate(v, waterjet_model.SEPT_2014_PORT_CALIBRATION), port
    )
    assert np.isclose(
        waterjet_model.mass_flow_rate(v, waterjet_model.SEPT_2014_STBD_CALIBRATION), stbd
    )


def test_flow_rates():
    volume_flow_rate, jet_velocity = waterjet_model.flow_rates(10.0, 1000.0, 0.00087)

    assert np.isclose(volume_flow_rate, 0.01)
    assert round(jet_velocity, 3) == 11.494


@pytest.mark.parametrize("density, nozzle_area", [(0.0, 0.00087), (1000.0, 0.0)])
def test_flow_rates_domain(density: float, nozzle_area: float):
    with pytest.raises(DomainError):
        waterjet_model.flow_rates(10.0, density, nozzle_area)


def _table() -> waterjet_model.WakeFractionTable:
    return waterjet_model.WakeFractionTable.from_sequences(
        runs=[(101, 102, 103, 107), (98, 99, 100, 108)],
        fractions=[(0.781, 0.784), (0.80, 0.81)],
    )


def test_wake_fraction():
    table = _table()

    assert waterjet_model.wake_fraction(101, table) == (0.781, 0.784)
    assert waterjet_model.wake_fraction(108, table) == (0.80, 0.81)


def test_wake_fraction_unmatched_run():
    assert waterjet_model.wake_fraction(999, _table()) == (1.0, 1.0)


def test_wake_fraction_missing_entry():
    table = waterjet_model.WakeFractionTable.from_sequences(
        runs=[(101, 102), (98, 99)], fractions=[(0.781, 0.784)]
    )

    with pytest.raises(MissingInputError):
        waterjet_model.wake_fraction(98, table)


def test_wake_fraction_table_disjoint():
    with pytest.raises(ValueError, match="Run 102"):
        waterjet_model.WakeFractionTable.from_sequences(
            runs=[(101, 102), (102, 103)], fractions=[(0.7, 0.7), (0.8, 0.8)]
        )


@given(
    mass_flow_rate=strategies.floats(min_value=0.0, max_value=10.0),
    jet_velocity=strategies.floats(min_value=0.0, max_value=20.0),
    speed=strategies.floats(min_value=0.0, max_value=5.0),
    wake=strategies.floats(min_value=0.5, max_value=1.0),
)
def test_gross_thrust(
    mass_flow_rate: float, jet_velocity: float, speed: float, wake: float
):
    inlet_velocity = waterjet_model.inlet_velocity(speed, wake)
    a, b = waterjet_model.gross_thrust(mass_flow_rate, jet_velocity, inlet_velocity)

    assert np.isclose(a, mass_flow_rate * jet_velocity)
    assert np.isclose(b, mass_flow_rate * (jet_velocity - speed * wake))
    assert np.isclose(a - b, mass_flow_rate * inlet_velocity)


def test_total_gross_thrust():
    total = waterjet_model.total_gross_thrust((10.0, 4.0), (11.0, 5.0))

    assert total == (21.0, 9.0)
