import dataclasses

import numpy as np
import pytest

import selfprop.run_data as run_data
import selfprop.run_record_builder as run_record_builder
import selfprop.similitude_model as similitude_model
from selfprop.analysis_error import InsufficientDataError, MissingInputError
from selfprop.tests.run_factory import make_run


def test_average_channels():
    means = run_record_builder.average_channels(make_run(104))

    assert means.sample_count == 6001
    assert means.duration == 60.0
    assert np.isclose(means.values[run_data.SPEED], 1.95)
    assert np.isclose(means.values[run_data.DRAG], 1000.0)
    assert np.isclose(means.values[run_data.PORT_KIEL_PROBE], 2.0)
    assert means.values[run_data.STBD_SHAFT_RPM] == 1100.0


def test_average_channels_applies_calibration():
    run = make_run(104)
    run.calibrations[run_data.DRAG] = run_data.ChannelCalibration(zero=10.0, factor=2.0)

    means = run_record_builder.average_channels(run)

    assert np.isclose(means.values[run_data.DRAG], (1000.0 - 10.0) * 2.0)


def test_kiel_probe_is_not_calibrated():
    run = make_run(104)
    run.calibrations[run_data.PORT_KIEL_PROBE] = run_data.ChannelCalibration(
        zero=1.0, factor=5.0
    )

    means = run_record_builder.average_channels(run)

    assert np.isclose(means.values[run_data.PORT_KIEL_PROBE], 2.0)


def test_build(config):
    record = run_record_builder.build_from_input(make_run(104), config)
    g = config.gravity

    assert len(dataclasses.fields(record)) == 45
    assert record.run_number == 104
    assert record.sampling_frequency == 100
    assert record.record_time == 60
    assert record.froude_number == 0.30

    assert np.isclose(record.drag, 1000.0 / 1000 * g)
    assert np.isclose(record.port_thrust, 0.4 * 9.806)
    assert np.isclose(record.stbd_thrust, 0.42 * 9.806)
    assert np.isclose(record.full_scale_speed, 1.95 * np.sqrt(21.6))
    assert np.isclose(record.full_scale_speed_knots, record.full_scale_speed / 0.514444)

    # Run 104 is a set shaft speed run
    assert np.isclose(record.shaft_speed_rpm, 1050.0)

    # Towing force
    cf_model = similitude_model.friction_coefficient(
        1.95 * 4.30 / config.model_kinematic_viscosity
    )
    cf_full = similitude_model.friction_coefficient(
        1.95 * np.sqrt(21.6) * 4.30 * 21.6 / config.full_scale_kinematic_viscosity
    )
    coefficient = 1.18 * (cf_model - cf_full)
    assert np.isclose(record.model_friction_coefficient, cf_model)
    assert np.isclose(record.towing_force_coefficient, coefficient)
    assert np.isclose(record.towing_force, 0.5 * 1000 * 1.95**2 * 1.501 * coefficient)

    # Flow: 2.0 V gives 2.8327 kg/s
    area = np.pi * (0.72 / 2 / 21.6) ** 2
    assert np.isclose(record.port_mass_flow_rate, 2.8327)
    assert np.isclose(record.port_volume_flow_rate, 2.8327e-3)
    assert np.isclose(record.port_jet_velocity, 2.8327e-3 / area)

    # Run 104 is in the Fr = 0.30 bucket, (1-w) = (0.73, 0.74)
    assert np.isclose(record.port_wake_fraction, 0.73)
    assert np.isclose(record.stbd_wake_fraction, 0.74)
    assert np.isclose(record.port_inlet_velocity, 1.95 * 0.73)

    vj, vi = record.port_jet_velocity, record.port_inlet_velocity
    assert np.isclose(record.port_gross_thrust_a, 2.8327 * vj)
    assert np.isclose(record.port_gross_thrust_b, 2.8327 * (vj - vi))
    assert np.isclose(
        record.total_gross_thrust_a,
        record.port_gross_thrust_a + record.stbd_gross_thrust_a,
    )
    assert np.isclose(
        record.total_gross_thrust_b,
        record.port_gross_thrust_b + record.stbd_gross_thrust_b,
    )


def test_build_without_set_shaft_speed(config):
    record = run_record_builder.build_from_input(make_run(70), config)

    assert record.shaft_speed_rpm == 0.0
    assert record.port_shaft_rpm == 1000.0


def test_build_unmatched_run_has_no_wake_correction(config):
    record = run_record_builder.build_from_input(make_run(999), config)

    assert record.port_wake_fraction == 1.0
    assert np.isclose(record.port_inlet_velocity, record.model_speed)


def test_build_correlation_allowance(config):
    run = make_run(104)
    base = run_record_builder.build_from_input(run, config)
    corrected = run_record_builder.build_from_input(
        run, config.with_correlation_allowance(0.00035)
    )

    assert corrected.correlation_allowance == 0.00035
    assert np.isclose(
        base.towing_force_coefficient - corrected.towing_force_coefficient, 0.00035
    )
    assert corrected.towing_force < base.towing_force


def test_build_is_pure(config):
    run = make_run(104)

    assert run_record_builder.build_from_input(
        run, config
    ) == run_record_builder.build_from_input(run, config)


@pytest.mark.parametrize("channel", [run_data.DRAG, run_data.PORT_KIEL_PROBE])
def test_missing_channel(config, channel: str):
    run = make_run(104)
    del run.channels[channel]

    with pytest.raises(MissingInputError) as e:
        run_record_builder.build_from_input(run, config)
    assert e.value.field == channel
    assert "104" in e.value.message


def test_missing_calibration(config):
    run = make_run(104)
    del run.calibrations[run_data.SPEED]

    with pytest.raises(MissingInputError, match="speed calibration"):
        run_record_builder.build_from_input(run, config)


def test_missing_shaft_speed(config):
    run = make_run(104)
    run.shaft_speeds.clear()

    with pytest.raises(MissingInputError):
        run_record_builder.build_from_input(run, config)


def test_missing_wake_fraction_entry(config):
    table = dataclasses.replace(
        config.wake_fractions, fractions=config.wake_fractions.fractions[:3]
    )

    with pytest.raises(MissingInputError):
        run_record_builder.build_from_input(
            make_run(104), dataclasses.replace(config, wake_fractions=table)
        )


def test_empty_run(config):
    run = make_run(104)
    run.time = np.array([])

    with pytest.raises(InsufficientDataError):
        run_record_builder.build_from_input(run, config)
