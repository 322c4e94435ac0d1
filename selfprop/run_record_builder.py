import numpy as np
from typeguard import typechecked

import selfprop.calibration_model as calibration_model
import selfprop.run_data as run_data
import selfprop.similitude_model as similitude_model
import selfprop.waterjet_model as waterjet_model
from selfprop.analysis_config import AnalysisConfig
from selfprop.analysis_error import InsufficientDataError, MissingInputError
from tanktools.models import round_half_away


@typechecked
def average_channels(run: run_data.RunInputData) -> run_data.ChannelMeans:
    """Converts the raw channels of a run into real-unit means."""
    time = np.asarray(run.time, dtype=float)
    if time.size == 0 or time[-1] <= 0:
        raise InsufficientDataError(f"Run {run.run_number} has no recorded samples")

    values: dict[str, float] = {}
    for name in run_data.CALIBRATED_CHANNELS:
        if name not in run.channels:
            raise MissingInputError(name, run.run_number)
        if name not in run.calibrations:
            raise MissingInputError(f"{name} calibration", run.run_number)
        _, values[name] = calibration_model.convert_channel(
            run.channels[name], run.calibrations[name]
        )

    for name in run_data.VOLTAGE_CHANNELS:
        if name not in run.channels:
            raise MissingInputError(name, run.run_number)
        values[name] = float(np.mean(run.channels[name]))

    for name in run_data.SHAFT_SPEEDS:
        if name in run.shaft_speeds:
            values[name] = float(run.shaft_speeds[name])

    return run_data.ChannelMeans(
        sample_count=int(time.size), duration=float(time[-1]), values=values
    )


@typechecked
def build(
    run_number: int, means: run_data.ChannelMeans, config: AnalysisConfig
) -> run_data.RunRecord:
    """Builds the derived quantities of one run from its channel means."""

    def mean(name: str) -> float:
        if name not in means.values:
            raise MissingInputError(name, run_number)
        return means.values[name]

    g = config.gravity

    # 1. Identity
    if means.duration <= 0 or means.sample_count <= 0:
        raise InsufficientDataError(f"Run {run_number} has no recorded samples")
    sampling_frequency = round_half_away(means.sample_count / means.duration)
    if sampling_frequency <= 0:
        raise InsufficientDataError(f"Run {run_number} has no usable sampling frequency")
    record_time = round_half_away(means.sample_count / sampling_frequency)

    # 2. Kinematics
    model_speed = mean(run_data.SPEED)
    froude_number = similitude_model.rounded_froude_number(
        model_speed, config.model_lwl, g
    )
    full_scale_speed = model_speed * np.sqrt(config.scale_ratio)

    # 3. Resistance and propulsion
    drag_g = mean(run_data.DRAG)
    port_thrust = abs(mean(run_data.PORT_THRUST) / 1000) * g
    stbd_thrust = abs(mean(run_data.STBD_THRUST) / 1000) * g
    port_rpm = mean(run_data.PORT_SHAFT_RPM)
    stbd_rpm = mean(run_data.STBD_SHAFT_RPM)
    shaft_speed_rpm = 0.0
    if run_number in config.shaft_speed_runs:
        shaft_speed_rpm = (port_rpm + stbd_rpm) / 2

    # 4. Similitude and towing force
    model_reynolds = similitude_model.reynolds_number(
        model_speed, config.model_lwl, config.model_kinematic_viscosity
    )
    full_scale_reynolds = similitude_model.reynolds_number(
        full_scale_speed, config.full_scale_lwl, config.full_scale_kinematic_viscosity
    )
    cf_model = similitude_model.friction_coefficient(model_reynolds)
    cf_full = similitude_model.friction_coefficient(full_scale_reynolds)
    towing_force_coefficient, towing_force = similitude_model.towing_force(
        density=config.fresh_water_density,
        speed=model_speed,
        wetted_area=config.model_wetted_area,
        form_factor=config.form_factor,
        cf_model=cf_model,
        cf_full=cf_full,
        correlation_allowance=config.correlation_allowance,
    )

    # 5. Waterjet flow
    port_kiel_probe = mean(run_data.PORT_KIEL_PROBE)
    stbd_kiel_probe = mean(run_data.STBD_KIEL_PROBE)
    port_mfr = waterjet_model.mass_flow_rate(port_kiel_probe, config.port_calibration)
    stbd_mfr = waterjet_model.mass_flow_rate(stbd_kiel_probe, config.stbd_calibration)
    port_vfr, port_jet_velocity = waterjet_model.flow_rates(
        port_mfr, config.fresh_water_density, config.model_nozzle_area
    )
    stbd_vfr, stbd_jet_velocity = waterjet_model.flow_rates(
        stbd_mfr, config.fresh_water_density, config.model_nozzle_area
    )

    # 6. Wake
    port_wf, stbd_wf = waterjet_model.wake_fraction(run_number, config.wake_fractions)
    port_inlet_velocity = waterjet_model.inlet_velocity(model_speed, port_wf)
    stbd_inlet_velocity = waterjet_model.inlet_velocity(model_speed, stbd_wf)

    # 7. Gross thrust
    port_tg = waterjet_model.gross_thrust(port_mfr, port_jet_velocity, port_inlet_velocity)
    stbd_tg = waterjet_model.gross_thrust(stbd_mfr, stbd_jet_velocity, stbd_inlet_velocity)
    total_tg = waterjet_model.total_gross_thrust(port_tg, stbd_tg)

    return run_data.RunRecord(
        run_number=run_number,
        sampling_frequency=sampling_frequency,
        sample_count=means.sample_count,
        record_time=record_time,
        froude_number=np.float64(froude_number),
        model_speed=np.float64(model_speed),
        lvdt_fwd=np.float64(mean(run_data.LVDT_FWD)),
        lvdt_aft=np.float64(mean(run_data.LVDT_AFT)),
        drag_g=np.float64(drag_g),
        drag=np.float64(drag_g / 1000 * g),
        port_shaft_rpm=np.float64(port_rpm),
        stbd_shaft_rpm=np.float64(stbd_rpm),
        port_thrust=np.float64(port_thrust),
        stbd_thrust=np.float64(stbd_thrust),
        port_torque=np.float64(mean(run_data.PORT_TORQUE)),
        stbd_torque=np.float64(mean(run_data.STBD_TORQUE)),
        port_kiel_probe=np.float64(port_kiel_probe),
        stbd_kiel_probe=np.float64(stbd_kiel_probe),
        shaft_speed_rpm=np.float64(shaft_speed_rpm),
        full_scale_speed=np.float64(full_scale_speed),
        full_scale_speed_knots=np.float64(full_scale_speed / config.knots),
        model_reynolds_number=np.float64(model_reynolds),
        full_scale_reynolds_number=np.float64(full_scale_reynolds),
        model_friction_coefficient=np.float64(cf_model),
        full_scale_friction_coefficient=np.float64(cf_full),
        correlation_allowance=np.float64(config.correlation_allowance),
        form_factor=np.float64(config.form_factor),
        towing_force=np.float64(towing_force),
        towing_force_coefficient=np.float64(towing_force_coefficient),
        port_mass_flow_rate=np.float64(port_mfr),
        stbd_mass_flow_rate=np.float64(stbd_mfr),
        port_volume_flow_rate=np.float64(port_vfr),
        stbd_volume_flow_rate=np.float64(stbd_vfr),
        port_jet_velocity=np.float64(port_jet_velocity),
        stbd_jet_velocity=np.float64(stbd_jet_velocity),
        port_wake_fraction=np.float64(port_wf),
        stbd_wake_fraction=np.float64(stbd_wf),
        port_inlet_velocity=np.float64(port_inlet_velocity),
        stbd_inlet_velocity=np.float64(stbd_inlet_velocity),
        port_gross_thrust_b=np.float64(port_tg[1]),
        stbd_gross_thrust_b=np.float64(stbd_tg[1]),
        total_gross_thrust_b=np.float64(total_tg[1]),
        port_gross_thrust_a=np.float64(port_tg[0]),
        stbd_gross_thrust_a=np.float64(stbd_tg[0]),
        total_gross_thrust_a=np.float64(total_tg[0]),
    )


@typechecked
def build_from_input(
    run: run_data.RunInputData, config: AnalysisConfig
) -> run_data.RunRecord:
    return build(run.run_number, average_channels(run), config)
