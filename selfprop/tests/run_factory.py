import numpy as np

import selfprop.run_data as run_data


def make_run(
    run_number: int,
    speed: float = 1.95,
    drag_g: float = 1000.0,
    kiel_probe: tuple = (2.0, 2.1),
    shaft_rpm: tuple = (1000.0, 1100.0),
    duration: float = 60.0,
    sample_rate: float = 100.0,
) -> run_data.RunInputData:
    """A run whose raw samples already are in real units, with a small ripple."""
    time = np.linspace(0.0, duration, int(duration * sample_rate) + 1)
    ripple = np.sin(2 * np.pi * time / duration)  # zero mean over the run

    values = {
        run_data.SPEED: speed,
        run_data.LVDT_FWD: 1.5,
        run_data.LVDT_AFT: -2.5,
        run_data.DRAG: drag_g,
        run_data.PORT_THRUST: -400.0,
        run_data.PORT_TORQUE: 0.3,
        run_data.STBD_THRUST: -420.0,
        run_data.STBD_TORQUE: 0.32,
        run_data.PORT_KIEL_PROBE: kiel_probe[0],
        run_data.STBD_KIEL_PROBE: kiel_probe[1],
    }
    channels = {name: value + 0.01 * ripple for name, value in values.items()}

    return run_data.RunInputData(
        run_number=run_number,
        time=time,
        channels=channels,
        calibrations={
            name: run_data.ChannelCalibration(zero=0.0, factor=1.0)
            for name in run_data.CALIBRATED_CHANNELS
        },
        shaft_speeds={
            run_data.PORT_SHAFT_RPM: shaft_rpm[0],
            run_data.STBD_SHAFT_RPM: shaft_rpm[1],
        },
    )


def make_record(
    run_number: int,
    froude_number: float,
    drag: float,
    thrust_a: float,
    thrust_b: float,
    towing_force: float = 2.0,
    **values: float,
) -> run_data.RunRecord:
    """A run record with only the fields the speed group solver reads, plus any values."""
    fields = {
        name: np.float64(0)
        for name in run_data.RUN_RECORD_COLUMNS
        if name not in ("run_number", "sampling_frequency", "sample_count", "record_time")
    }
    fields.update(
        froude_number=np.float64(froude_number),
        drag=np.float64(drag),
        total_gross_thrust_a=np.float64(thrust_a),
        total_gross_thrust_b=np.float64(thrust_b),
        towing_force=np.float64(towing_force),
    )
    fields.update({name: np.float64(v) for name, v in values.items()})
    return run_data.RunRecord(
        run_number=run_number,
        sampling_frequency=100,
        sample_count=6001,
        record_time=60,
        **fields,
    )


def make_propelled_record(
    run_number: int,
    froude_number: float,
    drag: float,
    thrust_b: float,
    port_share: float = 0.6,
    wake_fractions: tuple = (0.70, 0.71),
    towing_force: float = 2.0,
) -> run_data.RunRecord:
    """A run record carrying what the full scale extrapolation reads."""
    return make_record(
        run_number,
        froude_number,
        drag=drag,
        thrust_a=1.2 * thrust_b,
        thrust_b=thrust_b,
        towing_force=towing_force,
        model_speed=froude_number * np.sqrt(9.806 * 4.30),
        port_gross_thrust_b=port_share * thrust_b,
        stbd_gross_thrust_b=(1 - port_share) * thrust_b,
        port_wake_fraction=wake_fractions[0],
        stbd_wake_fraction=wake_fractions[1],
    )
