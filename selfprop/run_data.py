from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional, Sequence, Type, get_type_hints

import numpy as np
import pandas as pd
from strictly_typed_pandas.dataset import DataSet

# DAQ channels converted with a zero/calibration factor pair
SPEED = "speed"  # [m/s]
LVDT_FWD = "lvdt_fwd"  # [mm]
LVDT_AFT = "lvdt_aft"  # [mm]
DRAG = "drag"  # [g]
PORT_THRUST = "port_thrust"  # [g]
PORT_TORQUE = "port_torque"  # [Nm]
STBD_THRUST = "stbd_thrust"  # [g]
STBD_TORQUE = "stbd_torque"  # [Nm]

# DAQ channels averaged as recorded
PORT_KIEL_PROBE = "port_kiel_probe"  # [V]
STBD_KIEL_PROBE = "stbd_kiel_probe"  # [V]

# Shaft speeds come from the RPM signal processing, already in RPM
PORT_SHAFT_RPM = "port_shaft_rpm"
STBD_SHAFT_RPM = "stbd_shaft_rpm"

CALIBRATED_CHANNELS = (
    SPEED,
    LVDT_FWD,
    LVDT_AFT,
    DRAG,
    PORT_THRUST,
    PORT_TORQUE,
    STBD_THRUST,
    STBD_TORQUE,
)
VOLTAGE_CHANNELS = (PORT_KIEL_PROBE, STBD_KIEL_PROBE)
SHAFT_SPEEDS = (PORT_SHAFT_RPM, STBD_SHAFT_RPM)


@dataclass(frozen=True)
class ChannelCalibration:
    zero: float
    factor: float


@dataclass
class RunInputData:
    """Raw recording of one run, as imported from the DAQ file."""

    run_number: int
    time: np.ndarray
    channels: Dict[str, np.ndarray]
    calibrations: Dict[str, ChannelCalibration]
    shaft_speeds: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class ChannelMeans:
    """Real-unit channel averages of one run."""

    sample_count: int
    duration: float  # timestamp of the last sample [s]
    values: Dict[str, float]


@dataclass
class RunRecord:
    # Identity
    run_number: int
    sampling_frequency: int  # [Hz]
    sample_count: int
    record_time: int  # [s]
    # Kinematics
    froude_number: np.float64
    model_speed: np.float64  # [m/s]
    # Resistance
    lvdt_fwd: np.float64  # [mm]
    lvdt_aft: np.float64  # [mm]
    drag_g: np.float64  # [g]
    drag: np.float64  # [N]
    # Propulsion
    port_shaft_rpm: np.float64
    stbd_shaft_rpm: np.float64
    port_thrust: np.float64  # [N]
    stbd_thrust: np.float64  # [N]
    port_torque: np.float64  # [Nm]
    stbd_torque: np.float64  # [Nm]
    port_kiel_probe: np.float64  # [V]
    stbd_kiel_probe: np.float64  # [V]
    shaft_speed_rpm: np.float64  # set motor speed, 0 when not set
    full_scale_speed: np.float64  # [m/s]
    full_scale_speed_knots: np.float64  # [knots]
    # Similitude
    model_reynolds_number: np.float64
    full_scale_reynolds_number: np.float64
    model_friction_coefficient: np.float64
    full_scale_friction_coefficient: np.float64
    correlation_allowance: np.float64
    form_factor: np.float64
    towing_force: np.float64  # FD [N]
    towing_force_coefficient: np.float64  # CFD
    # Flow
    port_mass_flow_rate: np.float64  # [kg/s]
    stbd_mass_flow_rate: np.float64  # [kg/s]
    port_volume_flow_rate: np.float64  # [m^3/s]
    stbd_volume_flow_rate: np.float64  # [m^3/s]
    port_jet_velocity: np.float64  # [m/s]
    stbd_jet_velocity: np.float64  # [m/s]
    # Wake
    port_wake_fraction: np.float64  # (1-w)
    stbd_wake_fraction: np.float64  # (1-w)
    port_inlet_velocity: np.float64  # [m/s]
    stbd_inlet_velocity: np.float64  # [m/s]
    # Gross thrust, TG = rho Q (vj - vi) [N]
    port_gross_thrust_b: np.float64
    stbd_gross_thrust_b: np.float64
    total_gross_thrust_b: np.float64
    # Gross thrust, TG = rho Q vj [N]
    port_gross_thrust_a: np.float64
    stbd_gross_thrust_a: np.float64
    total_gross_thrust_a: np.float64


# Annotation only. DataSet keeps the schema of its last subscript in a shared
# slot, so datasets are built with a fresh DataSet[...] at each call.
RunRecordDataSet = DataSet[RunRecord]

RUN_RECORD_COLUMNS = list(RunRecord.__dataclass_fields__.keys())


@dataclass
class SelfPropulsionPoint:
    froude_number: np.float64
    thrust_definition: str  # "A": TG = rho Q vj, "B": TG = rho Q (vj - vi)
    towing_force: np.float64  # FD [N]
    gross_thrust_at_towing_force: np.float64  # [N]
    towing_force_at_zero_thrust: np.float64  # [N]
    thrust_slope: np.float64  # dTG/dR of the thrust fit
    thrust_intercept: np.float64  # [N]
    resistance_slope: np.float64  # dR/dTG of the reverse fit
    thrust_deduction_from_slope: np.float64  # 1 + dR/dTG
    thrust_deduction: Optional[np.float64] = None  # t at the self-propulsion point


@dataclass
class FullScaleRecord:
    froude_number: np.float64
    ship_speed_knots: np.float64
    port_delivered_power: np.float64  # [W]
    stbd_delivered_power: np.float64  # [W]
    overall_propulsive_efficiency: np.float64
    correlation_allowance: np.float64


FullScaleRecordDataSet = DataSet[FullScaleRecord]

FULL_SCALE_RECORD_COLUMNS = list(FullScaleRecord.__dataclass_fields__.keys())

# 0-based positions of the FullScaleRecord fields in the legacy 75 column
# full scale results matrix
LEGACY_FULL_SCALE_POSITIONS = (0, 2, 41, 42, 45, 70)


@dataclass
class AnalysisFailure:
    scope: str  # "run", "speed group" or "dataset"
    key: Optional[float]  # run number or Froude number
    error: str
    message: str


_DTYPES = {int: "int64", np.float64: "float64", float: "float64"}


def _dtypes(schema: Type) -> Dict[str, str]:
    return {name: _DTYPES[hint] for name, hint in get_type_hints(schema).items()}


def to_frame(schema: Type, records: Sequence) -> pd.DataFrame:
    """Builds a DataFrame with the schema's column order and dtypes, even when empty."""
    columns = list(schema.__dataclass_fields__.keys())
    df = pd.DataFrame([asdict(r) for r in records], columns=columns)
    return df.astype(_dtypes(schema))


def run_records_dataset(records: Sequence[RunRecord]) -> RunRecordDataSet:
    return DataSet[RunRecord](to_frame(RunRecord, records))


def full_scale_records_dataset(
    records: Sequence[FullScaleRecord],
) -> FullScaleRecordDataSet:
    return DataSet[FullScaleRecord](to_frame(FullScaleRecord, records))


def full_scale_records_from_frame(df: pd.DataFrame) -> List[FullScaleRecord]:
    return [
        FullScaleRecord(**{k: np.float64(v) for k, v in row.items()})
        for row in df[FULL_SCALE_RECORD_COLUMNS].to_dict(orient="records")
    ]


def run_records_from_frame(df: pd.DataFrame) -> List[RunRecord]:
    hints = get_type_hints(RunRecord)
    return [
        RunRecord(**{k: hints[k](v) for k, v in row.items()})
        for row in df[RUN_RECORD_COLUMNS].to_dict(orient="records")
    ]
