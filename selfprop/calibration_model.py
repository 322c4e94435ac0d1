from typing import Sequence, Tuple, Union

import numpy as np
from typeguard import typechecked

from selfprop.run_data import ChannelCalibration


@typechecked
def convert(
    raw: Union[np.ndarray, Sequence[float]], zero: float, factor: float
) -> Tuple[np.ndarray, float]:
    """Converts raw DAQ samples into real units.

    Args:
        raw (np.ndarray): raw samples of one channel over one run
        zero (float): zero offset, in raw units
        factor (float): calibration factor, real units per raw unit

    Returns:
        Tuple[np.ndarray, float]: per-sample real-unit values and their mean
    """
    real = (np.asarray(raw, dtype=float) - zero) * factor
    return real, float(np.mean(real))


@typechecked
def convert_channel(
    raw: Union[np.ndarray, Sequence[float]], calibration: ChannelCalibration
) -> Tuple[np.ndarray, float]:
    return convert(raw, calibration.zero, calibration.factor)
