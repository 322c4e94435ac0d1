import numpy as np
from hypothesis import given, settings, strategies

import selfprop.calibration_model as calibration_model
from selfprop.run_data import ChannelCalibration

finite = dict(allow_nan=False, allow_infinity=False)


@given(
    raw=strategies.lists(
        strategies.floats(min_value=-1e3, max_value=1e3, **finite),
        min_size=1,
        max_size=200,
    ),
    zero=strategies.floats(min_value=-10.0, max_value=10.0, **finite),
    factor=strategies.floats(min_value=-100.0, max_value=100.0, **finite),
)
@settings(deadline=None)
def test_convert_mean(raw: list, zero: float, factor: float):
    real, mean = calibration_model.convert(raw, zero, factor)

    expected = [(r - zero) * factor for r in raw]
    assert np.allclose(real, expected)
    assert np.isclose(mean, np.mean(expected), atol=1e-9)


def test_convert_channel():
    raw = np.array([1.0, 2.0, 3.0])

    real, mean = calibration_model.convert_channel(
        raw, ChannelCalibration(zero=1.0, factor=0.5)
    )

    assert np.allclose(real, [0.0, 0.5, 1.0])
    assert np.isclose(mean, 0.5)
