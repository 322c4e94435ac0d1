import pytest

import selfprop.analysis_config as analysis_config

# One (port, stbd) pair per campaign speed bucket, 0.70/0.71 at Fr = 0.24 upwards
WAKE_FRACTIONS = tuple((0.70 + 0.01 * i, 0.71 + 0.01 * i) for i in range(9))


@pytest.fixture
def config() -> analysis_config.AnalysisConfig:
    return analysis_config.AnalysisConfig(
        wake_fractions=analysis_config.campaign_wake_fraction_table(WAKE_FRACTIONS)
    )
