import warnings

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Sequence, Tuple
from typeguard import typechecked

import pandas as pd

import selfprop.extrapolation_model as extrapolation_model
import selfprop.run_data as run_data
import selfprop.run_record_builder as run_record_builder
import selfprop.self_propulsion_model as self_propulsion_model
from selfprop.analysis_config import AnalysisConfig
from selfprop.analysis_error import AnalysisError, InsufficientDataError


def _report(failure: run_data.AnalysisFailure) -> None:
    where = failure.scope if failure.key is None else f"{failure.scope} {failure.key}"
    warnings.warn(
        f"{where}: {failure.error}: {failure.message}",
        RuntimeWarning,
        stacklevel=3,
    )


def _failure(scope: str, key: Optional[float], e: AnalysisError) -> run_data.AnalysisFailure:
    failure = run_data.AnalysisFailure(
        scope=scope, key=key, error=type(e).__name__, message=e.message
    )
    _report(failure)
    return failure


@dataclass
class RunAnalysisResult:
    records: Dict[int, run_data.RunRecord]  # run_number: record
    failures: List[run_data.AnalysisFailure] = field(default_factory=list)

    @property
    def dataset(self) -> run_data.RunRecordDataSet:
        """Records as a table, ordered by run number."""
        return run_data.run_records_dataset(
            [self.records[k] for k in sorted(self.records)]
        )


@dataclass
class SpeedGroupResult:
    groups: Dict[float, List[run_data.RunRecord]]
    points: Dict[str, List[run_data.SelfPropulsionPoint]]  # thrust definition: points
    failures: List[run_data.AnalysisFailure] = field(default_factory=list)
    complete: bool = False

    def table(self, thrust_definition: Literal["A", "B"]) -> pd.DataFrame:
        return self_propulsion_model.points_frame(self.points[thrust_definition])


@dataclass
class FullScaleResult:
    points: List[extrapolation_model.FullScalePoint]
    failures: List[run_data.AnalysisFailure] = field(default_factory=list)

    @property
    def dataset(self) -> run_data.FullScaleRecordDataSet:
        return run_data.full_scale_records_dataset([p.record() for p in self.points])


@typechecked
def analyse_runs(
    runs: Sequence[run_data.RunInputData], config: AnalysisConfig
) -> RunAnalysisResult:
    """Builds the record of every run, keyed by run number.

    A run that fails is reported and left out; the others are still built.
    """
    config.validate()

    result = RunAnalysisResult(records={})
    for run in runs:
        try:
            result.records[run.run_number] = run_record_builder.build_from_input(
                run, config
            )
        except AnalysisError as e:
            result.failures.append(_failure("run", run.run_number, e))

    return result


def _require_solved(result: SpeedGroupResult) -> None:
    for thrust_definition, points in result.points.items():
        solved = {p.froude_number for p in points}
        unsolved = sorted(set(result.groups) - solved)
        if unsolved:
            raise InsufficientDataError(
                f"Thrust definition {thrust_definition}: {len(solved)} of"
                f" {len(result.groups)} speed groups solved, unsolved Fr = {unsolved}"
            )


@typechecked
def solve_speed_groups(
    records: Sequence[run_data.RunRecord],
    config: AnalysisConfig,
    method: self_propulsion_model.Method = "direct",
) -> SpeedGroupResult:
    """Solves the self-propulsion point of every speed group, for both thrust definitions.

    A failing group is reported and skipped. `complete` is only set when one
    group per configured Froude number is present and every group was solved
    for both thrust definitions; otherwise a dataset failure is recorded and the full dataset tables must not be used.
    """
    groups = self_propulsion_model.split(records)
    result = SpeedGroupResult(groups=groups, points={"A": [], "B": []})

    for froude_number, group in groups.items():
        for thrust_definition in ("A", "B"):
            try:
                result.points[thrust_definition].append(
                    self_propulsion_model.solve(
                        group,
                        thrust_definition,
                        method=method,
                        calm_water_coeffs=config.calm_water_resistance,
                    )
                )
            except AnalysisError as e:
                result.failures.append(_failure("speed group", froude_number, e))

    try:
        self_propulsion_model.require_complete(groups, config.froude_numbers)
        _require_solved(result)
        result.complete = True
    except AnalysisError as e:
        result.failures.append(_failure("dataset", None, e))

    return result


@typechecked
def extrapolate_speed_groups(
    speed_groups: SpeedGroupResult,
    config: AnalysisConfig,
    pump_efficiency: Tuple[float, float],
) -> FullScaleResult:
    """Extrapolates every gross thrust B self-propulsion point to the ship.

    Nothing is extrapolated from an incomplete dataset: a dataset failure is
    recorded instead. A failing group is reported and skipped.
    """
    result = FullScaleResult(points=[])
    if not speed_groups.complete:
        result.failures.append(
            _failure(
                "dataset",
                None,
                InsufficientDataError("Speed groups are not complete, nothing extrapolated"),
            )
        )
        return result

    for point in speed_groups.points["B"]:
        froude_number = float(point.froude_number)
        try:
            result.points.append(
                extrapolation_model.extrapolate(
                    point, speed_groups.groups[froude_number], config, pump_efficiency
                )
            )
        except AnalysisError as e:
            result.failures.append(_failure("speed group", froude_number, e))

    return result
