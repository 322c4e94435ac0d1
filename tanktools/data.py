import pandas as pd
import numpy as np

import selfprop.run_data as run_data


def save_dataset(dataset: pd.DataFrame, path, header: bool = False) -> None:
    """
    Writes a table as comma separated values. Without header (the default) the
    file is the plain numeric matrix the legacy post-processing scripts read.
    """
    dataset.to_csv(path, header=header, index=False)


def load_run_records(path) -> run_data.RunRecordDataSet:
    """Reads a run record table, with or without its header row."""
    df = _read_numeric(path, run_data.RUN_RECORD_COLUMNS)
    if df.shape[1] != len(run_data.RUN_RECORD_COLUMNS):
        raise ValueError(
            f"Expected {len(run_data.RUN_RECORD_COLUMNS)} columns, got {df.shape[1]} in {path}"
        )
    df.columns = run_data.RUN_RECORD_COLUMNS
    return run_data.run_records_dataset(run_data.run_records_from_frame(df))


def load_full_scale_records(path) -> run_data.FullScaleRecordDataSet:
    """
    Reads full scale results, either as saved by `save_dataset` or as the
    legacy full scale matrix, of which only the used columns are kept.
    """
    df = _read_numeric(path, run_data.FULL_SCALE_RECORD_COLUMNS)
    if df.shape[1] == len(run_data.FULL_SCALE_RECORD_COLUMNS):
        df.columns = run_data.FULL_SCALE_RECORD_COLUMNS
    elif df.shape[1] > max(run_data.LEGACY_FULL_SCALE_POSITIONS):
        df = df.iloc[:, list(run_data.LEGACY_FULL_SCALE_POSITIONS)]
        df.columns = run_data.FULL_SCALE_RECORD_COLUMNS
    else:
        raise ValueError(f"Unrecognized full scale results layout in {path}")
    return run_data.full_scale_records_dataset(
        run_data.full_scale_records_from_frame(df)
    )


def load_sea_trials(path) -> tuple[np.ndarray, np.ndarray]:
    """Reads (speed, corrected power) pairs from the first two columns."""
    df = pd.read_csv(path, header=None, comment="#").dropna()
    return df.iloc[:, 0].to_numpy(dtype=float), df.iloc[:, 1].to_numpy(dtype=float)


def _read_numeric(path, columns: list[str]) -> pd.DataFrame:
    df = pd.read_csv(path, header=None)
    if len(df) > 0 and str(df.iloc[0, 0]) == columns[0]:
        df = pd.read_csv(path)
    return df.apply(pd.to_numeric)
