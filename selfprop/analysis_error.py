class AnalysisError(Exception):
    """Exception raised for errors during the self-propulsion data reduction.

    Attributes:
        message -- explanation of the error
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class MissingInputError(AnalysisError):
    """A channel, calibration pair or wake-fraction entry is absent for a run.

    Attributes:
        field -- name of the missing input
    """

    def __init__(self, field: str, run_number: int | None = None) -> None:
        self.field = field
        self.run_number = run_number
        where = "" if run_number is None else f" for run {run_number}"
        super().__init__(f"Missing input '{field}'{where}")


class InsufficientDataError(AnalysisError):
    pass


class DomainError(AnalysisError):
    pass
