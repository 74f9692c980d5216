"""Exception hierarchy for the measurement client."""


class SpeedcheckError(Exception):
    """Base class for all speedcheck client errors."""


class MeasurementError(SpeedcheckError):
    """A measurement run was aborted by an unrecovered probe failure."""

    def __init__(self, message: str, phase: str = "") -> None:
        super().__init__(message)
        self.phase = phase
