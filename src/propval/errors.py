from __future__ import annotations


class PropertyValueError(Exception):
    """Base class for errors raised by the regression engine."""


class InsufficientDataError(PropertyValueError):
    def __init__(self, min_records: int) -> None:
        super().__init__(
            f"insufficient data for reliable training (minimum {min_records} properties required)"
        )
        self.min_records = min_records


class NoFeaturesError(PropertyValueError):
    def __init__(self) -> None:
        super().__init__("no features selected for training")


class InsufficientFeatureCoverageError(PropertyValueError):
    def __init__(self, column: str, ratio: float) -> None:
        super().__init__("selected features have too many missing values")
        self.column = column
        self.ratio = ratio


class TrainingComputationError(PropertyValueError):
    """Normalization or solving failed; reported as ``training failed: <message>``."""


class SingularMatrixError(TrainingComputationError):
    def __init__(self, column: int, pivot: float) -> None:
        super().__init__(
            f"matrix is singular or ill-conditioned (pivot {pivot:.3e} in column {column}); "
            "check for collinear or constant features"
        )
        self.column = column
        self.pivot = pivot


class NotTrainedError(PropertyValueError, RuntimeError):
    def __init__(self, message: str = "Model has not been trained") -> None:
        super().__init__(message)
