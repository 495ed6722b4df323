"""propval: Property-value regression engine.

This package fits an ordinary least squares model over property records,
predicts assessed values with missing-feature tolerance and a confidence
score, evaluates accuracy and ranks feature importance.
"""

from .errors import NotTrainedError
from .predict.model import PropertyValueModel

__all__ = ["NotTrainedError", "PropertyValueModel", "__version__"]
__version__ = "0.1.0"
