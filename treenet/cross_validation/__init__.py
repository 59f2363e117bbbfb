"""
Cross validation: validators and metrics
"""

from .metrics import Metric, Accuracy, FBeta, MCC, MeanSquaredError, MedianAbsoluteError, RSquared
from .validators import Validator, KFold, MonteCarlo, LeavePOut

__all__ = [
    'Metric',
    'Accuracy',
    'FBeta',
    'MCC',
    'MeanSquaredError',
    'MedianAbsoluteError',
    'RSquared',
    'Validator',
    'KFold',
    'MonteCarlo',
    'LeavePOut',
]
