"""
treenet

Decision tree and random forest learners, a feed forward neural network
core, and the datasets, backends, persisters and cross validation tools
that surround them.
"""

from .exceptions import (
    TreenetError,
    ConfigurationError,
    PreconditionError,
    EmptyDatasetError,
    IncompatibleDataError,
    LabeledDatasetRequired,
    NotTrainedError,
    NumericalError
)
from .data import DataType, Dataset, Labeled, Unlabeled
from .models.base import Capability, Estimator, EstimatorType
from .backends import Backend, Serial
from .models.tree_components import (
    ClassificationTree,
    ExtraTreeClassifier,
    RegressionTree,
    ExtraTreeRegressor,
    RandomForest
)
from .cross_validation import KFold, MonteCarlo, LeavePOut
from .models.neural_net import FeedForward
from .models.mlp import MultilayerPerceptron, Adaline
from .persisters import PersistentModel

__version__ = "0.1.0"

__all__ = [
    'TreenetError',
    'ConfigurationError',
    'PreconditionError',
    'EmptyDatasetError',
    'IncompatibleDataError',
    'LabeledDatasetRequired',
    'NotTrainedError',
    'NumericalError',
    'DataType',
    'Dataset',
    'Labeled',
    'Unlabeled',
    'Capability',
    'Estimator',
    'EstimatorType',
    'Backend',
    'Serial',
    'ClassificationTree',
    'ExtraTreeClassifier',
    'RegressionTree',
    'ExtraTreeRegressor',
    'RandomForest',
    'KFold',
    'MonteCarlo',
    'LeavePOut',
    'FeedForward',
    'MultilayerPerceptron',
    'Adaline',
    'PersistentModel',
]
