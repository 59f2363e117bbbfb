"""
Neural Network Package

Layers, activation and cost functions, initializers, optimizers and the
FeedForward network used by the network based learners.
"""

from .parameter import Parameter, ParameterRegistry
from .deferred import Deferred
from .activations import (
    ActivationFunction,
    ReLU,
    LeakyReLU,
    ELU,
    ThresholdedReLU,
    Sigmoid,
    Softmax,
    SoftPlus,
    Softsign,
    HyperbolicTangent
)
from .cost_functions import (
    CostFunction,
    RegressionLoss,
    ClassificationLoss,
    LeastSquares,
    HuberLoss,
    CrossEntropy,
    RelativeEntropy
)
from .initializers import Initializer, Constant, He, LeCun, Normal, Uniform, Xavier1, Xavier2
from .optimizers import Optimizer, Adaptive, Stochastic, Momentum, RMSProp, Adam, AdaMax
from .layers import (
    Layer,
    Hidden,
    Output,
    Parametric,
    Placeholder1D,
    Dense,
    Activation,
    Dropout,
    Noise,
    BatchNorm,
    PReLU,
    Continuous,
    Binary,
    Multiclass
)
from .network import FeedForward
from .snapshot import Snapshot

__all__ = [
    'Parameter', 'ParameterRegistry', 'Deferred',
    'ActivationFunction', 'ReLU', 'LeakyReLU', 'ELU', 'ThresholdedReLU', 'Sigmoid', 'Softmax',
    'SoftPlus', 'Softsign', 'HyperbolicTangent',
    'CostFunction', 'RegressionLoss', 'ClassificationLoss', 'LeastSquares', 'HuberLoss',
    'CrossEntropy', 'RelativeEntropy',
    'Initializer', 'Constant', 'He', 'LeCun', 'Normal', 'Uniform', 'Xavier1', 'Xavier2',
    'Optimizer', 'Adaptive', 'Stochastic', 'Momentum', 'RMSProp', 'Adam', 'AdaMax',
    'Layer', 'Hidden', 'Output', 'Parametric', 'Placeholder1D', 'Dense', 'Activation',
    'Dropout', 'Noise', 'BatchNorm', 'PReLU', 'Continuous', 'Binary', 'Multiclass',
    'FeedForward', 'Snapshot'
]
