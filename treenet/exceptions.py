"""
Exception hierarchy

Configuration errors are raised from constructors, precondition errors at
the start of the offending call, and numerical errors after the training
step that produced them. None of them are retried by the library.
"""


class TreenetError(Exception):
    """Base class for every error raised by treenet."""


class ConfigurationError(TreenetError, ValueError):
    """Invalid hyper-parameter passed to a constructor."""


class PreconditionError(TreenetError, ValueError):
    """A call was made with inputs the estimator cannot work with."""


class EmptyDatasetError(PreconditionError):
    """The dataset has no samples."""


class IncompatibleDataError(PreconditionError):
    """Samples or labels have a data type the estimator does not support."""


class LabeledDatasetRequired(PreconditionError):
    """A learner was given an unlabeled dataset to train on."""


class NotTrainedError(TreenetError, RuntimeError):
    """The estimator has not been trained yet."""

    def __init__(self, message: str = "Estimator has not been trained."):
        super().__init__(message)


class NumericalError(TreenetError, ArithmeticError):
    """Numerical under/overflow detected during training."""
