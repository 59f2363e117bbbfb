"""
Weight Initializers

Every initializer returns a (fan_out, fan_in) matrix.
"""

from abc import ABC, abstractmethod

import numpy as np

from ...exceptions import ConfigurationError


class Initializer(ABC):
    """重み初期化の基底クラス"""

    @abstractmethod
    def initialize(self, fan_in: int, fan_out: int, rng: np.random.RandomState) -> np.ndarray:
        """
        重み行列を作成

        Parameters:
        -----------
        fan_in : int
            入力数
        fan_out : int
            出力数
        rng : RandomState
            乱数生成器

        Returns:
        --------
        weights : array-like, shape=(fan_out, fan_in)
            初期化された重み
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def _uniform(fan_in: int, fan_out: int, rng: np.random.RandomState) -> np.ndarray:
    return rng.uniform(-1.0, 1.0, size=(fan_out, fan_in))


class Constant(Initializer):
    """すべての重みを同じ値で初期化"""

    def __init__(self, value: float = 0.0):
        if np.isnan(value):
            raise ConfigurationError("Cannot initialize weight values to NaN.")

        self.value = value

    def initialize(self, fan_in, fan_out, rng):
        return np.full((fan_out, fan_in), self.value, dtype=float)

    def __repr__(self) -> str:
        return f"Constant(value={self.value})"


class He(Initializer):
    """ReLU系の活性化関数向けの一様分布初期化"""

    ETA = 0.70710678118

    def initialize(self, fan_in, fan_out, rng):
        return _uniform(fan_in, fan_out, rng) * (6.0 / (fan_out + fan_in)) ** self.ETA


class LeCun(Initializer):
    def initialize(self, fan_in, fan_out, rng):
        return _uniform(fan_in, fan_out, rng) * np.sqrt(3.0 / fan_in)


class Normal(Initializer):
    """平均0のガウス分布で初期化"""

    def __init__(self, stddev: float = 0.05):
        if stddev <= 0.0:
            raise ConfigurationError(f"Standard deviation must be greater than 0, {stddev} given.")

        self.stddev = stddev

    def initialize(self, fan_in, fan_out, rng):
        return rng.normal(size=(fan_out, fan_in)) * self.stddev

    def __repr__(self) -> str:
        return f"Normal(stddev={self.stddev})"


class Uniform(Initializer):
    """[-beta, beta] の一様分布で初期化"""

    def __init__(self, beta: float = 0.5):
        if beta <= 0.0:
            raise ConfigurationError(f"Beta cannot be less than or equal to 0, {beta} given.")

        self.beta = beta

    def initialize(self, fan_in, fan_out, rng):
        return _uniform(fan_in, fan_out, rng) * self.beta

    def __repr__(self) -> str:
        return f"Uniform(beta={self.beta})"


class Xavier1(Initializer):
    """Sigmoid/Softmax向けの一様分布初期化"""

    def initialize(self, fan_in, fan_out, rng):
        return _uniform(fan_in, fan_out, rng) * np.sqrt(6.0 / (fan_out + fan_in))


class Xavier2(Initializer):
    """Tanh向けの一様分布初期化"""

    def initialize(self, fan_in, fan_out, rng):
        return _uniform(fan_in, fan_out, rng) * (6.0 / (fan_out + fan_in)) ** 0.25
