"""
Activation Functions

Activation functions operate element wise on (features, samples) matrices,
except Softmax which normalizes every column (sample).
"""

from abc import ABC, abstractmethod

import numpy as np

from ...exceptions import ConfigurationError

EPSILON = 1e-8


class ActivationFunction(ABC):
    """活性化関数の基底クラス"""

    @abstractmethod
    def compute(self, z: np.ndarray) -> np.ndarray:
        """活性化を計算"""

    @abstractmethod
    def differentiate(self, z: np.ndarray, computed: np.ndarray) -> np.ndarray:
        """
        微分を計算

        Parameters:
        -----------
        z : np.ndarray
            活性化前の入力
        computed : np.ndarray
            compute(z) の結果
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class ReLU(ActivationFunction):
    def compute(self, z):
        return np.maximum(z, 0.0)

    def differentiate(self, z, computed):
        return (z > 0.0).astype(float)


class LeakyReLU(ActivationFunction):
    def __init__(self, leakage: float = 0.1):
        if leakage <= 0.0 or leakage >= 1.0:
            raise ConfigurationError(f"Leakage must be between 0 and 1, {leakage} given.")

        self.leakage = leakage

    def compute(self, z):
        return np.where(z > 0.0, z, self.leakage * z)

    def differentiate(self, z, computed):
        return np.where(z > 0.0, 1.0, self.leakage)

    def __repr__(self) -> str:
        return f"LeakyReLU(leakage={self.leakage})"


class ELU(ActivationFunction):
    def __init__(self, alpha: float = 1.0):
        if alpha < 0.0:
            raise ConfigurationError(f"Alpha cannot be less than 0, {alpha} given.")

        self.alpha = alpha

    def compute(self, z):
        return np.where(z > 0.0, z, self.alpha * (np.exp(np.minimum(z, 0.0)) - 1.0))

    def differentiate(self, z, computed):
        return np.where(computed > 0.0, 1.0, computed + self.alpha)

    def __repr__(self) -> str:
        return f"ELU(alpha={self.alpha})"


class ThresholdedReLU(ActivationFunction):
    def __init__(self, threshold: float = 1.0):
        if threshold < 0.0:
            raise ConfigurationError(f"Threshold must be positive, {threshold} given.")

        self.threshold = threshold

    def compute(self, z):
        return np.where(z > self.threshold, z, 0.0)

    def differentiate(self, z, computed):
        return (z > self.threshold).astype(float)

    def __repr__(self) -> str:
        return f"ThresholdedReLU(threshold={self.threshold})"


class Sigmoid(ActivationFunction):
    def compute(self, z):
        return 1.0 / (1.0 + np.exp(-z))

    def differentiate(self, z, computed):
        return computed * (1.0 - computed)


class Softmax(Sigmoid):
    """列（サンプル）ごとに合計が1になるよう正規化"""

    def compute(self, z):
        z_hat = np.exp(z - np.max(z, axis=0, keepdims=True))

        return z_hat / np.maximum(np.sum(z_hat, axis=0, keepdims=True), EPSILON)


class SoftPlus(ActivationFunction):
    def compute(self, z):
        return np.logaddexp(0.0, z)

    def differentiate(self, z, computed):
        return 1.0 / (1.0 + np.exp(-z))


class Softsign(ActivationFunction):
    def compute(self, z):
        return z / (1.0 + np.abs(z))

    def differentiate(self, z, computed):
        return 1.0 / (1.0 + np.abs(z)) ** 2


class HyperbolicTangent(ActivationFunction):
    def compute(self, z):
        return np.tanh(z)

    def differentiate(self, z, computed):
        return 1.0 - computed ** 2
