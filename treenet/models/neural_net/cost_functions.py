"""
Cost Functions

Losses are computed between (outputs, samples) matrices of network output
and target values. Classification losses expect probabilities.
"""

from abc import ABC, abstractmethod

import numpy as np

from ...exceptions import ConfigurationError
from .activations import EPSILON


class CostFunction(ABC):
    """損失関数の基底クラス"""

    @abstractmethod
    def compute(self, output: np.ndarray, target: np.ndarray) -> float:
        """平均損失を計算"""

    @abstractmethod
    def differentiate(self, output: np.ndarray, target: np.ndarray) -> np.ndarray:
        """出力に関する損失の微分"""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class RegressionLoss(CostFunction):
    """回帰用の損失"""


class ClassificationLoss(CostFunction):
    """分類用の損失"""


class LeastSquares(RegressionLoss):
    """二乗誤差"""

    def compute(self, output, target):
        return float(np.mean((output - target) ** 2))

    def differentiate(self, output, target):
        return output - target


class HuberLoss(RegressionLoss):
    """
    Pseudo-Huber損失

    Parameters:
    -----------
    alpha : float, default=0.9
        二乗誤差から絶対誤差に切り替わる幅
    """

    def __init__(self, alpha: float = 0.9):
        if alpha <= 0.0:
            raise ConfigurationError(f"Alpha must be greater than 0, {alpha} given.")

        self.alpha = alpha

    def compute(self, output, target):
        alpha2 = self.alpha ** 2

        z = target - output

        return float(np.mean(alpha2 * (np.sqrt(1.0 + (z / self.alpha) ** 2) - 1.0)))

    def differentiate(self, output, target):
        z = output - target

        return z / np.sqrt(z ** 2 + self.alpha ** 2)

    def __repr__(self) -> str:
        return f"HuberLoss(alpha={self.alpha})"


class CrossEntropy(ClassificationLoss):
    """交差エントロピー"""

    def compute(self, output, target):
        return float(np.mean(-target * np.log(np.maximum(output, EPSILON))))

    def differentiate(self, output, target):
        denominator = np.maximum((1.0 - output) * output, EPSILON)

        return (output - target) / denominator


class RelativeEntropy(ClassificationLoss):
    """KLダイバージェンス"""

    def compute(self, output, target):
        target = np.clip(target, EPSILON, 1.0)
        output = np.clip(output, EPSILON, 1.0)

        return float(np.mean(target * np.log(target / output)))

    def differentiate(self, output, target):
        target = np.clip(target, EPSILON, 1.0)
        output = np.clip(output, EPSILON, 1.0)

        return (output - target) / output
