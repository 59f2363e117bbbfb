"""
Validation Metrics

Scores are oriented so that higher is always better: error metrics return
the negated error. The computations are delegated to scikit-learn.
"""

from abc import ABC, abstractmethod
from typing import Any, Sequence, Tuple

import numpy as np
from sklearn.metrics import (
    accuracy_score,
    fbeta_score,
    matthews_corrcoef,
    mean_squared_error,
    median_absolute_error,
    r2_score,
)

from ..exceptions import ConfigurationError, PreconditionError
from ..models.base import EstimatorType


class Metric(ABC):
    """評価指標の基底クラス"""

    compatibility: Tuple[EstimatorType, ...] = ()

    @abstractmethod
    def range(self) -> Tuple[float, float]:
        """スコアの範囲 (最小, 最大)"""

    @abstractmethod
    def _score(self, predictions: np.ndarray, labels: np.ndarray) -> float:
        """空でない予測とラベルのスコア"""

    def score(self, predictions: Sequence[Any], labels: Sequence[Any]) -> float:
        """
        スコアを計算

        Parameters:
        -----------
        predictions : sequence
            予測値
        labels : sequence
            正解ラベル

        Returns:
        --------
        score : float
            スコア（大きいほど良い、空なら0）
        """
        if len(predictions) != len(labels):
            raise PreconditionError(f"Number of predictions and labels must be equal,"
                                    f" {len(predictions)} predictions but {len(labels)} labels given.")

        if len(predictions) == 0:
            return 0.0

        return float(self._score(np.asarray(list(predictions)), np.asarray(list(labels))))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class _ClassificationMetric(Metric):
    compatibility = (EstimatorType.CLASSIFIER,)


class _RegressionMetric(Metric):
    compatibility = (EstimatorType.REGRESSOR,)


class Accuracy(_ClassificationMetric):
    """正解率"""

    def range(self):
        return 0.0, 1.0

    def _score(self, predictions, labels):
        return accuracy_score(labels, predictions)


class FBeta(_ClassificationMetric):
    """
    マクロ平均のF値

    Parameters:
    -----------
    beta : float, default=1.0
        再現率の重み
    """

    def __init__(self, beta: float = 1.0):
        if beta < 0.0:
            raise ConfigurationError(f"Beta cannot be less than 0, {beta} given.")

        self.beta = beta

    def range(self):
        return 0.0, 1.0

    def _score(self, predictions, labels):
        classes = sorted(set(labels.tolist()) | set(predictions.tolist()), key=str)

        return fbeta_score(labels, predictions, beta=self.beta, labels=classes,
                           average='macro', zero_division=0)

    def __repr__(self) -> str:
        return f"FBeta(beta={self.beta})"


class MCC(_ClassificationMetric):
    """Matthews相関係数"""

    def range(self):
        return -1.0, 1.0

    def _score(self, predictions, labels):
        return matthews_corrcoef(labels, predictions)


class MeanSquaredError(_RegressionMetric):
    """負の平均二乗誤差"""

    def range(self):
        return -np.inf, 0.0

    def _score(self, predictions, labels):
        return -mean_squared_error(labels.astype(float), predictions.astype(float))


class MedianAbsoluteError(_RegressionMetric):
    """負の絶対誤差の中央値"""

    def range(self):
        return -np.inf, 0.0

    def _score(self, predictions, labels):
        return -median_absolute_error(labels.astype(float), predictions.astype(float))


class RSquared(_RegressionMetric):
    """決定係数"""

    def range(self):
        return -np.inf, 1.0

    def _score(self, predictions, labels):
        if len(labels) < 2:
            return 0.0

        return r2_score(labels.astype(float), predictions.astype(float))


def check_metric_compatible(estimator, metric: Metric) -> None:
    """推定器の種類が評価指標と互換かをチェック"""
    if estimator.estimator_type not in metric.compatibility:
        supported = ", ".join(str(estimator_type) for estimator_type in metric.compatibility)

        raise ConfigurationError(f"{type(metric).__name__} is only compatible with {supported}"
                                 f" estimator types, {estimator.estimator_type} given.")
