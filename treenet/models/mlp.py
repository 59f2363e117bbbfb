"""
Network Learners

This module contains the learners built on the FeedForward network: the
MultilayerPerceptron classifier and the Adaline linear regressor.
"""

import time
import warnings
from copy import deepcopy
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
from sklearn.utils import check_random_state

from ..cross_validation.metrics import FBeta, Metric, check_metric_compatible
from ..data.dataset import Dataset, Labeled
from ..exceptions import ConfigurationError, NotTrainedError, PreconditionError
from .base import Capability, Estimator, EstimatorType, check_samples_compatible, check_trainable
from .neural_net import (
    Adam,
    ClassificationLoss,
    Continuous,
    CrossEntropy,
    Dense,
    FeedForward,
    Hidden,
    LeastSquares,
    Multiclass,
    Optimizer,
    Placeholder1D,
    RegressionLoss,
    Snapshot,
    Xavier1,
    Xavier2,
)


def _check_training_params(batch_size: int, alpha: float, epochs: int, min_change: float, window: int) -> None:
    if batch_size < 1:
        raise ConfigurationError(f"Batch size must be greater than 0, {batch_size} given.")

    if alpha < 0.0:
        raise ConfigurationError(f"Alpha must be 0 or greater, {alpha} given.")

    if epochs < 1:
        raise ConfigurationError(f"Number of epochs must be greater than 0, {epochs} given.")

    if min_change < 0.0:
        raise ConfigurationError(f"Minimum change must be 0 or greater, {min_change} given.")

    if window < 1:
        raise ConfigurationError(f"Window must be greater than 0, {window} given.")


class MultilayerPerceptron(Estimator):
    """
    多層パーセプトロン分類器

    隠れ層の後に Dense(クラス数) と Softmax 出力層を追加して学習する。
    学習データの一部をホールドアウトし、スコアが改善しなくなったら早期終了する。

    Parameters:
    -----------
    hidden_layers : sequence of Hidden, default=()
        隠れ層
    batch_size : int, default=128
        ミニバッチのサイズ
    optimizer : Optimizer, optional
        オプティマイザ（デフォルトは Adam）
    alpha : float, default=1e-4
        出力前のDense層のL2正則化の強さ
    epochs : int, default=1000
        最大エポック数
    min_change : float, default=1e-4
        損失の変化がこれ未満になったら終了
    window : int, default=3
        スコアが改善しないエポック数の上限
    hold_out : float, default=0.1
        検証用にホールドアウトする割合（0 < hold_out <= 0.5）
    cost_fn : ClassificationLoss, optional
        損失関数（デフォルトは CrossEntropy）
    metric : Metric, optional
        検証スコアの評価指標（デフォルトは FBeta）
    random_state : int, RandomState or None, default=None
        乱数シード
    verbose : bool, default=False
        エポックごとの進捗を表示するかどうか
    """

    estimator_type = EstimatorType.CLASSIFIER
    capabilities = Capability.TRAINABLE | Capability.ONLINE | Capability.PROBABILISTIC

    def __init__(
        self,
        hidden_layers: Sequence[Hidden] = (),
        batch_size: int = 128,
        optimizer: Optional[Optimizer] = None,
        alpha: float = 1e-4,
        epochs: int = 1000,
        min_change: float = 1e-4,
        window: int = 3,
        hold_out: float = 0.1,
        cost_fn: Optional[ClassificationLoss] = None,
        metric: Optional[Metric] = None,
        random_state=None,
        verbose: bool = False
    ):
        for layer in hidden_layers:
            if not isinstance(layer, Hidden):
                raise ConfigurationError(f"Hidden layer must be a Hidden layer, {type(layer).__name__} given.")

        _check_training_params(batch_size, alpha, epochs, min_change, window)

        if hold_out <= 0.0 or hold_out > 0.5:
            raise ConfigurationError(f"Hold out ratio must be between 0 and 0.5, {hold_out} given.")

        if optimizer is not None and not isinstance(optimizer, Optimizer):
            raise ConfigurationError(f"Optimizer must be an Optimizer, {type(optimizer).__name__} given.")

        if cost_fn is not None and not isinstance(cost_fn, ClassificationLoss):
            raise ConfigurationError(f"Cost function must be a classification loss, {cost_fn!r} given.")

        if metric is not None:
            check_metric_compatible(self, metric)

        self.hidden_layers = hidden_layers
        self.batch_size = batch_size
        self.optimizer = optimizer
        self.alpha = alpha
        self.epochs = epochs
        self.min_change = min_change
        self.window = window
        self.hold_out = hold_out
        self.cost_fn = cost_fn
        self.metric = metric
        self.random_state = random_state
        self.verbose = verbose

        self.network: Optional[FeedForward] = None
        self.classes: List[Any] = []
        self._rng = None
        self._steps: List[float] = []
        self._scores: List[float] = []
        self.best_epoch = 0
        self.training_time = 0.0

    def trained(self) -> bool:
        return self.network is not None and bool(self.classes)

    def steps(self) -> List[float]:
        """エポックごとの学習損失"""
        return list(self._steps)

    def scores(self) -> List[float]:
        """エポックごとの検証スコア"""
        return list(self._scores)

    def _metric(self) -> Metric:
        return self.metric if self.metric is not None else FBeta()

    def train(self, dataset: Labeled) -> 'MultilayerPerceptron':
        """
        ネットワークを初期化して訓練

        Parameters:
        -----------
        dataset : Labeled
            学習データ

        Returns:
        --------
        self : MultilayerPerceptron
            訓練済みのモデル
        """
        dataset = check_trainable(dataset, self)

        classes = dataset.possible_outcomes()

        if len(classes) < 2:
            raise PreconditionError(f"Training set must contain at least 2 classes, {len(classes)} given.")

        self._rng = check_random_state(self.random_state)

        hidden = deepcopy(list(self.hidden_layers))
        hidden.append(Dense(len(classes), alpha=self.alpha, bias=True, weight_initializer=Xavier1()))

        self.network = FeedForward(
            Placeholder1D(dataset.num_columns),
            hidden,
            Multiclass(classes, self.cost_fn or CrossEntropy()),
            deepcopy(self.optimizer) if self.optimizer is not None else Adam(),
            random_state=self._rng
        )

        self.classes = classes
        self._steps = []
        self._scores = []

        return self.partial(dataset)

    def partial(self, dataset: Labeled) -> 'MultilayerPerceptron':
        """
        現在のネットワークのまま追加で学習（未学習なら train と同じ）

        Parameters:
        -----------
        dataset : Labeled
            学習データ

        Returns:
        --------
        self : MultilayerPerceptron
            訓練済みのモデル
        """
        if self.network is None:
            return self.train(dataset)

        dataset = check_trainable(dataset, self)

        start_time = time.time()

        metric = self._metric()

        testing, training = dataset.stratified_split(self.hold_out)

        if testing.empty:
            warnings.warn("Hold out set is empty, validating on the training set instead.")

            testing = training

        min_score, max_score = metric.range()

        best_score = min_score
        best_epoch = delta = 0
        snapshot = None
        prev_loss = np.inf

        for epoch in range(1, self.epochs + 1):
            batches = training.randomize(self._rng).batch(self.batch_size)

            loss = 0.0

            for batch in batches:
                loss += self.network.roundtrip(batch)

            loss /= len(batches)

            score = metric.score(self.predict(testing), testing.labels)

            self._steps.append(loss)
            self._scores.append(score)

            if self.verbose:
                elapsed_time = time.time() - start_time
                print(f"Epoch {epoch}/{self.epochs}, loss: {loss:.6f}, score: {score:.4f}, Time: {elapsed_time:.2f}s")

            if score > best_score:
                best_score = score
                best_epoch = epoch
                snapshot = Snapshot.take(self.network)
                delta = 0
            else:
                delta += 1

            if loss <= 0.0 or score >= max_score:
                break

            if abs(prev_loss - loss) < self.min_change:
                break

            if delta >= self.window:
                break

            prev_loss = loss

        if self._scores and self._scores[-1] < best_score and snapshot is not None:
            snapshot.restore()

            if self.verbose:
                print(f"Parameters restored from snapshot at epoch {best_epoch}.")

        self.best_epoch = best_epoch
        self.training_time = time.time() - start_time

        return self

    def predict(self, dataset: Dataset) -> List[Any]:
        """
        確率が最大のクラスを予測

        Parameters:
        -----------
        dataset : Dataset
            入力データセット

        Returns:
        --------
        predictions : list
            予測クラス
        """
        return [max(dist, key=dist.get) for dist in self.proba(dataset)]

    def proba(self, dataset: Dataset) -> List[Dict[Any, float]]:
        """
        クラス確率を予測

        Parameters:
        -----------
        dataset : Dataset
            入力データセット

        Returns:
        --------
        probabilities : list of dict
            サンプルごとの {クラス: 確率}
        """
        if not self.trained():
            raise NotTrainedError()

        if dataset.empty:
            return []

        check_samples_compatible(dataset, self)

        activations = self.network.infer(dataset)

        return [dict(zip(self.classes, dist.tolist())) for dist in activations]

    def get_info(self) -> Dict[str, Any]:
        """
        モデルの情報を取得

        Returns:
        --------
        info : dict
            モデルの情報
        """
        info = {
            "hidden_layers": [repr(layer) for layer in self.hidden_layers],
            "batch_size": self.batch_size,
            "epochs": self.epochs,
            "metric": repr(self._metric()),
            "is_fitted": self.trained()
        }

        if self.trained():
            info.update({
                "classes": list(self.classes),
                "epochs_trained": len(self._steps),
                "best_epoch": self.best_epoch,
                "final_loss": self._steps[-1] if self._steps else None,
                "best_score": max(self._scores) if self._scores else None,
                "training_time": self.training_time
            })

        return info

    def print_training_summary(self) -> None:
        """
        Print training summary
        """
        info = self.get_info()

        print(f"\n=== MultilayerPerceptron Training Summary ===")
        print(f"Hidden layers: {len(self.hidden_layers)}")
        print(f"Metric: {info['metric']}")

        if self.trained():
            print(f"Classes: {info['classes']}")
            print(f"Epochs: {info['epochs_trained']}/{self.epochs}")
            print(f"Best epoch: {info['best_epoch']}")

            if self._steps:
                print(f"Final loss: {info['final_loss']:.6f}")
                print(f"Best score: {info['best_score']:.4f}")

            print(f"Time: {self.training_time:.2f}s")


class Adaline(Estimator):
    """
    Adaptive Linear Neuron（線形回帰）

    Dense(1) と恒等出力層だけのネットワークをミニバッチ勾配降下法で学習する

    Parameters:
    -----------
    batch_size : int, default=128
        ミニバッチのサイズ
    optimizer : Optimizer, optional
        オプティマイザ（デフォルトは Adam）
    alpha : float, default=1e-4
        L2正則化の強さ
    epochs : int, default=1000
        最大エポック数
    min_change : float, default=1e-4
        損失の変化がこれ未満になったら終了
    window : int, default=5
        損失が改善しないエポック数の上限
    cost_fn : RegressionLoss, optional
        損失関数（デフォルトは LeastSquares）
    random_state : int, RandomState or None, default=None
        乱数シード
    verbose : bool, default=False
        エポックごとの進捗を表示するかどうか
    """

    estimator_type = EstimatorType.REGRESSOR
    capabilities = Capability.TRAINABLE | Capability.ONLINE | Capability.RANKING

    def __init__(
        self,
        batch_size: int = 128,
        optimizer: Optional[Optimizer] = None,
        alpha: float = 1e-4,
        epochs: int = 1000,
        min_change: float = 1e-4,
        window: int = 5,
        cost_fn: Optional[RegressionLoss] = None,
        random_state=None,
        verbose: bool = False
    ):
        _check_training_params(batch_size, alpha, epochs, min_change, window)

        if optimizer is not None and not isinstance(optimizer, Optimizer):
            raise ConfigurationError(f"Optimizer must be an Optimizer, {type(optimizer).__name__} given.")

        if cost_fn is not None and not isinstance(cost_fn, RegressionLoss):
            raise ConfigurationError(f"Cost function must be a regression loss, {cost_fn!r} given.")

        self.batch_size = batch_size
        self.optimizer = optimizer
        self.alpha = alpha
        self.epochs = epochs
        self.min_change = min_change
        self.window = window
        self.cost_fn = cost_fn
        self.random_state = random_state
        self.verbose = verbose

        self.network: Optional[FeedForward] = None
        self._rng = None
        self._steps: List[float] = []
        self.training_time = 0.0

    def trained(self) -> bool:
        return self.network is not None

    def steps(self) -> List[float]:
        """エポックごとの学習損失"""
        return list(self._steps)

    def train(self, dataset: Labeled) -> 'Adaline':
        """
        ネットワークを初期化して訓練

        Parameters:
        -----------
        dataset : Labeled
            学習データ

        Returns:
        --------
        self : Adaline
            訓練済みのモデル
        """
        dataset = check_trainable(dataset, self)

        self._rng = check_random_state(self.random_state)

        self.network = FeedForward(
            Placeholder1D(dataset.num_columns),
            [Dense(1, alpha=self.alpha, bias=True, weight_initializer=Xavier2())],
            Continuous(self.cost_fn or LeastSquares()),
            deepcopy(self.optimizer) if self.optimizer is not None else Adam(),
            random_state=self._rng
        )

        self._steps = []

        return self.partial(dataset)

    def partial(self, dataset: Labeled) -> 'Adaline':
        """
        現在のネットワークのまま追加で学習（未学習なら train と同じ）

        Parameters:
        -----------
        dataset : Labeled
            学習データ

        Returns:
        --------
        self : Adaline
            訓練済みのモデル
        """
        if self.network is None:
            return self.train(dataset)

        dataset = check_trainable(dataset, self)

        start_time = time.time()

        prev_loss = best_loss = np.inf
        delta = 0

        for epoch in range(1, self.epochs + 1):
            batches = dataset.randomize(self._rng).batch(self.batch_size)

            loss = 0.0

            for batch in batches:
                loss += self.network.roundtrip(batch)

            loss /= len(batches)

            self._steps.append(loss)

            if self.verbose:
                elapsed_time = time.time() - start_time
                print(f"Epoch {epoch}/{self.epochs}, loss: {loss:.6f}, Time: {elapsed_time:.2f}s")

            if loss < best_loss:
                best_loss = loss
                delta = 0
            else:
                delta += 1

            if loss <= 0.0:
                break

            if abs(prev_loss - loss) < self.min_change:
                break

            if delta >= self.window:
                break

            prev_loss = loss

        self.training_time = time.time() - start_time

        return self

    def predict(self, dataset: Dataset) -> List[float]:
        """
        予測を実行

        Parameters:
        -----------
        dataset : Dataset
            入力データセット

        Returns:
        --------
        predictions : list of float
            予測値
        """
        if not self.trained():
            raise NotTrainedError()

        if dataset.empty:
            return []

        check_samples_compatible(dataset, self)

        return self.network.infer(dataset)[:, 0].tolist()

    def feature_importances(self) -> np.ndarray:
        """
        特徴量重要度（重みの絶対値を合計1に正規化）

        Returns:
        --------
        importance : array-like, shape=(n_features,)
            特徴量重要度
        """
        if not self.trained():
            raise NotTrainedError()

        layer = self.network.hidden[0]

        importances = np.abs(layer.weights.value[0])

        total = np.sum(importances)

        if total > 0:
            importances = importances / total

        return importances

    def get_info(self) -> Dict[str, Any]:
        info = {
            "batch_size": self.batch_size,
            "epochs": self.epochs,
            "alpha": self.alpha,
            "is_fitted": self.trained()
        }

        if self.trained():
            info.update({
                "epochs_trained": len(self._steps),
                "final_loss": self._steps[-1] if self._steps else None,
                "feature_importance": self.feature_importances().tolist(),
                "training_time": self.training_time
            })

        return info
