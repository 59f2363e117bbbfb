"""
Random Forest Module

This module contains the RandomForest class that implements a bagging
ensemble of classification trees. Trees are trained and queried through a
pluggable backend so the work can run serially or in worker processes.
"""

import time
from typing import Any, Dict, List, Optional

import numpy as np
from sklearn.base import clone
from sklearn.utils import check_random_state

from ...backends import Backend, Predict, Proba, Serial, TrainLearner
from ...data.dataset import DataType, Dataset, Labeled
from ...exceptions import ConfigurationError, NotTrainedError
from ..base import (
    Capability,
    Estimator,
    EstimatorType,
    check_columns_match,
    check_samples_compatible,
    check_trainable,
)
from .decision_tree import ClassificationTree

# 木に割り当てるシードの上限
MAX_SEED = np.iinfo(np.int32).max


class RandomForest(Estimator):
    """
    Random Forest implementation

    ブートストラップ標本で独立に学習した分類木の多数決で予測する

    Parameters:
    -----------
    base : ClassificationTree, default=ClassificationTree()
        各木のハイパーパラメータの雛形（ClassificationTree か ExtraTreeClassifier）
    estimators : int, default=100
        木の数
    ratio : float, default=0.2
        各木に与えるブートストラップ標本の割合（0 < ratio <= 1.5）
    balanced : bool, default=False
        Trueならクラス頻度の逆数で重み付けして抽出する
    backend : Backend, default=Serial()
        学習と予測のタスクを実行するバックエンド
    random_state : int, RandomState or None, default=None
        乱数シード
    verbose : bool, default=False
        学習後に概要を表示するかどうか
    """

    estimator_type = EstimatorType.CLASSIFIER
    capabilities = Capability.TRAINABLE | Capability.PROBABILISTIC | Capability.RANKING | Capability.PARALLEL
    compatibility = (DataType.CONTINUOUS, DataType.CATEGORICAL)

    def __init__(
        self,
        base: Optional[ClassificationTree] = None,
        estimators: int = 100,
        ratio: float = 0.2,
        balanced: bool = False,
        backend: Optional[Backend] = None,
        random_state=None,
        verbose: bool = False
    ):
        if base is not None and not isinstance(base, ClassificationTree):
            raise ConfigurationError(f"Base learner must be a ClassificationTree or ExtraTreeClassifier,"
                                     f" {type(base).__name__} given.")

        if estimators < 1:
            raise ConfigurationError(f"Number of estimators must be greater than 0, {estimators} given.")

        if ratio <= 0.0 or ratio > 1.5:
            raise ConfigurationError(f"Ratio must be between 0 and 1.5, {ratio} given.")

        if backend is not None and not isinstance(backend, Backend):
            raise ConfigurationError(f"Backend must be a Backend instance, {type(backend).__name__} given.")

        self.base = base
        self.estimators = estimators
        self.ratio = ratio
        self.balanced = balanced
        self.backend = backend
        self.random_state = random_state
        self.verbose = verbose

        self.trees: List[ClassificationTree] = []
        self.classes: Dict[Any, float] = {}
        self.n_columns = 0
        self.column_types: List[DataType] = []
        self.training_time = 0.0

    def _base(self) -> ClassificationTree:
        return self.base if self.base is not None else ClassificationTree()

    def _backend(self) -> Backend:
        return self.backend if self.backend is not None else Serial()

    def trained(self) -> bool:
        return bool(self.trees)

    def train(self, dataset: Labeled) -> 'RandomForest':
        """
        フォレストを訓練

        Parameters:
        -----------
        dataset : Labeled
            学習データ

        Returns:
        --------
        self : RandomForest
            訓練済みのフォレスト
        """
        dataset = check_trainable(dataset, self)

        start_time = time.time()

        rng = check_random_state(self.random_state)
        backend = self._backend()

        n = dataset.num_rows
        k = int(np.ceil(self.ratio * n))

        weights = self._balanced_weights(dataset) if self.balanced else None

        for _ in range(self.estimators):
            tree = clone(self._base()).set_params(random_state=rng.randint(MAX_SEED))

            if weights is not None:
                subset = dataset.random_weighted_subset_with_replacement(k, weights, rng)
            else:
                subset = dataset.random_subset_with_replacement(k, rng)

            backend.enqueue(TrainLearner(tree, subset))

        self.trees = backend.process()
        self.classes = {outcome: 0.0 for outcome in dataset.possible_outcomes()}
        self.n_columns = dataset.num_columns
        self.column_types = dataset.column_types

        self.training_time = time.time() - start_time

        if self.verbose:
            self.print_training_summary()

        return self

    @staticmethod
    def _balanced_weights(dataset: Labeled) -> np.ndarray:
        """少数クラスほど大きくなるサンプルごとの重み"""
        outcomes, counts = np.unique(dataset.labels.astype(str), return_counts=True)

        min_count = np.min(counts)
        class_weights = dict(zip(outcomes.tolist(), (min_count / counts).tolist()))

        return np.array([class_weights[str(label)] for label in dataset.labels])

    def _check_predictable(self, dataset: Dataset) -> None:
        if not self.trained():
            raise NotTrainedError()

        check_samples_compatible(dataset, self)
        check_columns_match(dataset, self, self.column_types)

    def predict(self, dataset: Dataset) -> List[Any]:
        """
        多数決で予測

        同票の場合は学習データで先に出現したクラスを選ぶ

        Parameters:
        -----------
        dataset : Dataset
            入力データセット

        Returns:
        --------
        predictions : list
            予測クラス
        """
        self._check_predictable(dataset)

        backend = self._backend()

        for tree in self.trees:
            backend.enqueue(Predict(tree, dataset))

        aggregate = backend.process()

        predictions = []

        for votes in zip(*aggregate):
            counts = dict.fromkeys(self.classes, 0)

            for vote in votes:
                counts[vote] += 1

            best = None

            for outcome, count in counts.items():
                if best is None or count > counts[best]:
                    best = outcome

            predictions.append(best)

        return predictions

    def proba(self, dataset: Dataset) -> List[Dict[Any, float]]:
        """
        クラス確率を予測（各木の確率の平均）

        Parameters:
        -----------
        dataset : Dataset
            入力データセット

        Returns:
        --------
        probabilities : list of dict
            サンプルごとの {クラス: 確率}
        """
        self._check_predictable(dataset)

        backend = self._backend()

        for tree in self.trees:
            backend.enqueue(Proba(tree, dataset))

        aggregate = backend.process()

        n_trees = len(self.trees)

        probabilities = []

        for dists in zip(*aggregate):
            dist = dict(self.classes)

            for tree_dist in dists:
                for outcome, probability in tree_dist.items():
                    dist[outcome] += probability

            probabilities.append({outcome: total / n_trees for outcome, total in dist.items()})

        return probabilities

    def feature_importances(self) -> np.ndarray:
        """
        特徴量重要度（各木の重要度の平均）

        Returns:
        --------
        importance : array-like, shape=(n_features,)
            特徴量重要度
        """
        if not self.trained():
            raise NotTrainedError()

        importance = np.zeros(self.n_columns)

        for tree in self.trees:
            importance += tree.feature_importances()

        return importance / len(self.trees)

    def get_info(self) -> Dict[str, Any]:
        """
        フォレストの情報を取得

        Returns:
        --------
        info : dict
            フォレストの情報
        """
        info = {
            "base": type(self._base()).__name__,
            "estimators": self.estimators,
            "ratio": self.ratio,
            "balanced": self.balanced,
            "backend": repr(self._backend()),
            "is_fitted": self.trained()
        }

        if self.trained():
            info.update({
                "classes": list(self.classes),
                "mean_height": float(np.mean([tree.height() for tree in self.trees])),
                "n_nodes": int(sum(tree.root.count_nodes() for tree in self.trees)),
                "training_time": self.training_time
            })

        return info

    def print_training_summary(self) -> None:
        """
        Print training summary
        """
        info = self.get_info()

        print(f"\n=== RandomForest Training Summary ===")
        print(f"Base: {info['base']}")
        print(f"Trees: {len(self.trees)}")
        print(f"Ratio: {self.ratio}")
        print(f"Balanced: {self.balanced}")
        print(f"Backend: {info['backend']}")

        if self.trained():
            importance = self.feature_importances()
            print(f"Classes: {info['classes']}")
            print(f"Mean height: {info['mean_height']:.2f}")
            print(f"Top 5 features: {np.argsort(importance)[-5:][::-1]}")
            print(f"Time: {self.training_time:.2f}s")

    def __str__(self) -> str:
        if not self.trained():
            return f"RandomForest(not fitted, estimators={self.estimators})"

        return f"RandomForest(trees={len(self.trees)}, classes={len(self.classes)})"
