"""
Decision Tree Learners

This module contains the binary decision tree learners. ClassificationTree
and RegressionTree search every candidate split value (CART), while the
Extra-Tree variants draw a single random split value per column.
"""

from abc import abstractmethod
from typing import Any, Dict, List, Optional

import numpy as np
from sklearn.utils import check_random_state

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
from .impurity import entropy, variance
from .tree_builder import TreeBuilder
from .tree_node import Leaf, Split, TreeNode


class DecisionTree(Estimator):
    """
    二分決定木の基底クラス

    Parameters:
    -----------
    max_height : int or None, default=None
        最大深度（Noneなら無制限）
    max_leaf_size : int, default=3
        このサンプル数以下のノードはリーフにする
    max_features : int or None, default=None
        各ノードで評価する列数（Noneなら round(sqrt(列数))）
    min_purity_increase : float, default=1e-7
        分割に必要な不純度の最小減少量
    bins : int, default=64
        CARTで連続値列を評価する分割候補の上限
    random_state : int, RandomState or None, default=None
        乱数シード
    """

    compatibility = (DataType.CONTINUOUS, DataType.CATEGORICAL)

    # Trueなら分割値をランダムに1つだけ選ぶ
    randomized = False

    def __init__(
        self,
        max_height: Optional[int] = None,
        max_leaf_size: int = 3,
        max_features: Optional[int] = None,
        min_purity_increase: float = 1e-7,
        bins: int = 64,
        random_state=None
    ):
        if max_height is not None and max_height < 1:
            raise ConfigurationError(f"Tree must have depth greater than 0, {max_height} given.")

        if max_leaf_size < 1:
            raise ConfigurationError(f"At least one sample is required to form a leaf node, {max_leaf_size} given.")

        if max_features is not None and max_features < 1:
            raise ConfigurationError(f"Tree must have at least 1 feature to determine a split, {max_features} given.")

        if min_purity_increase < 0.0:
            raise ConfigurationError(f"Min purity increase must be greater than or equal to 0, {min_purity_increase} given.")

        if bins < 2:
            raise ConfigurationError(f"Number of bins must be greater than 1, {bins} given.")

        self.max_height = max_height
        self.max_leaf_size = max_leaf_size
        self.max_features = max_features
        self.min_purity_increase = min_purity_increase
        self.bins = bins
        self.random_state = random_state

        self.root: Optional[TreeNode] = None
        self.n_columns = 0
        self.column_types: List[DataType] = []

    @staticmethod
    @abstractmethod
    def impurity(labels: np.ndarray) -> float:
        """ラベル配列の不純度"""

    @abstractmethod
    def terminate(self, dataset: Labeled, depth: int = 0, separable: bool = True) -> Leaf:
        """
        データセットからリーフノードを作成

        Parameters:
        -----------
        dataset : Labeled
            このノードに属するデータセット
        depth : int
            ノードの深さ
        separable : bool
            Falseならどの列でも分割できないので不純度を0とする
        """

    def trained(self) -> bool:
        return self.root is not None

    def train(self, dataset: Labeled) -> 'DecisionTree':
        """
        決定木を訓練

        Parameters:
        -----------
        dataset : Labeled
            学習データ

        Returns:
        --------
        self : DecisionTree
            訓練済みの決定木
        """
        dataset = check_trainable(dataset, self)

        self._prepare(dataset)

        builder = TreeBuilder(
            impurity_fn=self.impurity,
            terminate_fn=self.terminate,
            max_height=self.max_height,
            max_leaf_size=self.max_leaf_size,
            max_features=self.max_features,
            min_purity_increase=self.min_purity_increase,
            randomized=self.randomized,
            bins=self.bins
        )

        self.n_columns = dataset.num_columns
        self.column_types = dataset.column_types
        self.root = builder.build_tree(dataset, check_random_state(self.random_state))

        return self

    def _prepare(self, dataset: Labeled) -> None:
        """構築前に学習データから必要な情報を取得"""

    def _check_predictable(self, dataset: Dataset) -> None:
        if not self.trained():
            raise NotTrainedError()

        check_samples_compatible(dataset, self)
        check_columns_match(dataset, self, self.column_types)

    def predict(self, dataset: Dataset) -> List[Any]:
        """
        予測を実行

        Parameters:
        -----------
        dataset : Dataset
            入力データセット

        Returns:
        --------
        predictions : list
            各サンプルが到達したリーフの予測値
        """
        self._check_predictable(dataset)

        return [self.search(sample).outcome for sample in dataset.samples]

    def search(self, sample) -> Leaf:
        """サンプルが到達するリーフを探索"""
        return self.decision_path(sample)[-1]

    def decision_path(self, sample) -> List[TreeNode]:
        """
        ルートからリーフまでに通過するノードの列

        Parameters:
        -----------
        sample : array-like, shape=(n_features,)
            サンプル

        Returns:
        --------
        path : list of TreeNode
            通過したノード（最後の要素がリーフ）
        """
        if not self.trained():
            raise NotTrainedError()

        node = self.root
        path = [node]

        while isinstance(node, Split):
            node = node.left if node.goes_left(sample) else node.right
            path.append(node)

        return path

    def height(self) -> int:
        """木の高さ（リーフのみの木は1）"""
        if not self.trained():
            return 0

        return self.root.get_depth() + 1

    def balance(self) -> int:
        """左部分木と右部分木の高さの差"""
        if not isinstance(self.root, Split):
            return 0

        return self.root.left.get_depth() - self.root.right.get_depth()

    def feature_importances(self) -> np.ndarray:
        """
        特徴量重要度を計算

        各分割ノードの (ノードのサンプル数 / 全サンプル数) * 不純度の減少量 を
        列ごとに合計し、合計が1になるよう正規化する

        Returns:
        --------
        importance : array-like, shape=(n_features,)
            特徴量重要度
        """
        if not self.trained():
            raise NotTrainedError()

        importance = np.zeros(self.n_columns)

        self._accumulate_importance(self.root, importance, self.root.n_samples)

        total_importance = np.sum(importance)

        if total_importance > 0:
            importance = importance / total_importance

        return importance

    def _accumulate_importance(self, node: TreeNode, importance: np.ndarray, n_root: int) -> None:
        if not isinstance(node, Split):
            return

        importance[node.column] += (node.n_samples / n_root) * node.purity_increase

        self._accumulate_importance(node.left, importance, n_root)
        self._accumulate_importance(node.right, importance, n_root)

    def get_info(self) -> Dict[str, Any]:
        """
        決定木の情報を取得

        Returns:
        --------
        info : dict
            ハイパーパラメータと学習済みの木の情報
        """
        info = {
            "type": str(self.estimator_type),
            "max_height": self.max_height,
            "max_leaf_size": self.max_leaf_size,
            "max_features": self.max_features,
            "min_purity_increase": self.min_purity_increase,
            "is_fitted": self.trained()
        }

        if self.trained():
            info.update({
                "height": self.height(),
                "balance": self.balance(),
                "n_nodes": self.root.count_nodes(),
                "feature_importance": self.feature_importances().tolist()
            })

        return info

    def __str__(self) -> str:
        if not self.trained():
            return f"{type(self).__name__}(not fitted)"

        return f"{type(self).__name__}(height={self.height()}, nodes={self.root.count_nodes()})"


class ClassificationTree(DecisionTree):
    """
    分類木（CART）

    エントロピーで分割を評価し、リーフは多数派クラスとクラス確率を保持する
    """

    estimator_type = EstimatorType.CLASSIFIER
    capabilities = Capability.TRAINABLE | Capability.PROBABILISTIC | Capability.RANKING

    def __init__(
        self,
        max_height: Optional[int] = None,
        max_leaf_size: int = 3,
        max_features: Optional[int] = None,
        min_purity_increase: float = 1e-7,
        bins: int = 64,
        random_state=None
    ):
        super().__init__(
            max_height=max_height,
            max_leaf_size=max_leaf_size,
            max_features=max_features,
            min_purity_increase=min_purity_increase,
            bins=bins,
            random_state=random_state
        )

        self.classes: List[Any] = []

    @staticmethod
    def impurity(labels: np.ndarray) -> float:
        return entropy(labels)

    def _prepare(self, dataset: Labeled) -> None:
        self.classes = dataset.possible_outcomes()

    def terminate(self, dataset: Labeled, depth: int = 0, separable: bool = True) -> Leaf:
        n = dataset.num_rows
        outcomes = dataset.possible_outcomes()

        counts = {outcome: 0 for outcome in outcomes}

        for label in dataset.labels:
            counts[label] += 1

        # 同数の場合は先に出現したラベルを優先
        outcome = outcomes[0]

        for label in outcomes:
            if counts[label] > counts[outcome]:
                outcome = label

        probabilities = {label: counts[label] / n for label in outcomes}

        if separable:
            p = counts[outcome] / n
            impurity = -(p * np.log(p))
        else:
            impurity = 0.0

        return Leaf(
            outcome=outcome,
            impurity=float(impurity),
            n_samples=n,
            probabilities=probabilities,
            depth=depth
        )

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
            サンプルごとの {クラス: 確率}（学習時の全クラスを含む）
        """
        self._check_predictable(dataset)

        probabilities = []

        for sample in dataset.samples:
            leaf = self.search(sample)

            dist = {label: 0.0 for label in self.classes}
            dist.update(leaf.probabilities)

            probabilities.append(dist)

        return probabilities

    def get_info(self) -> Dict[str, Any]:
        info = super().get_info()
        info["classes"] = list(self.classes)

        return info


class ExtraTreeClassifier(ClassificationTree):
    """
    Extremely Randomized 分類木

    各列で分割値を1つだけランダムに選ぶため、CARTより高速に学習できる
    """

    randomized = True


class RegressionTree(DecisionTree):
    """
    回帰木（CART）

    分散で分割を評価し、リーフはラベルの平均値を保持する
    """

    estimator_type = EstimatorType.REGRESSOR
    capabilities = Capability.TRAINABLE | Capability.RANKING

    @staticmethod
    def impurity(labels: np.ndarray) -> float:
        return variance(labels)

    def terminate(self, dataset: Labeled, depth: int = 0, separable: bool = True) -> Leaf:
        labels = dataset.labels.astype(float)

        return Leaf(
            outcome=float(np.mean(labels)),
            impurity=variance(labels) if separable else 0.0,
            n_samples=dataset.num_rows,
            depth=depth
        )


class ExtraTreeRegressor(RegressionTree):
    """Extremely Randomized 回帰木"""

    randomized = True
