"""
Tree Builder

This module handles the recursive construction of binary decision trees,
including the exhaustive (CART) and randomized (Extra-Tree) split search
and the termination rules shared by classification and regression trees.
"""

from typing import Callable, List, Optional

import numpy as np

from ...data.dataset import Labeled
from .impurity import (
    IMPURITY_TOLERANCE,
    candidate_split_values,
    random_split_value,
    split_impurity,
)
from .tree_node import Leaf, Split, TreeNode


class TreeBuilder:
    """
    決定木構築を担当するクラス

    Attributes:
    -----------
    impurity_fn : callable
        ラベル配列から不純度を計算する関数（エントロピーまたは分散）
    terminate_fn : callable
        データセットからリーフノードを作成する関数
    max_height : int or None
        最大深度（Noneなら無制限）
    max_leaf_size : int
        このサンプル数以下のノードはリーフにする
    max_features : int or None
        各ノードで評価する列数（Noneなら sqrt(列数)）
    min_purity_increase : float
        分割に必要な不純度の最小減少量
    randomized : bool
        Trueなら各列で分割値を1つだけランダムに選ぶ（Extra-Tree）
    bins : int
        CARTで連続値列を評価する分割候補の上限
    """

    def __init__(
        self,
        impurity_fn: Callable[[np.ndarray], float],
        terminate_fn: Callable[..., Leaf],
        max_height: Optional[int] = None,
        max_leaf_size: int = 3,
        max_features: Optional[int] = None,
        min_purity_increase: float = 1e-7,
        randomized: bool = False,
        bins: int = 64
    ):
        self.impurity_fn = impurity_fn
        self.terminate_fn = terminate_fn
        self.max_height = max_height
        self.max_leaf_size = max_leaf_size
        self.max_features = max_features
        self.min_purity_increase = min_purity_increase
        self.randomized = randomized
        self.bins = bins

        self.rng = None
        self.types = []
        self.n_features_per_split = 0

    def build_tree(self, dataset: Labeled, rng: np.random.RandomState) -> TreeNode:
        """
        決定木を構築

        空のデータセットのチェックは呼び出し側で行う

        Parameters:
        -----------
        dataset : Labeled
            学習データ
        rng : RandomState
            列のシャッフルと分割値の抽選に使う乱数生成器

        Returns:
        --------
        root : TreeNode
            構築された決定木のルートノード
        """
        n_columns = dataset.num_columns

        self.rng = rng
        self.types = dataset.column_types
        self.n_features_per_split = self.max_features or max(1, int(round(np.sqrt(n_columns))))

        try:
            return self._grow(dataset, 0)
        finally:
            self.rng = None
            self.types = []

    def _grow(self, dataset: Labeled, depth: int) -> TreeNode:
        """
        再帰的に決定木を構築

        Parameters:
        -----------
        dataset : Labeled
            このノードに属するデータセット
        depth : int
            現在の深さ

        Returns:
        --------
        node : TreeNode
            構築したノード
        """
        columns = self._splittable_columns(dataset)

        # どの列でも分割できない場合
        if not columns:
            return self.terminate_fn(dataset, depth=depth, separable=False)

        if self._should_stop_splitting(dataset.num_rows, depth):
            return self.terminate_fn(dataset, depth=depth)

        node = self._search_best_split(dataset, columns, depth)

        left, right = node.groups

        if left.empty or right.empty:
            return self.terminate_fn(dataset, depth=depth)

        node.purity_increase = self.impurity_fn(dataset.labels) - node.impurity

        if node.purity_increase < self.min_purity_increase:
            return self.terminate_fn(dataset, depth=depth)

        node.attach_left(self._grow(left, depth + 1))
        node.attach_right(self._grow(right, depth + 1))

        # 子ノードが完成したので分割データを解放
        node.cleanup()

        return node

    def _should_stop_splitting(self, n_samples: int, depth: int) -> bool:
        """
        分割を停止するかどうかを判定

        Parameters:
        -----------
        n_samples : int
            サンプル数
        depth : int
            現在の深さ

        Returns:
        --------
        should_stop : bool
            分割を停止するかどうか
        """
        if self.max_height is not None and depth >= self.max_height:
            return True

        return n_samples <= self.max_leaf_size

    def _splittable_columns(self, dataset: Labeled) -> List[int]:
        """値が2種類以上ある列のインデックス"""
        columns = []

        for column in range(dataset.num_columns):
            values = dataset.column(column)

            if np.any(values != values[0]):
                columns.append(column)

        return columns

    def _search_best_split(self, dataset: Labeled, columns: List[int], depth: int) -> Split:
        """
        最適な分割を探索

        列の順序をシャッフルし、先頭から max_features 列だけを評価する

        Parameters:
        -----------
        dataset : Labeled
            このノードに属するデータセット
        columns : list of int
            分割可能な列
        depth : int
            現在の深さ

        Returns:
        --------
        node : Split
            最も不純度の低い分割
        """
        columns = list(columns)
        self.rng.shuffle(columns)
        columns = columns[:self.n_features_per_split]

        labels = dataset.labels

        best_impurity = np.inf
        best_column = columns[0]
        best_value = None

        for column in columns:
            data_type = self.types[column]
            values = dataset.column(column)

            if self.randomized:
                candidates = [random_split_value(values, data_type, self.rng)]
            else:
                candidates = candidate_split_values(values, data_type, self.bins)

            for value in candidates:
                mask = np.asarray(dataset.partition_mask(column, value), dtype=bool)

                impurity = split_impurity([labels[mask], labels[~mask]], self.impurity_fn)

                if impurity < best_impurity:
                    best_impurity = impurity
                    best_column = column
                    best_value = value

                if impurity <= IMPURITY_TOLERANCE:
                    break

            if best_impurity <= IMPURITY_TOLERANCE:
                break

        groups = dataset.partition_by_column(best_column, best_value)

        return Split(
            column=best_column,
            value=best_value,
            continuous=self.types[best_column].is_continuous(),
            groups=groups,
            impurity=best_impurity,
            n_samples=dataset.num_rows,
            depth=depth
        )
