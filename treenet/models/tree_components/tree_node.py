"""
Decision Tree Node Implementation

This module contains the two node types of a binary decision tree:
Split nodes that route samples by comparing one column against a value,
and Leaf nodes that hold the outcome.
"""

from typing import Any, Dict, Optional, Tuple

from ...data.dataset import Labeled


class TreeNode:
    """決定木ノードの基底クラス"""

    is_leaf = False

    def __init__(self, impurity: float = 0.0, n_samples: int = 0, depth: int = 0):
        self.impurity = impurity
        self.n_samples = n_samples
        self.depth = depth

    def get_depth(self) -> int:
        """このノードを根とする部分木の深さ"""
        return 0

    def count_nodes(self) -> int:
        """このノードを根とする部分木のノード数"""
        return 1


class Leaf(TreeNode):
    """
    リーフノード

    Attributes:
    -----------
    outcome : str or float
        予測値（分類なら多数派クラス、回帰なら平均値）
    probabilities : dict or None
        クラスごとの確率（分類のみ）
    impurity : float
        ノードの不純度
    n_samples : int
        このノードのサンプル数
    depth : int
        ノードの深さ
    """

    is_leaf = True

    def __init__(
        self,
        outcome: Any,
        impurity: float,
        n_samples: int,
        probabilities: Optional[Dict[Any, float]] = None,
        depth: int = 0
    ):
        super().__init__(impurity=impurity, n_samples=n_samples, depth=depth)
        self.outcome = outcome
        self.probabilities = probabilities

    def __str__(self) -> str:
        return f"Leaf(depth={self.depth}, samples={self.n_samples}, outcome={self.outcome!r}, impurity={self.impurity:.4f})"

    def __repr__(self) -> str:
        return self.__str__()


class Split(TreeNode):
    """
    分割ノード

    Attributes:
    -----------
    column : int
        分割に使用する列のインデックス
    value : float or str
        分割値（連続値は <=、カテゴリ値は == で左へ）
    continuous : bool
        分割列が連続値かどうか
    impurity : float
        分割後の重み付き不純度
    purity_increase : float
        分割による不純度の減少量
    n_samples : int
        このノードのサンプル数
    left, right : TreeNode or None
        子ノード
    groups : tuple of Labeled or None
        構築中のみ保持する分割後のデータセット
    """

    def __init__(
        self,
        column: int,
        value: Any,
        continuous: bool,
        groups: Tuple[Labeled, Labeled],
        impurity: float,
        purity_increase: float = 0.0,
        n_samples: int = 0,
        depth: int = 0
    ):
        super().__init__(impurity=impurity, n_samples=n_samples, depth=depth)
        self.column = column
        self.value = value
        self.continuous = continuous
        self.groups = groups
        self.purity_increase = purity_increase
        self.left: Optional[TreeNode] = None
        self.right: Optional[TreeNode] = None

    def goes_left(self, sample) -> bool:
        """サンプルが左の子に進むかどうか"""
        if self.continuous:
            return float(sample[self.column]) <= self.value

        return sample[self.column] == self.value

    def attach_left(self, node: TreeNode) -> None:
        self.left = node

    def attach_right(self, node: TreeNode) -> None:
        self.right = node

    def cleanup(self) -> None:
        """構築用に保持していたデータセットを解放"""
        self.groups = None

    def get_depth(self) -> int:
        left_depth = self.left.get_depth() if self.left else 0
        right_depth = self.right.get_depth() if self.right else 0

        return 1 + max(left_depth, right_depth)

    def count_nodes(self) -> int:
        left_count = self.left.count_nodes() if self.left else 0
        right_count = self.right.count_nodes() if self.right else 0

        return 1 + left_count + right_count

    def __str__(self) -> str:
        operator = "<=" if self.continuous else "=="

        return (f"Split(depth={self.depth}, samples={self.n_samples}, column={self.column},"
                f" {operator} {self.value!r}, impurity={self.impurity:.4f})")

    def __repr__(self) -> str:
        return self.__str__()
