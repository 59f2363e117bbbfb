"""
Tree Components Package

This package contains the building blocks of the decision tree learners:
impurity measures, node types, the recursive tree builder, the tree
learners themselves and the random forest ensemble.
"""

from .tree_node import TreeNode, Leaf, Split
from .impurity import (
    IMPURITY_TOLERANCE,
    entropy,
    variance,
    split_impurity,
    random_split_value,
    candidate_split_values
)
from .tree_builder import TreeBuilder
from .decision_tree import (
    DecisionTree,
    ClassificationTree,
    ExtraTreeClassifier,
    RegressionTree,
    ExtraTreeRegressor
)
from .random_forest import RandomForest

__all__ = [
    'TreeNode',
    'Leaf',
    'Split',
    'IMPURITY_TOLERANCE',
    'entropy',
    'variance',
    'split_impurity',
    'random_split_value',
    'candidate_split_values',
    'TreeBuilder',
    'DecisionTree',
    'ClassificationTree',
    'ExtraTreeClassifier',
    'RegressionTree',
    'ExtraTreeRegressor',
    'RandomForest'
]
