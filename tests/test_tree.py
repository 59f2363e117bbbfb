"""
決定木のテスト
"""

import numpy as np
import pytest
from sklearn.base import clone

from treenet.data.dataset import Labeled, Unlabeled
from treenet.exceptions import (
    ConfigurationError,
    EmptyDatasetError,
    IncompatibleDataError,
    LabeledDatasetRequired,
    NotTrainedError
)
from treenet.models.tree_components import (
    ClassificationTree,
    ExtraTreeClassifier,
    ExtraTreeRegressor,
    Leaf,
    RegressionTree,
    Split,
    entropy,
    split_impurity,
    variance
)


def test_entropy():
    assert entropy(np.array(['a', 'a', 'a'])) == 0.0
    assert entropy(np.array(['a', 'b'])) == pytest.approx(np.log(2))
    assert entropy(np.array([])) == 0.0


def test_variance():
    assert variance(np.array([1.0, 1.0])) == 0.0
    assert variance(np.array([1.0, 3.0])) == pytest.approx(1.0)


def test_split_impurity_weights_by_group_size():
    left = np.array(['a', 'a'])
    right = np.array(['a', 'b', 'a', 'b'])

    impurity = split_impurity([left, right], entropy)

    assert impurity == pytest.approx(4 / 6 * np.log(2))


def test_split_impurity_of_pure_groups_is_zero():
    left = Labeled([[1.0], [2.0]], ['a', 'a'])
    right = Labeled([[3.0]], ['b'])

    assert split_impurity([left, right], entropy) == 0.0


def test_invalid_hyper_parameters():
    with pytest.raises(ConfigurationError):
        ClassificationTree(max_height=0)

    with pytest.raises(ConfigurationError):
        ClassificationTree(max_leaf_size=0)

    with pytest.raises(ConfigurationError):
        RegressionTree(max_features=0)


def test_train_requires_labels():
    with pytest.raises(LabeledDatasetRequired):
        ClassificationTree().train(Unlabeled([[1.0]]))


def test_train_rejects_empty_dataset():
    with pytest.raises(EmptyDatasetError):
        ClassificationTree().train(Labeled())


def test_predict_before_training():
    with pytest.raises(NotTrainedError):
        ClassificationTree().predict(Unlabeled([[1.0]]))


def test_classifier_requires_categorical_labels():
    with pytest.raises(IncompatibleDataError):
        ClassificationTree().train(Labeled([[1.0], [2.0]], [1.0, 2.0]))


def test_extra_tree_separates_clusters(clusters):
    tree = ExtraTreeClassifier(max_leaf_size=1, random_state=3)

    tree.train(clusters)

    assert tree.predict(clusters) == clusters.labels.tolist()


def test_cart_separates_clusters(clusters):
    tree = ClassificationTree(max_leaf_size=1, random_state=0)

    tree.train(clusters)

    assert tree.predict(clusters) == clusters.labels.tolist()
    assert isinstance(tree.root, Split)
    assert tree.height() == 2


def test_constant_columns_produce_single_leaf():
    dataset = Labeled([[1.0, 'x']] * 5, ['a', 'b', 'a', 'b', 'a'])

    tree = ClassificationTree().train(dataset)

    assert isinstance(tree.root, Leaf)
    assert tree.root.outcome == 'a'
    assert tree.root.impurity == 0.0
    assert tree.height() == 1


def test_majority_tie_goes_to_first_label():
    dataset = Labeled([[1.0]] * 4, ['b', 'a', 'a', 'b'])

    tree = ClassificationTree().train(dataset)

    assert tree.root.outcome == 'b'


def test_decision_path_comparisons_hold(blobs):
    tree = ClassificationTree(max_height=6, random_state=1).train(blobs)

    for sample in blobs.samples:
        path = tree.decision_path(sample)

        assert isinstance(path[-1], Leaf)

        for node, child in zip(path[:-1], path[1:]):
            goes_left = float(sample[node.column]) <= node.value

            assert child is (node.left if goes_left else node.right)


def test_max_height_is_respected(blobs):
    tree = ClassificationTree(max_height=2, max_leaf_size=1, random_state=0).train(blobs)

    assert tree.height() <= 3


def test_categorical_split():
    dataset = Labeled([['red'], ['blue'], ['red'], ['blue'], ['green']], ['a', 'b', 'a', 'b', 'b'])

    tree = ClassificationTree(max_leaf_size=1, random_state=0).train(dataset)

    assert tree.predict(Unlabeled([['red'], ['blue'], ['green']])) == ['a', 'b', 'b']


def test_proba_contains_all_classes(blobs):
    tree = ClassificationTree(max_height=3, random_state=0).train(blobs)

    for dist in tree.proba(blobs):
        assert set(dist) == {'red', 'green', 'blue'}
        assert sum(dist.values()) == pytest.approx(1.0, abs=1e-6)


def test_predict_rejects_wrong_column_count(blobs):
    tree = ClassificationTree(random_state=0).train(blobs)

    with pytest.raises(IncompatibleDataError):
        tree.predict(Unlabeled([[1.0, 2.0]]))


def test_predict_rejects_categorical_sample_for_continuous_column(clusters):
    tree = ClassificationTree(max_leaf_size=1).train(clusters)

    with pytest.raises(IncompatibleDataError):
        tree.predict(Unlabeled([['x']]))


def test_predict_rejects_continuous_sample_for_categorical_column():
    dataset = Labeled([['red'], ['blue'], ['red'], ['blue']], ['a', 'b', 'a', 'b'])

    tree = ClassificationTree(max_leaf_size=1).train(dataset)

    with pytest.raises(IncompatibleDataError):
        tree.predict(Unlabeled([[3.0]]))

    with pytest.raises(IncompatibleDataError):
        tree.proba(Unlabeled([[3.0]]))


def test_feature_importances_sum_to_one(blobs):
    tree = ClassificationTree(random_state=0).train(blobs)

    importances = tree.feature_importances()

    assert importances.shape == (3,)
    assert importances.sum() == pytest.approx(1.0)


def test_regression_tree(regression):
    tree = RegressionTree(max_leaf_size=2, max_features=2, random_state=0).train(regression)

    predictions = np.array(tree.predict(regression))

    assert np.mean((predictions - regression.labels) ** 2) < 0.5


def test_extra_tree_regressor_leaves_hold_means():
    dataset = Labeled([[0.0], [0.0], [1.0], [1.0]], [1.0, 3.0, 10.0, 10.0])

    tree = ExtraTreeRegressor(max_leaf_size=1, random_state=0).train(dataset)

    assert tree.predict(Unlabeled([[0.0], [1.0]])) == [2.0, 10.0]


def test_same_seed_same_tree(blobs):
    first = ExtraTreeClassifier(random_state=7).train(blobs)
    second = ExtraTreeClassifier(random_state=7).train(blobs)

    assert first.predict(blobs) == second.predict(blobs)
    assert str(first) == str(second)


def test_clone_returns_untrained_copy(clusters):
    tree = ClassificationTree(max_height=4, random_state=0).train(clusters)

    copy = clone(tree)

    assert not copy.trained()
    assert copy.get_params() == tree.get_params()
