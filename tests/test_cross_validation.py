"""
交差検証と評価指標のテスト
"""

import numpy as np
import pytest

from treenet.backends import Joblib
from treenet.cross_validation import (
    MCC,
    Accuracy,
    FBeta,
    KFold,
    LeavePOut,
    MeanSquaredError,
    MedianAbsoluteError,
    MonteCarlo,
    RSquared
)
from treenet.data.dataset import Unlabeled
from treenet.exceptions import ConfigurationError, LabeledDatasetRequired, PreconditionError
from treenet.models.tree_components import ClassificationTree, RegressionTree


def test_accuracy():
    assert Accuracy().score(['a', 'b', 'a'], ['a', 'b', 'b']) == pytest.approx(2 / 3)


def test_empty_score_is_zero():
    assert Accuracy().score([], []) == 0.0


def test_length_mismatch():
    with pytest.raises(PreconditionError):
        Accuracy().score(['a'], ['a', 'b'])


def test_fbeta_perfect_and_range():
    assert FBeta().score(['a', 'b'], ['a', 'b']) == pytest.approx(1.0)
    assert FBeta().range() == (0.0, 1.0)


def test_mcc_inverse_predictions():
    assert MCC().score(['a', 'b', 'a', 'b'], ['b', 'a', 'b', 'a']) == pytest.approx(-1.0)


def test_regression_metrics():
    predictions = [1.0, 2.0, 3.0]
    labels = [1.0, 2.0, 5.0]

    assert MeanSquaredError().score(predictions, labels) == pytest.approx(-4 / 3)
    assert MedianAbsoluteError().score(predictions, labels) == pytest.approx(0.0)
    assert RSquared().score(labels, labels) == pytest.approx(1.0)


def test_metric_must_match_estimator_type(blobs):
    with pytest.raises(ConfigurationError):
        KFold(3).test(ClassificationTree(), blobs, RSquared())


def test_validator_requires_labels():
    with pytest.raises(LabeledDatasetRequired):
        KFold(2).test(ClassificationTree(), Unlabeled([[1.0], [2.0]]), Accuracy())


def test_kfold(blobs):
    score = KFold(5, random_state=0).test(ClassificationTree(random_state=0), blobs, Accuracy())

    assert 0.9 <= score <= 1.0


def test_kfold_needs_enough_samples(clusters):
    with pytest.raises(PreconditionError):
        KFold(20).test(ClassificationTree(), clusters, Accuracy())


def test_kfold_on_regression(regression):
    score = KFold(3, random_state=0).test(RegressionTree(max_features=2, random_state=0), regression, RSquared())

    assert score > 0.8


def test_monte_carlo(blobs):
    score = MonteCarlo(simulations=3, ratio=0.3, random_state=0).test(
        ClassificationTree(random_state=0), blobs, Accuracy()
    )

    assert 0.9 <= score <= 1.0


def test_leave_p_out_split_count(blobs):
    validator = LeavePOut(40)

    splits = validator._splits(blobs, np.random.RandomState(0))

    assert len(splits) == 4

    for training, testing in splits:
        assert training.num_rows + testing.num_rows == blobs.num_rows


def test_leave_p_out(blobs):
    score = LeavePOut(30).test(ClassificationTree(random_state=0), blobs.randomize(np.random.RandomState(0)),
                               Accuracy())

    assert 0.9 <= score <= 1.0


def test_validator_with_parallel_backend(blobs):
    serial = KFold(3, random_state=1).test(ClassificationTree(random_state=0), blobs, Accuracy())
    parallel = KFold(3, backend=Joblib(n_jobs=2, prefer="threads"), random_state=1).test(
        ClassificationTree(random_state=0), blobs, Accuracy()
    )

    assert serial == pytest.approx(parallel)


def test_validator_leaves_estimator_untrained(blobs):
    tree = ClassificationTree(random_state=0)

    KFold(3, random_state=0).test(tree, blobs, Accuracy())

    assert not tree.trained()


def test_invalid_validator_configuration():
    with pytest.raises(ConfigurationError):
        KFold(1)

    with pytest.raises(ConfigurationError):
        MonteCarlo(ratio=1.0)

    with pytest.raises(ConfigurationError):
        LeavePOut(0)
