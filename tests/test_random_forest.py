"""
ランダムフォレストのテスト
"""

import numpy as np
import pytest

from treenet.backends import Joblib, Serial
from treenet.data.dataset import Labeled, Unlabeled
from treenet.exceptions import ConfigurationError, IncompatibleDataError, NotTrainedError
from treenet.models.base import Capability
from treenet.models.tree_components import ClassificationTree, ExtraTreeClassifier, RandomForest, RegressionTree


def test_invalid_configuration():
    with pytest.raises(ConfigurationError):
        RandomForest(estimators=0)

    with pytest.raises(ConfigurationError):
        RandomForest(ratio=2.0)

    with pytest.raises(ConfigurationError):
        RandomForest(base=RegressionTree())


def test_capabilities():
    forest = RandomForest()

    assert forest.has(Capability.PROBABILISTIC | Capability.PARALLEL)
    assert not forest.has(Capability.ONLINE)


def test_predict_before_training():
    with pytest.raises(NotTrainedError):
        RandomForest().predict(Unlabeled([[1.0, 2.0, 3.0]]))


def test_train_and_predict(blobs):
    forest = RandomForest(estimators=20, ratio=0.5, random_state=0).train(blobs)

    assert len(forest.trees) == 20

    predictions = forest.predict(blobs)
    accuracy = np.mean(np.array(predictions) == blobs.labels)

    assert accuracy > 0.9


def test_proba_rows_sum_to_one(blobs):
    forest = RandomForest(estimators=10, random_state=0).train(blobs)

    for dist in forest.proba(blobs):
        assert set(dist) == {'red', 'green', 'blue'}
        assert sum(dist.values()) == pytest.approx(1.0, abs=1e-6)


def test_predict_is_invariant_to_tree_order(blobs):
    forest = RandomForest(estimators=15, ratio=0.3, random_state=1).train(blobs)

    expected = forest.predict(blobs)
    expected_proba = forest.proba(blobs)

    forest.trees = forest.trees[::-1]

    assert forest.predict(blobs) == expected

    for dist, expected_dist in zip(forest.proba(blobs), expected_proba):
        for outcome, probability in dist.items():
            assert probability == pytest.approx(expected_dist[outcome])


def test_same_seed_same_forest(blobs):
    first = RandomForest(base=ExtraTreeClassifier(), estimators=10, random_state=42).train(blobs)
    second = RandomForest(base=ExtraTreeClassifier(), estimators=10, random_state=42).train(blobs)

    assert first.predict(blobs) == second.predict(blobs)


def test_balanced_sampling_draws_minority_class():
    samples = [[float(i)] for i in range(100)]
    labels = ['major'] * 95 + ['minor'] * 5

    dataset = Labeled(samples, labels)

    forest = RandomForest(estimators=5, ratio=1.0, balanced=True, random_state=0).train(dataset)

    assert forest.trained()
    assert list(forest.classes) == ['major', 'minor']


def test_feature_importances(blobs):
    forest = RandomForest(estimators=10, random_state=0).train(blobs)

    importances = forest.feature_importances()

    assert importances.shape == (3,)
    assert importances.sum() == pytest.approx(1.0)


def test_joblib_backend_matches_serial(blobs):
    serial = RandomForest(estimators=6, backend=Serial(), random_state=5).train(blobs)
    parallel = RandomForest(estimators=6, backend=Joblib(n_jobs=2, prefer="threads"), random_state=5).train(blobs)

    assert serial.predict(blobs) == parallel.predict(blobs)


def test_verbose_prints_summary(blobs, capsys):
    RandomForest(estimators=3, random_state=0, verbose=True).train(blobs)

    captured = capsys.readouterr()

    assert "RandomForest Training Summary" in captured.out


class CountingBackend(Serial):
    def __init__(self):
        super().__init__()

        self.enqueued = 0

    def enqueue(self, task, after=None):
        self.enqueued += 1

        super().enqueue(task, after)


def test_predict_rejects_incompatible_columns_before_dispatch(blobs):
    forest = RandomForest(estimators=4, random_state=0).train(blobs)

    backend = CountingBackend()
    forest.backend = backend

    with pytest.raises(IncompatibleDataError):
        forest.predict(Unlabeled([[1.0, 2.0]]))

    with pytest.raises(IncompatibleDataError):
        forest.proba(Unlabeled([[1.0, 'x', 3.0]]))

    assert backend.enqueued == 0


def test_vote_tie_goes_to_first_training_class():
    forest = RandomForest(estimators=2, ratio=1.0, random_state=0).train(Labeled([[1.0], [2.0]], ['b', 'a']))

    votes_a = ClassificationTree().train(Labeled([[1.0], [2.0]], ['a', 'a']))
    votes_b = ClassificationTree().train(Labeled([[1.0], [2.0]], ['b', 'b']))

    for trees in ([votes_a, votes_b], [votes_b, votes_a]):
        forest.trees = trees

        assert forest.predict(Unlabeled([[1.5]])) == ['b']
