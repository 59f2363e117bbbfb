"""
永続化のテスト
"""

import os

import pytest

from treenet.exceptions import ConfigurationError
from treenet.models.mlp import Adaline
from treenet.models.neural_net import Stochastic
from treenet.models.tree_components import ClassificationTree, RandomForest, RegressionTree
from treenet.persisters import Filesystem, Joblib, Native, PersistentModel


def test_filesystem_round_trip(tmp_path):
    persister = Filesystem(str(tmp_path / "models" / "blob.model"))

    persister.save(b"payload")

    assert persister.load() == b"payload"


def test_filesystem_history_keeps_old_files(tmp_path):
    path = tmp_path / "tree.model"
    persister = Filesystem(str(path), history=True)

    persister.save(b"first")
    persister.save(b"second")

    old_files = [name for name in os.listdir(tmp_path) if name.endswith(".old")]

    assert persister.load() == b"second"
    assert len(old_files) == 1


def test_filesystem_without_history_overwrites(tmp_path):
    persister = Filesystem(str(tmp_path / "tree.model"))

    persister.save(b"first")
    persister.save(b"second")

    assert os.listdir(tmp_path) == ["tree.model"]


def test_failed_save_keeps_previous_file(tmp_path):
    persister = Filesystem(str(tmp_path / "tree.model"))

    persister.save(b"first")

    with pytest.raises(TypeError):
        persister.save("not bytes")

    assert persister.load() == b"first"
    assert os.listdir(tmp_path) == ["tree.model"]


@pytest.mark.parametrize('serializer', [Native(), Joblib()])
def test_persistent_model_round_trip(tmp_path, blobs, serializer):
    persister = Filesystem(str(tmp_path / "forest.model"))

    model = PersistentModel(RandomForest(estimators=5, random_state=0), persister, serializer)
    model.train(blobs)
    model.save()

    restored = PersistentModel.load(persister, serializer)

    assert restored.trained()
    assert restored.predict(blobs) == model.predict(blobs)
    assert restored.proba(blobs) == model.proba(blobs)


def test_persistent_model_delegates_attributes(blobs, tmp_path):
    model = PersistentModel(ClassificationTree(random_state=0), Filesystem(str(tmp_path / "tree.model")))

    model.train(blobs)

    assert model.height() >= 1
    assert model.feature_importances().shape == (3,)


def test_persistent_network(tmp_path, linear):
    persister = Filesystem(str(tmp_path / "adaline.model"))

    model = PersistentModel(Adaline(optimizer=Stochastic(0.05), epochs=50, random_state=0), persister, Joblib())
    model.train(linear)
    model.save()

    restored = PersistentModel.load(persister, Joblib())

    assert restored.predict(linear) == pytest.approx(model.predict(linear))


def test_proba_requires_probabilistic_base(regression, tmp_path):
    model = PersistentModel(RegressionTree(), Filesystem(str(tmp_path / "tree.model")))

    model.train(regression)

    with pytest.raises(RuntimeError):
        model.proba(regression)


def test_invalid_configuration(tmp_path):
    with pytest.raises(ConfigurationError):
        PersistentModel("not a model", Filesystem(str(tmp_path / "x.model")))

    with pytest.raises(ConfigurationError):
        PersistentModel(ClassificationTree(), "not a persister")

    with pytest.raises(ConfigurationError):
        Joblib(compress=10)


def test_load_rejects_non_estimator(tmp_path):
    persister = Filesystem(str(tmp_path / "junk.model"))
    persister.save(Native().serialize({'not': 'a model'}))

    with pytest.raises(ConfigurationError):
        PersistentModel.load(persister)
