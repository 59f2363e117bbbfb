"""
ネットワーク学習器のテスト
"""

import numpy as np
import pytest
from sklearn.base import clone

from treenet.cross_validation.metrics import Accuracy, MeanSquaredError
from treenet.data.dataset import Labeled, Unlabeled
from treenet.data.generators import Agglomerate, Blob
from treenet.exceptions import ConfigurationError, NotTrainedError, PreconditionError
from treenet.models.base import Capability
from treenet.models.mlp import Adaline, MultilayerPerceptron
from treenet.models.neural_net import Activation, Adam, Dense, ReLU, Stochastic


@pytest.fixture
def separable():
    generator = Agglomerate({
        'left': Blob([-3.0, -3.0], 0.5),
        'right': Blob([3.0, 3.0], 0.5)
    })

    return generator.generate(100, np.random.RandomState(0))


def _perceptron(**kwargs):
    params = {
        'hidden_layers': [Dense(8), Activation(ReLU())],
        'batch_size': 16,
        'optimizer': Adam(0.05),
        'epochs': 100,
        'window': 10,
        'hold_out': 0.2,
        'random_state': 0
    }
    params.update(kwargs)

    return MultilayerPerceptron(**params)


def test_adaline_converges_on_linear_data(linear):
    estimator = Adaline(
        batch_size=3,
        optimizer=Stochastic(0.1),
        alpha=0.0,
        epochs=3000,
        min_change=0.0,
        random_state=0
    )

    estimator.train(linear)

    predictions = estimator.predict(linear)

    assert predictions == pytest.approx([2.0, 4.0, 6.0], abs=1e-2)


def test_adaline_steps_and_importances(regression):
    estimator = Adaline(optimizer=Stochastic(0.05), epochs=200, random_state=0).train(regression)

    steps = estimator.steps()

    assert 0 < len(steps) <= 200
    assert steps[-1] < steps[0]

    importances = estimator.feature_importances()

    assert importances.sum() == pytest.approx(1.0)
    assert importances[0] > importances[1]


def test_adaline_predict_before_training():
    with pytest.raises(NotTrainedError):
        Adaline().predict(Unlabeled([[1.0]]))


def test_adaline_is_online():
    assert Adaline().has(Capability.ONLINE)


def test_invalid_training_parameters():
    with pytest.raises(ConfigurationError):
        Adaline(batch_size=0)

    with pytest.raises(ConfigurationError):
        MultilayerPerceptron(hold_out=0.9)

    with pytest.raises(ConfigurationError):
        MultilayerPerceptron(hidden_layers=['dense'])

    with pytest.raises(ConfigurationError):
        MultilayerPerceptron(metric=MeanSquaredError())


def test_perceptron_learns_separable_classes(separable):
    estimator = _perceptron().train(separable)

    predictions = estimator.predict(separable)

    assert set(predictions) <= {'left', 'right'}
    assert Accuracy().score(predictions, separable.labels) > 0.9


def test_perceptron_proba(separable):
    estimator = _perceptron(epochs=5).train(separable)

    for dist in estimator.proba(separable):
        assert set(dist) == {'left', 'right'}
        assert sum(dist.values()) == pytest.approx(1.0, abs=1e-6)


def test_perceptron_records_steps_and_scores(separable):
    estimator = _perceptron(epochs=5).train(separable)

    assert len(estimator.steps()) == len(estimator.scores())
    assert 0 < len(estimator.steps()) <= 5


def test_perceptron_partial_continues_training(separable):
    estimator = _perceptron(epochs=3, window=5, metric=Accuracy(), hold_out=0.5)

    estimator.train(separable)

    n_steps = len(estimator.steps())

    estimator.partial(separable)

    assert len(estimator.steps()) >= n_steps


def test_perceptron_requires_two_classes():
    dataset = Labeled([[1.0], [2.0]], ['only', 'only'])

    with pytest.raises(PreconditionError):
        MultilayerPerceptron().train(dataset)


def test_empty_hold_out_warns():
    dataset = Labeled([[0.0], [0.1], [5.0], [5.1]], ['a', 'a', 'b', 'b'])

    with pytest.warns(UserWarning):
        MultilayerPerceptron(epochs=2, hold_out=0.1, random_state=0).train(dataset)


def test_verbose_prints_progress(separable, capsys):
    _perceptron(epochs=2, verbose=True).train(separable)

    captured = capsys.readouterr()

    assert "Epoch 1/2, loss:" in captured.out


def test_clone_is_untrained(separable):
    estimator = _perceptron(epochs=2).train(separable)

    copy = clone(estimator)

    assert not copy.trained()
    assert estimator.trained()


def test_training_does_not_share_layers(separable):
    hidden = [Dense(4)]

    estimator = MultilayerPerceptron(hidden_layers=hidden, epochs=2, random_state=0).train(separable)

    assert estimator.network.hidden[0] is not hidden[0]
    assert hidden[0].weights is None
