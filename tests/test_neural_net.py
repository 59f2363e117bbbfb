"""
ニューラルネットワークのテスト
"""

import numpy as np
import pytest

from treenet.data.dataset import Labeled, Unlabeled
from treenet.exceptions import ConfigurationError, IncompatibleDataError, NumericalError
from treenet.models.neural_net import (
    Adam,
    AdaMax,
    Activation,
    BatchNorm,
    Constant,
    Continuous,
    Deferred,
    Dense,
    Dropout,
    FeedForward,
    HyperbolicTangent,
    Momentum,
    Multiclass,
    Parameter,
    ParameterRegistry,
    Placeholder1D,
    PReLU,
    ReLU,
    RMSProp,
    Sigmoid,
    Snapshot,
    Softmax,
    Stochastic,
    Xavier1
)


def _classifier(optimizer=None, random_state=0):
    return FeedForward(
        Placeholder1D(3),
        [Dense(4), Activation(ReLU()), PReLU(), Dense(2, weight_initializer=Xavier1())],
        Multiclass(['yes', 'no']),
        optimizer or Adam(0.01),
        random_state=random_state
    )


def _batch():
    return Labeled(
        [[0.1, 0.2, 0.3], [0.9, 0.8, 0.7], [0.2, 0.1, 0.3], [0.8, 0.9, 0.6]],
        ['yes', 'no', 'yes', 'no']
    )


def test_registry_assigns_sequential_ids():
    registry = ParameterRegistry()

    first = registry.register(np.zeros(2))
    second = registry.register(np.ones(3))

    assert (first.id, second.id) == (0, 1)
    assert len(registry) == 2


def test_parameter_update_does_not_mutate_copies():
    param = Parameter(0, np.array([1.0, 2.0]))
    copy = param.copy()

    param.update(np.array([0.5, 0.5]))

    assert param.value.tolist() == [0.5, 1.5]
    assert copy.value.tolist() == [1.0, 2.0]
    assert copy.id == param.id


def test_deferred_computes_lazily():
    calls = []

    def compute(x):
        calls.append(x)

        return x * 2

    deferred = Deferred(compute, 3)

    assert calls == []
    assert deferred() == 6
    assert calls == [3]


def test_softmax_columns_sum_to_one():
    z = np.array([[1.0, 1000.0], [2.0, 1000.0], [3.0, -1000.0]])

    computed = Softmax().compute(z)

    assert np.allclose(computed.sum(axis=0), 1.0)
    assert np.all(np.isfinite(computed))


def test_sigmoid_derivative_uses_computed_value():
    z = np.array([[0.0]])
    sigmoid = Sigmoid()

    computed = sigmoid.compute(z)

    assert computed[0, 0] == pytest.approx(0.5)
    assert sigmoid.differentiate(z, computed)[0, 0] == pytest.approx(0.25)


def test_tanh_derivative():
    z = np.array([[0.0, 1.0]])
    tanh = HyperbolicTangent()

    derivative = tanh.differentiate(z, tanh.compute(z))

    assert derivative[0, 0] == pytest.approx(1.0)
    assert derivative[0, 1] == pytest.approx(1.0 - np.tanh(1.0) ** 2)


@pytest.mark.parametrize('optimizer_class', [Momentum, RMSProp, Adam, AdaMax])
def test_warm_and_lazy_optimizer_state_are_equal(optimizer_class):
    warmed = optimizer_class()
    lazy = optimizer_class()

    param = Parameter(0, np.array([1.0, -2.0, 3.0]))

    warmed.warm(param)

    for gradient in (np.array([0.1, 0.2, -0.3]), np.array([-0.5, 0.0, 0.4])):
        assert np.allclose(warmed.step(param, gradient), lazy.step(param, gradient))


@pytest.mark.parametrize('optimizer_class, update_norm, denominator', [
    (Adam, lambda norm, gradient: norm * 0.999 + gradient ** 2 * 0.001, np.sqrt),
    (AdaMax, lambda norm, gradient: np.maximum(norm * 0.999, np.abs(gradient)), np.abs),
])
def test_bias_correction_stops_after_warm_up(optimizer_class, update_norm, denominator):
    # beta1 = 0.999 なので 300 ステップ後も補正係数は 1 から十分離れている
    optimizer = optimizer_class(rate=0.01, momentum_decay=0.001, norm_decay=0.001)

    param = Parameter(0, np.zeros(2))
    gradient = np.array([0.5, -2.0])

    velocity = gradient * 0.001
    norm = update_norm(np.zeros(2), gradient)

    step = optimizer.step(param, gradient)

    assert optimizer.t == 1
    assert np.allclose(step, velocity / denominator(norm) * 0.01 / (1.0 - 0.999))

    for _ in range(optimizer_class.WARM_UP_STEPS - 1):
        optimizer.step(param, gradient)

    assert optimizer.t == optimizer_class.WARM_UP_STEPS

    velocity, norm = optimizer.cache[param.id]

    velocity = velocity * 0.999 + gradient * 0.001
    norm = update_norm(norm, gradient)

    step = optimizer.step(param, gradient)

    assert optimizer.t == optimizer_class.WARM_UP_STEPS
    assert np.allclose(step, velocity / denominator(norm) * 0.01)


def test_stochastic_step():
    step = Stochastic(0.1).step(Parameter(0, np.zeros(2)), np.array([1.0, -2.0]))

    assert np.allclose(step, [0.1, -0.2])


def test_invalid_optimizer_configuration():
    with pytest.raises(ConfigurationError):
        Stochastic(0.0)

    with pytest.raises(ConfigurationError):
        Adam(momentum_decay=1.5)


def test_network_warms_adaptive_optimizer():
    network = _classifier(Adam())

    assert set(network.optimizer.cache) == {param.id for param in network.parameters()}


def test_output_fan_in_must_match_classes():
    with pytest.raises(ConfigurationError):
        FeedForward(Placeholder1D(3), [Dense(3)], Multiclass(['a', 'b']), Adam())


def test_infer_shape_and_probabilities():
    network = _classifier()

    activations = network.infer(_batch())

    assert activations.shape == (4, 2)
    assert np.allclose(activations.sum(axis=1), 1.0)


def test_input_layer_checks_feature_count():
    network = _classifier()

    with pytest.raises(IncompatibleDataError):
        network.infer(Unlabeled([[1.0, 2.0]]))


def test_backpropagate_before_forward():
    network = _classifier()

    with pytest.raises(RuntimeError):
        network.backpropagate(['yes'])


def test_roundtrip_reduces_loss():
    network = _classifier(Adam(0.01))
    batch = _batch()

    losses = [network.roundtrip(batch) for _ in range(200)]

    assert losses[-1] < losses[0]


def test_snapshot_restores_parameters_and_output():
    network = _classifier(Adam(0.05))
    batch = _batch()

    snapshot = Snapshot.take(network)
    expected_params = [param.value.copy() for param in network.parameters()]
    expected_output = network.infer(batch)

    for _ in range(20):
        network.roundtrip(batch)

    assert not np.allclose(network.infer(batch), expected_output)

    for _ in range(2):
        snapshot.restore()

        for param, expected in zip(network.parameters(), expected_params):
            assert np.array_equal(param.value, expected)

        assert np.allclose(network.infer(batch), expected_output)

        network.roundtrip(batch)


def test_dense_gradient_uses_weights_before_update():
    layer = Dense(1, bias=False, weight_initializer=Constant(1.0))
    layer.initialize(2, ParameterRegistry(), np.random.RandomState(0))

    layer.forward(np.array([[1.0], [2.0]]))

    gradient = layer.back(Deferred(lambda: np.array([[1.0]])), Stochastic(0.5))

    assert np.allclose(layer.weights.value, [[0.5, 0.0]])
    assert np.allclose(gradient(), [[1.0], [1.0]])


def test_dropout_and_batch_norm_layers_train():
    network = FeedForward(
        Placeholder1D(3),
        [Dense(6), BatchNorm(), Activation(ReLU()), Dropout(0.2), Dense(2)],
        Multiclass(['yes', 'no']),
        RMSProp(0.01),
        random_state=1
    )

    loss = network.roundtrip(_batch())

    assert np.isfinite(loss)
    assert network.infer(_batch()).shape == (4, 2)


def test_continuous_output_requires_single_input():
    with pytest.raises(ConfigurationError):
        FeedForward(Placeholder1D(2), [Dense(2)], Continuous(), Stochastic())


def test_divergence_raises_numerical_error():
    network = FeedForward(
        Placeholder1D(1),
        [Dense(1)],
        Continuous(),
        Stochastic(1e6),
        random_state=0
    )

    batch = Labeled([[1e3], [2e3], [3e3]], [2e3, 4e3, 6e3])

    with np.errstate(all='ignore'):
        with pytest.raises(NumericalError):
            for _ in range(100):
                network.roundtrip(batch)
