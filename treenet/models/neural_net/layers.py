"""
Network Layers

Layers exchange (features, samples) matrices. The input layer checks the
feature count, hidden layers transform activations and return Deferred
gradients during backpropagation, and output layers turn labels into the
first gradient together with the loss.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ...exceptions import ConfigurationError, IncompatibleDataError
from .activations import EPSILON, ActivationFunction, Sigmoid, Softmax
from .cost_functions import ClassificationLoss, CrossEntropy, LeastSquares, RegressionLoss
from .deferred import Deferred
from .initializers import Constant, He, Initializer
from .optimizers import Optimizer
from .parameter import Parameter, ParameterRegistry


def _not_initialized() -> RuntimeError:
    return RuntimeError("Layer has not been initialized.")


def _no_forward_pass() -> RuntimeError:
    return RuntimeError("Must perform forward pass before backpropagating.")


class Layer(ABC):
    """レイヤーの基底クラス"""

    @abstractmethod
    def width(self) -> int:
        """出力ノード数"""

    @abstractmethod
    def initialize(self, fan_in: int, registry: ParameterRegistry, rng: np.random.RandomState) -> int:
        """
        入力数からパラメータを割り当て、出力数を返す

        Parameters:
        -----------
        fan_in : int
            入力ノード数
        registry : ParameterRegistry
            パラメータIDを割り当てるレジストリ
        rng : RandomState
            初期化とノイズに使う乱数生成器

        Returns:
        --------
        fan_out : int
            出力ノード数
        """

    @abstractmethod
    def forward(self, input: np.ndarray) -> np.ndarray:
        """学習用の順伝播（逆伝播に必要な状態を保持する）"""

    @abstractmethod
    def infer(self, input: np.ndarray) -> np.ndarray:
        """推論用の順伝播（状態を保持しない）"""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class Hidden(Layer):
    """隠れ層"""

    @abstractmethod
    def back(self, prev_gradient: Deferred, optimizer: Optimizer) -> Deferred:
        """
        逆伝播

        Parameters:
        -----------
        prev_gradient : Deferred
            上の層から受け取った勾配
        optimizer : Optimizer
            パラメータの更新に使うオプティマイザ

        Returns:
        --------
        gradient : Deferred
            下の層に渡す勾配
        """


class Output(Layer):
    """出力層"""

    @abstractmethod
    def back(self, labels: Sequence[Any], optimizer: Optimizer) -> Tuple[Deferred, float]:
        """ラベルから最初の勾配と損失を計算"""


class Parametric(ABC):
    """学習可能なパラメータを持つレイヤー"""

    @abstractmethod
    def parameters(self) -> Dict[str, Parameter]:
        """名前付きのパラメータ"""

    @abstractmethod
    def restore(self, parameters: Dict[str, Parameter]) -> None:
        """パラメータを差し替える"""


class Placeholder1D(Layer):
    """
    入力層

    Parameters:
    -----------
    inputs : int
        入力特徴量の数
    """

    def __init__(self, inputs: int):
        if inputs < 1:
            raise ConfigurationError(f"Number of input nodes must be greater than 0, {inputs} given.")

        self.inputs = inputs

    def width(self):
        return self.inputs

    def initialize(self, fan_in, registry, rng):
        return self.inputs

    def forward(self, input):
        if input.shape[0] != self.inputs:
            raise IncompatibleDataError(f"The number of features and input nodes must be equal,"
                                        f" {self.inputs} expected but {input.shape[0]} given.")

        return input

    def infer(self, input):
        return self.forward(input)

    def __repr__(self) -> str:
        return f"Placeholder1D(inputs={self.inputs})"


class Dense(Hidden, Parametric):
    """
    全結合層

    Parameters:
    -----------
    neurons : int
        ニューロン数
    alpha : float, default=0.0
        L2正則化の強さ
    bias : bool, default=True
        バイアスを使うかどうか
    weight_initializer : Initializer, optional
        重みの初期化（デフォルトは He）
    bias_initializer : Initializer, optional
        バイアスの初期化（デフォルトは Constant(0)）
    """

    def __init__(
        self,
        neurons: int,
        alpha: float = 0.0,
        bias: bool = True,
        weight_initializer: Optional[Initializer] = None,
        bias_initializer: Optional[Initializer] = None
    ):
        if neurons < 1:
            raise ConfigurationError(f"Number of neurons must be greater than 0, {neurons} given.")

        if alpha < 0.0:
            raise ConfigurationError(f"Alpha must be 0 or greater, {alpha} given.")

        self.neurons = neurons
        self.alpha = alpha
        self.bias = bias
        self.weight_initializer = weight_initializer or He()
        self.bias_initializer = bias_initializer or Constant(0.0)

        self.weights: Optional[Parameter] = None
        self.biases: Optional[Parameter] = None
        self.input: Optional[np.ndarray] = None

    def width(self):
        return self.neurons

    def initialize(self, fan_in, registry, rng):
        self.weights = registry.register(self.weight_initializer.initialize(fan_in, self.neurons, rng))

        if self.bias:
            self.biases = registry.register(self.bias_initializer.initialize(1, self.neurons, rng)[:, 0])

        return self.neurons

    def _compute(self, input: np.ndarray) -> np.ndarray:
        if self.weights is None:
            raise _not_initialized()

        z = self.weights.value @ input

        if self.biases is not None:
            z = z + self.biases.value[:, np.newaxis]

        return z

    def forward(self, input):
        self.input = input

        return self._compute(input)

    def infer(self, input):
        return self._compute(input)

    def back(self, prev_gradient, optimizer):
        if self.weights is None:
            raise _not_initialized()

        if self.input is None:
            raise _no_forward_pass()

        d_out = prev_gradient()

        d_w = d_out @ self.input.T

        if self.alpha:
            d_w = d_w + self.weights.value * self.alpha

        # 下の層への勾配は更新前の重みで計算する
        weights = self.weights.value

        self.weights.update(optimizer.step(self.weights, d_w))

        if self.biases is not None:
            d_b = np.sum(d_out, axis=1)

            self.biases.update(optimizer.step(self.biases, d_b))

        self.input = None

        return Deferred(self.gradient, weights, d_out)

    @staticmethod
    def gradient(weights: np.ndarray, d_out: np.ndarray) -> np.ndarray:
        return weights.T @ d_out

    def parameters(self):
        if self.weights is None:
            raise _not_initialized()

        params = {'weights': self.weights}

        if self.biases is not None:
            params['biases'] = self.biases

        return params

    def restore(self, parameters):
        self.weights = parameters['weights']
        self.biases = parameters.get('biases')

    def __repr__(self) -> str:
        return f"Dense(neurons={self.neurons}, alpha={self.alpha}, bias={self.bias})"


class Activation(Hidden):
    """
    活性化層

    Parameters:
    -----------
    activation_fn : ActivationFunction
        活性化関数
    """

    def __init__(self, activation_fn: ActivationFunction):
        if not isinstance(activation_fn, ActivationFunction):
            raise ConfigurationError(f"Activation function must be an ActivationFunction,"
                                     f" {type(activation_fn).__name__} given.")

        self.activation_fn = activation_fn

        self._width: Optional[int] = None
        self.input: Optional[np.ndarray] = None
        self.computed: Optional[np.ndarray] = None

    def width(self):
        if self._width is None:
            raise _not_initialized()

        return self._width

    def initialize(self, fan_in, registry, rng):
        self._width = fan_in

        return fan_in

    def forward(self, input):
        self.input = input
        self.computed = self.activation_fn.compute(input)

        return self.computed

    def infer(self, input):
        return self.activation_fn.compute(input)

    def back(self, prev_gradient, optimizer):
        if self.input is None or self.computed is None:
            raise _no_forward_pass()

        input, computed = self.input, self.computed

        self.input = self.computed = None

        return Deferred(self.gradient, input, computed, prev_gradient)

    def gradient(self, input: np.ndarray, computed: np.ndarray, prev_gradient: Deferred) -> np.ndarray:
        return self.activation_fn.differentiate(input, computed) * prev_gradient()

    def __repr__(self) -> str:
        return f"Activation({self.activation_fn!r})"


class Dropout(Hidden):
    """
    学習時にランダムにニューロンを無効化する層

    Parameters:
    -----------
    ratio : float, default=0.5
        無効化する割合
    """

    def __init__(self, ratio: float = 0.5):
        if ratio <= 0.0 or ratio >= 1.0:
            raise ConfigurationError(f"Ratio must be between 0 and 1, {ratio} given.")

        self.ratio = ratio
        self.scale = 1.0 / (1.0 - ratio)

        self._width: Optional[int] = None
        self.rng: Optional[np.random.RandomState] = None
        self.mask: Optional[np.ndarray] = None

    def width(self):
        if self._width is None:
            raise _not_initialized()

        return self._width

    def initialize(self, fan_in, registry, rng):
        self._width = fan_in
        self.rng = rng

        return fan_in

    def forward(self, input):
        if self.rng is None:
            raise _not_initialized()

        self.mask = (self.rng.rand(*input.shape) > self.ratio) * self.scale

        return input * self.mask

    def infer(self, input):
        return input

    def back(self, prev_gradient, optimizer):
        if self.mask is None:
            raise _no_forward_pass()

        mask, self.mask = self.mask, None

        return Deferred(self.gradient, prev_gradient, mask)

    @staticmethod
    def gradient(prev_gradient: Deferred, mask: np.ndarray) -> np.ndarray:
        return prev_gradient() * mask

    def __repr__(self) -> str:
        return f"Dropout(ratio={self.ratio})"


class Noise(Hidden):
    """
    学習時にガウスノイズを加える層

    Parameters:
    -----------
    stddev : float
        ノイズの標準偏差
    """

    def __init__(self, stddev: float):
        if stddev < 0.0:
            raise ConfigurationError(f"Standard deviation must be 0 or greater, {stddev} given.")

        self.stddev = stddev

        self._width: Optional[int] = None
        self.rng: Optional[np.random.RandomState] = None

    def width(self):
        if self._width is None:
            raise _not_initialized()

        return self._width

    def initialize(self, fan_in, registry, rng):
        self._width = fan_in
        self.rng = rng

        return fan_in

    def forward(self, input):
        if self.rng is None:
            raise _not_initialized()

        return input + self.rng.normal(size=input.shape) * self.stddev

    def infer(self, input):
        return input

    def back(self, prev_gradient, optimizer):
        return prev_gradient

    def __repr__(self) -> str:
        return f"Noise(stddev={self.stddev})"


class BatchNorm(Hidden, Parametric):
    """
    バッチ正規化層

    Parameters:
    -----------
    decay : float, default=0.1
        移動平均の減衰率
    beta_initializer : Initializer, optional
        シフトの初期化（デフォルトは Constant(0)）
    gamma_initializer : Initializer, optional
        スケールの初期化（デフォルトは Constant(1)）
    """

    def __init__(
        self,
        decay: float = 0.1,
        beta_initializer: Optional[Initializer] = None,
        gamma_initializer: Optional[Initializer] = None
    ):
        if decay < 0.0 or decay > 1.0:
            raise ConfigurationError(f"Decay must be between 0 and 1, {decay} given.")

        self.decay = decay
        self.beta_initializer = beta_initializer or Constant(0.0)
        self.gamma_initializer = gamma_initializer or Constant(1.0)

        self._width: Optional[int] = None
        self.beta: Optional[Parameter] = None
        self.gamma: Optional[Parameter] = None
        self.mean: Optional[np.ndarray] = None
        self.variance: Optional[np.ndarray] = None
        self.std_inv: Optional[np.ndarray] = None
        self.x_hat: Optional[np.ndarray] = None

    def width(self):
        if self._width is None:
            raise _not_initialized()

        return self._width

    def initialize(self, fan_in, registry, rng):
        self.beta = registry.register(self.beta_initializer.initialize(1, fan_in, rng)[:, 0])
        self.gamma = registry.register(self.gamma_initializer.initialize(1, fan_in, rng)[:, 0])

        self.mean = self.variance = None
        self._width = fan_in

        return fan_in

    def forward(self, input):
        if self.beta is None or self.gamma is None:
            raise _not_initialized()

        mean = np.mean(input, axis=1)
        variance = np.maximum(np.var(input, axis=1), EPSILON)

        std_inv = 1.0 / np.sqrt(variance)

        x_hat = (input - mean[:, np.newaxis]) * std_inv[:, np.newaxis]

        if self.mean is None or self.variance is None:
            self.mean = mean
            self.variance = variance

        self.mean = self.mean * (1.0 - self.decay) + mean * self.decay
        self.variance = self.variance * (1.0 - self.decay) + variance * self.decay

        self.std_inv = std_inv
        self.x_hat = x_hat

        return self.gamma.value[:, np.newaxis] * x_hat + self.beta.value[:, np.newaxis]

    def infer(self, input):
        if self.mean is None or self.variance is None or self.beta is None:
            raise _not_initialized()

        x_hat = (input - self.mean[:, np.newaxis]) / np.sqrt(self.variance)[:, np.newaxis]

        return self.gamma.value[:, np.newaxis] * x_hat + self.beta.value[:, np.newaxis]

    def back(self, prev_gradient, optimizer):
        if self.beta is None or self.gamma is None:
            raise _not_initialized()

        if self.std_inv is None or self.x_hat is None:
            raise _no_forward_pass()

        d_out = prev_gradient()

        d_beta = np.sum(d_out, axis=1)
        d_gamma = np.sum(d_out * self.x_hat, axis=1)

        gamma = self.gamma.value

        self.beta.update(optimizer.step(self.beta, d_beta))
        self.gamma.update(optimizer.step(self.gamma, d_gamma))

        std_inv, x_hat = self.std_inv, self.x_hat

        self.std_inv = self.x_hat = None

        return Deferred(self.gradient, d_out, gamma, std_inv, x_hat)

    @staticmethod
    def gradient(d_out: np.ndarray, gamma: np.ndarray, std_inv: np.ndarray, x_hat: np.ndarray) -> np.ndarray:
        n = d_out.shape[1]

        d_x_hat = d_out * gamma[:, np.newaxis]

        x_hat_sigma = np.sum(d_x_hat * x_hat, axis=1, keepdims=True)
        d_x_hat_sigma = np.sum(d_x_hat, axis=1, keepdims=True)

        return (d_x_hat * n - d_x_hat_sigma - x_hat * x_hat_sigma) * (std_inv / n)[:, np.newaxis]

    def parameters(self):
        if self.beta is None or self.gamma is None:
            raise _not_initialized()

        return {'beta': self.beta, 'gamma': self.gamma}

    def restore(self, parameters):
        self.beta = parameters['beta']
        self.gamma = parameters['gamma']

    def __repr__(self) -> str:
        return f"BatchNorm(decay={self.decay})"


class PReLU(Hidden, Parametric):
    """
    負の側の傾きを学習するReLU

    Parameters:
    -----------
    initializer : Initializer, optional
        傾きの初期化（デフォルトは Constant(0.25)）
    """

    def __init__(self, initializer: Optional[Initializer] = None):
        self.initializer = initializer or Constant(0.25)

        self._width: Optional[int] = None
        self.alpha: Optional[Parameter] = None
        self.input: Optional[np.ndarray] = None

    def width(self):
        if self._width is None:
            raise _not_initialized()

        return self._width

    def initialize(self, fan_in, registry, rng):
        self.alpha = registry.register(self.initializer.initialize(1, fan_in, rng)[:, 0])
        self._width = fan_in

        return fan_in

    def _compute(self, z: np.ndarray, alpha: np.ndarray) -> np.ndarray:
        return np.where(z > 0.0, z, alpha[:, np.newaxis] * z)

    def forward(self, input):
        if self.alpha is None:
            raise _not_initialized()

        self.input = input

        return self._compute(input, self.alpha.value)

    def infer(self, input):
        if self.alpha is None:
            raise _not_initialized()

        return self._compute(input, self.alpha.value)

    def back(self, prev_gradient, optimizer):
        if self.alpha is None:
            raise _not_initialized()

        if self.input is None:
            raise _no_forward_pass()

        d_out = prev_gradient()

        d_alpha = np.sum(d_out * np.minimum(self.input, 0.0), axis=1)

        alpha = self.alpha.value

        self.alpha.update(optimizer.step(self.alpha, d_alpha))

        z, self.input = self.input, None

        return Deferred(self.gradient, z, alpha, d_out)

    @staticmethod
    def gradient(z: np.ndarray, alpha: np.ndarray, d_out: np.ndarray) -> np.ndarray:
        return np.where(z > 0.0, 1.0, alpha[:, np.newaxis]) * d_out

    def parameters(self):
        if self.alpha is None:
            raise _not_initialized()

        return {'alpha': self.alpha}

    def restore(self, parameters):
        self.alpha = parameters['alpha']


class Continuous(Output):
    """
    回帰用の出力層（恒等関数）

    Parameters:
    -----------
    cost_fn : RegressionLoss, optional
        損失関数（デフォルトは LeastSquares）
    """

    def __init__(self, cost_fn: Optional[RegressionLoss] = None):
        cost_fn = cost_fn or LeastSquares()

        if not isinstance(cost_fn, RegressionLoss):
            raise ConfigurationError(f"Continuous output requires a regression loss, {cost_fn!r} given.")

        self.cost_fn = cost_fn
        self.input: Optional[np.ndarray] = None

    def width(self):
        return 1

    def initialize(self, fan_in, registry, rng):
        if fan_in != 1:
            raise ConfigurationError(f"Fan in must be equal to 1, {fan_in} given.")

        return 1

    def forward(self, input):
        self.input = input

        return input

    def infer(self, input):
        return input

    def back(self, labels, optimizer):
        if self.input is None:
            raise _no_forward_pass()

        expected = np.asarray(labels, dtype=float).reshape(1, -1)

        input, self.input = self.input, None

        loss = self.cost_fn.compute(input, expected)

        return Deferred(self.gradient, input, expected), loss

    def gradient(self, input: np.ndarray, expected: np.ndarray) -> np.ndarray:
        return self.cost_fn.differentiate(input, expected) / input.shape[1]

    def __repr__(self) -> str:
        return f"Continuous(cost_fn={self.cost_fn!r})"


class _Classifier(Output):
    """Sigmoid/Softmax出力層の共通処理"""

    def __init__(self, classes: Sequence[Any], cost_fn: Optional[ClassificationLoss]):
        cost_fn = cost_fn or CrossEntropy()

        if not isinstance(cost_fn, ClassificationLoss):
            raise ConfigurationError(f"{type(self).__name__} output requires a classification loss,"
                                     f" {cost_fn!r} given.")

        self.classes: List[Any] = list(dict.fromkeys(classes))
        self.cost_fn = cost_fn
        self.activation_fn: ActivationFunction = Sigmoid()

        self.input: Optional[np.ndarray] = None
        self.computed: Optional[np.ndarray] = None

    @abstractmethod
    def _expected(self, labels: Sequence[Any]) -> np.ndarray:
        """ラベルを目標値の行列に変換"""

    def forward(self, input):
        self.input = input
        self.computed = self.activation_fn.compute(input)

        return self.computed

    def infer(self, input):
        return self.activation_fn.compute(input)

    def back(self, labels, optimizer):
        if self.input is None or self.computed is None:
            raise _no_forward_pass()

        expected = self._expected(labels)

        input, computed = self.input, self.computed

        self.input = self.computed = None

        loss = self.cost_fn.compute(computed, expected)

        return Deferred(self.gradient, input, computed, expected), loss

    def gradient(self, input: np.ndarray, computed: np.ndarray, expected: np.ndarray) -> np.ndarray:
        n = computed.shape[1]

        # 交差エントロピーと組み合わせると微分が単純になる
        if isinstance(self.cost_fn, CrossEntropy):
            return (computed - expected) / n

        d_l = self.cost_fn.differentiate(computed, expected) / n

        return self.activation_fn.differentiate(input, computed) * d_l

    def __repr__(self) -> str:
        return f"{type(self).__name__}(classes={self.classes!r}, cost_fn={self.cost_fn!r})"


class Binary(_Classifier):
    """
    2クラス分類用の出力層（Sigmoid）

    出力は2番目のクラスの確率

    Parameters:
    -----------
    classes : sequence
        2つのクラスラベル
    cost_fn : ClassificationLoss, optional
        損失関数（デフォルトは CrossEntropy）
    """

    def __init__(self, classes: Sequence[Any], cost_fn: Optional[ClassificationLoss] = None):
        super().__init__(classes, cost_fn)

        if len(self.classes) != 2:
            raise ConfigurationError(f"Number of classes must be 2, {len(self.classes)} given.")

    def width(self):
        return 1

    def initialize(self, fan_in, registry, rng):
        if fan_in != 1:
            raise ConfigurationError(f"Fan in must be equal to 1, {fan_in} given.")

        return 1

    def _expected(self, labels):
        mapping = {label: float(i) for i, label in enumerate(self.classes)}

        return np.array([[mapping[label] for label in labels]])


class Multiclass(_Classifier):
    """
    多クラス分類用の出力層（Softmax）

    Parameters:
    -----------
    classes : sequence
        クラスラベル（2つ以上）
    cost_fn : ClassificationLoss, optional
        損失関数（デフォルトは CrossEntropy）
    """

    def __init__(self, classes: Sequence[Any], cost_fn: Optional[ClassificationLoss] = None):
        super().__init__(classes, cost_fn)

        if len(self.classes) < 2:
            raise ConfigurationError(f"Number of classes must be greater than 1, {len(self.classes)} given.")

        self.activation_fn = Softmax()

    def width(self):
        return len(self.classes)

    def initialize(self, fan_in, registry, rng):
        fan_out = len(self.classes)

        if fan_in != fan_out:
            raise ConfigurationError(f"Fan in must be equal to fan out, {fan_out} expected but {fan_in} given.")

        return fan_out

    def _expected(self, labels):
        labels = np.asarray(labels, dtype=object)

        return np.array([(labels == outcome).astype(float) for outcome in self.classes])
