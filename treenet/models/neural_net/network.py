"""
Feed Forward Network

This module contains the FeedForward network: an input layer, any number of
hidden layers and an output layer trained by backpropagation.
"""

from typing import Iterator, List, Optional, Sequence, Union

import numpy as np
from sklearn.utils import check_random_state

from ...data.dataset import Dataset, Labeled
from ...exceptions import ConfigurationError, NumericalError
from .layers import Hidden, Layer, Output, Parametric, Placeholder1D
from .optimizers import Adaptive, Optimizer
from .parameter import Parameter, ParameterRegistry


class FeedForward:
    """
    順伝播型ニューラルネットワーク

    Parameters:
    -----------
    input : Placeholder1D
        入力層
    hidden : sequence of Hidden
        隠れ層
    output : Output
        出力層
    optimizer : Optimizer
        パラメータの更新に使うオプティマイザ
    random_state : int, RandomState or None, default=None
        重みの初期化とDropout/Noiseに使う乱数シード
    """

    def __init__(
        self,
        input: Placeholder1D,
        hidden: Sequence[Hidden],
        output: Output,
        optimizer: Optimizer,
        random_state=None
    ):
        for layer in hidden:
            if not isinstance(layer, Hidden):
                raise ConfigurationError(f"Hidden layer must be a Hidden layer, {type(layer).__name__} given.")

        if not isinstance(output, Output):
            raise ConfigurationError(f"Output layer must be an Output layer, {type(output).__name__} given.")

        if not isinstance(optimizer, Optimizer):
            raise ConfigurationError(f"Optimizer must be an Optimizer, {type(optimizer).__name__} given.")

        self.input = input
        self.hidden = list(hidden)
        self.output = output
        self.optimizer = optimizer
        self.random_state = random_state

        self.registry = ParameterRegistry()

        self.initialize()

    def layers(self) -> Iterator[Layer]:
        """入力層から出力層までのレイヤー"""
        yield self.input

        yield from self.hidden

        yield self.output

    def parametric(self) -> Iterator[Parametric]:
        """パラメータを持つレイヤー"""
        for layer in self.layers():
            if isinstance(layer, Parametric):
                yield layer

    def parameters(self) -> List[Parameter]:
        return [param for layer in self.parametric() for param in layer.parameters().values()]

    def initialize(self) -> None:
        """
        入力層から順にファンインを伝播してパラメータを割り当てる

        オプティマイザが Adaptive の場合はすべてのパラメータのキャッシュを作成する
        """
        rng = check_random_state(self.random_state)

        self.registry = ParameterRegistry()

        fan_in = 0

        for layer in self.layers():
            fan_in = layer.initialize(fan_in, self.registry, rng)

        if isinstance(self.optimizer, Adaptive):
            for param in self.parameters():
                self.optimizer.warm(param)

    @staticmethod
    def _as_input(samples: Union[Dataset, np.ndarray]) -> np.ndarray:
        if isinstance(samples, Dataset):
            samples = samples.samples

        return np.asarray(samples, dtype=float).T

    def infer(self, samples: Union[Dataset, np.ndarray]) -> np.ndarray:
        """
        推論（状態を保持しない順伝播）

        Parameters:
        -----------
        samples : Dataset or array-like, shape=(n_samples, n_features)
            入力

        Returns:
        --------
        activations : array-like, shape=(n_samples, n_outputs)
            出力層の活性化
        """
        input = self.input.infer(self._as_input(samples))

        for layer in self.hidden:
            input = layer.infer(input)

        return self.output.infer(input).T

    def feed(self, input: np.ndarray) -> np.ndarray:
        """
        学習用の順伝播

        Parameters:
        -----------
        input : array-like, shape=(n_features, n_samples)
            入力行列

        Returns:
        --------
        output : array-like, shape=(n_outputs, n_samples)
            出力層の活性化
        """
        input = self.input.forward(input)

        for layer in self.hidden:
            input = layer.forward(input)

        return self.output.forward(input)

    def backpropagate(self, labels: Sequence) -> float:
        """
        逆伝播でパラメータを更新

        Parameters:
        -----------
        labels : sequence
            バッチのラベル

        Returns:
        --------
        loss : float
            バッチの損失
        """
        gradient, loss = self.output.back(labels, self.optimizer)

        for layer in reversed(self.hidden):
            gradient = layer.back(gradient, self.optimizer)

        return loss

    def roundtrip(self, batch: Labeled) -> float:
        """
        1バッチ分の順伝播と逆伝播

        Parameters:
        -----------
        batch : Labeled
            学習バッチ

        Returns:
        --------
        loss : float
            バッチの損失
        """
        self.feed(self._as_input(batch))

        loss = self.backpropagate(batch.labels)

        if not np.isfinite(loss):
            raise NumericalError(f"Numerical instability detected, loss is {loss}.")

        return loss

    def __repr__(self) -> str:
        layers = ", ".join(repr(layer) for layer in self.layers())

        return f"FeedForward([{layers}], optimizer={self.optimizer!r})"
