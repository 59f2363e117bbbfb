"""
Optimizers

An optimizer turns a gradient into the step that a Parameter subtracts
from its value. Adaptive optimizers keep per-parameter accumulators keyed
by parameter id.
"""

from abc import ABC, abstractmethod
from typing import Dict, List

import numpy as np

from ...exceptions import ConfigurationError
from .activations import EPSILON
from .parameter import Parameter


class Optimizer(ABC):
    """オプティマイザの基底クラス"""

    @abstractmethod
    def step(self, param: Parameter, gradient: np.ndarray) -> np.ndarray:
        """
        更新量を計算

        Parameters:
        -----------
        param : Parameter
            更新するパラメータ
        gradient : np.ndarray
            パラメータの勾配

        Returns:
        --------
        step : np.ndarray
            パラメータから引く量
        """


class Adaptive(Optimizer):
    """
    パラメータごとの状態を持つオプティマイザ

    warm() で事前にキャッシュを作成できる。作成していない場合は最初の
    step() で同じ初期状態が作られる。
    """

    def __init__(self):
        self.cache: Dict[int, List[np.ndarray]] = {}

    @abstractmethod
    def warm(self, param: Parameter) -> None:
        """パラメータのキャッシュを0で初期化"""

    def _state(self, param: Parameter) -> List[np.ndarray]:
        if param.id not in self.cache:
            self.warm(param)

        return self.cache[param.id]


class Stochastic(Optimizer):
    """
    確率的勾配降下法

    Parameters:
    -----------
    rate : float, default=0.01
        学習率
    """

    def __init__(self, rate: float = 0.01):
        if rate <= 0.0:
            raise ConfigurationError(f"Learning rate must be greater than 0, {rate} given.")

        self.rate = rate

    def step(self, param, gradient):
        return gradient * self.rate

    def __repr__(self) -> str:
        return f"Stochastic(rate={self.rate})"


class Momentum(Adaptive):
    """
    モメンタム付き勾配降下法

    Parameters:
    -----------
    rate : float, default=0.001
        学習率
    decay : float, default=0.1
        速度の減衰率
    """

    def __init__(self, rate: float = 0.001, decay: float = 0.1):
        super().__init__()

        if rate <= 0.0:
            raise ConfigurationError(f"Learning rate must be greater than 0, {rate} given.")

        if decay <= 0.0 or decay >= 1.0:
            raise ConfigurationError(f"Decay must be between 0 and 1, {decay} given.")

        self.rate = rate
        self.decay = decay

    def warm(self, param):
        self.cache[param.id] = [np.zeros(param.shape)]

    def step(self, param, gradient):
        velocity, = self._state(param)

        velocity = gradient * self.rate + velocity * (1.0 - self.decay)

        self.cache[param.id] = [velocity]

        return velocity

    def __repr__(self) -> str:
        return f"Momentum(rate={self.rate}, decay={self.decay})"


class RMSProp(Adaptive):
    """
    勾配の二乗の移動平均で学習率を調整

    Parameters:
    -----------
    rate : float, default=0.001
        学習率
    decay : float, default=0.1
        二乗勾配の移動平均の減衰率
    """

    def __init__(self, rate: float = 0.001, decay: float = 0.1):
        super().__init__()

        if rate <= 0.0:
            raise ConfigurationError(f"Learning rate must be greater than 0, {rate} given.")

        if decay <= 0.0 or decay >= 1.0:
            raise ConfigurationError(f"Decay must be between 0 and 1, {decay} given.")

        self.rate = rate
        self.decay = decay

    def warm(self, param):
        self.cache[param.id] = [np.zeros(param.shape)]

    def step(self, param, gradient):
        norm, = self._state(param)

        norm = norm * (1.0 - self.decay) + gradient ** 2 * self.decay

        self.cache[param.id] = [norm]

        return gradient * self.rate / np.maximum(np.sqrt(norm), EPSILON)

    def __repr__(self) -> str:
        return f"RMSProp(rate={self.rate}, decay={self.decay})"


class Adam(Adaptive):
    """
    Adam

    最初の WARM_UP_STEPS ステップは学習率をバイアス補正する

    Parameters:
    -----------
    rate : float, default=0.001
        学習率
    momentum_decay : float, default=0.1
        速度の減衰率（beta1 = 1 - momentum_decay）
    norm_decay : float, default=0.001
        二乗勾配の減衰率（beta2 = 1 - norm_decay）
    """

    WARM_UP_STEPS = 300

    def __init__(self, rate: float = 0.001, momentum_decay: float = 0.1, norm_decay: float = 0.001):
        super().__init__()

        if rate <= 0.0:
            raise ConfigurationError(f"Learning rate must be greater than 0, {rate} given.")

        if momentum_decay <= 0.0 or momentum_decay >= 1.0:
            raise ConfigurationError(f"Momentum decay must be between 0 and 1, {momentum_decay} given.")

        if norm_decay <= 0.0 or norm_decay >= 1.0:
            raise ConfigurationError(f"Norm decay must be between 0 and 1, {norm_decay} given.")

        self.rate = rate
        self.momentum_decay = momentum_decay
        self.norm_decay = norm_decay
        self.beta1 = 1.0 - momentum_decay
        self.beta2 = 1.0 - norm_decay
        self.t = 0

    def warm(self, param):
        self.cache[param.id] = [np.zeros(param.shape), np.zeros(param.shape)]

    def _rate(self) -> float:
        """ウォームアップ中はバイアス補正した学習率"""
        if self.t < self.WARM_UP_STEPS:
            self.t += 1

            return self.rate / (1.0 - self.beta1 ** self.t)

        return self.rate

    def _norm(self, norm: np.ndarray, gradient: np.ndarray) -> np.ndarray:
        return norm * self.beta2 + gradient ** 2 * self.norm_decay

    def step(self, param, gradient):
        velocity, norm = self._state(param)

        velocity = velocity * self.beta1 + gradient * self.momentum_decay
        norm = self._norm(norm, gradient)

        self.cache[param.id] = [velocity, norm]

        return velocity / np.maximum(self._denominator(norm), EPSILON) * self._rate()

    def _denominator(self, norm: np.ndarray) -> np.ndarray:
        return np.sqrt(norm)

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(rate={self.rate}, momentum_decay={self.momentum_decay},"
                f" norm_decay={self.norm_decay})")


class AdaMax(Adam):
    """無限ノルムを使うAdamの変種"""

    def _norm(self, norm, gradient):
        return np.maximum(norm * self.beta2, np.abs(gradient))

    def _denominator(self, norm):
        return norm
