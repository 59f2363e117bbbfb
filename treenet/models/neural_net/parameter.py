"""
Network Parameters

Trainable tensors are wrapped in a Parameter that carries an integer id.
Ids are handed out by the ParameterRegistry owned by each network so that
optimizer caches can be keyed by id without a process wide counter.
"""

from typing import Dict, Iterator

import numpy as np


class Parameter:
    """
    学習可能なテンソル

    Attributes:
    -----------
    id : int
        レジストリが割り当てたID（オプティマイザのキャッシュのキー）
    value : np.ndarray
        パラメータの値
    """

    def __init__(self, id: int, value: np.ndarray):
        self.id = id
        self.value = np.asarray(value, dtype=float)

    @property
    def shape(self):
        return self.value.shape

    def update(self, step: np.ndarray) -> None:
        """ステップを引いて値を更新（元の配列は書き換えない）"""
        self.value = self.value - step

    def copy(self) -> 'Parameter':
        """同じIDを持つ値のコピー"""
        return Parameter(self.id, self.value.copy())

    def __repr__(self) -> str:
        return f"Parameter(id={self.id}, shape={self.value.shape})"


class ParameterRegistry:
    """ネットワーク単位でパラメータIDを割り当てる"""

    def __init__(self):
        self._parameters: Dict[int, Parameter] = {}

    def register(self, value: np.ndarray) -> Parameter:
        """
        新しいパラメータを作成して登録

        Parameters:
        -----------
        value : np.ndarray
            初期値

        Returns:
        --------
        param : Parameter
            連番のIDを持つパラメータ
        """
        param = Parameter(len(self._parameters), value)

        self._parameters[param.id] = param

        return param

    def __len__(self) -> int:
        return len(self._parameters)

    def __iter__(self) -> Iterator[Parameter]:
        return iter(self._parameters.values())
