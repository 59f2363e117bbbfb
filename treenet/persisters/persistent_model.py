"""
Persistent Model

Wraps a learner together with a persister so the trained model can be
saved and loaded again.
"""

from typing import Any, Optional

from ..exceptions import ConfigurationError
from ..models.base import Capability, Estimator
from .persister import Persister
from .serializers import Native, Serializer


class PersistentModel:
    """
    永続化可能なモデルのラッパー

    Parameters:
    -----------
    base : Estimator
        学習可能な推定器
    persister : Persister
        保存先
    serializer : Serializer, optional
        シリアライザ（デフォルトは Native）
    """

    def __init__(self, base: Estimator, persister: Persister, serializer: Optional[Serializer] = None):
        if not isinstance(base, Estimator) or not base.has(Capability.TRAINABLE):
            raise ConfigurationError(f"Base estimator must be a trainable Estimator, {type(base).__name__} given.")

        if not isinstance(persister, Persister):
            raise ConfigurationError(f"Persister must be a Persister, {type(persister).__name__} given.")

        self.base = base
        self.persister = persister
        self.serializer = serializer if serializer is not None else Native()

    @classmethod
    def load(cls, persister: Persister, serializer: Optional[Serializer] = None) -> 'PersistentModel':
        """
        保存先からモデルを読み込む

        Parameters:
        -----------
        persister : Persister
            保存先
        serializer : Serializer, optional
            保存時と同じシリアライザ（デフォルトは Native）

        Returns:
        --------
        model : PersistentModel
            読み込んだモデル
        """
        serializer = serializer if serializer is not None else Native()

        base = serializer.unserialize(persister.load())

        if not isinstance(base, Estimator):
            raise ConfigurationError(f"Persisted object must be an Estimator, {type(base).__name__} found.")

        return cls(base, persister, serializer)

    def save(self) -> None:
        """モデルを保存"""
        self.persister.save(self.serializer.serialize(self.base))

    def trained(self) -> bool:
        return self.base.trained()

    def train(self, dataset) -> 'PersistentModel':
        self.base.train(dataset)

        return self

    def predict(self, dataset):
        return self.base.predict(dataset)

    def proba(self, dataset):
        if not self.base.has(Capability.PROBABILISTIC):
            raise RuntimeError(f"{type(self.base).__name__} does not output probabilities.")

        return self.base.proba(dataset)

    def __getattr__(self, name: str) -> Any:
        # base が未設定の間（復元中など）は委譲しない
        if name == 'base':
            raise AttributeError(name)

        return getattr(self.base, name)

    def __repr__(self) -> str:
        return f"PersistentModel(base={type(self.base).__name__}, persister={self.persister!r})"
