"""
Model Serializers

Serializers turn a trained estimator into an opaque byte blob and back.
"""

import io
import pickle
from abc import ABC, abstractmethod
from typing import Any

import joblib

from ..exceptions import ConfigurationError


class Serializer(ABC):
    """シリアライザの基底クラス"""

    @abstractmethod
    def serialize(self, model: Any) -> bytes:
        """モデルをバイト列に変換"""

    @abstractmethod
    def unserialize(self, data: bytes) -> Any:
        """バイト列からモデルを復元"""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class Native(Serializer):
    """pickleによるシリアライズ"""

    def serialize(self, model):
        return pickle.dumps(model, protocol=pickle.HIGHEST_PROTOCOL)

    def unserialize(self, data):
        return pickle.loads(data)


class Joblib(Serializer):
    """
    joblibによる圧縮付きシリアライズ

    Parameters:
    -----------
    compress : int, default=3
        圧縮レベル（0-9）
    """

    def __init__(self, compress: int = 3):
        if compress < 0 or compress > 9:
            raise ConfigurationError(f"Compression level must be between 0 and 9, {compress} given.")

        self.compress = compress

    def serialize(self, model):
        buffer = io.BytesIO()

        joblib.dump(model, buffer, compress=self.compress)

        return buffer.getvalue()

    def unserialize(self, data):
        return joblib.load(io.BytesIO(data))

    def __repr__(self) -> str:
        return f"Joblib(compress={self.compress})"
