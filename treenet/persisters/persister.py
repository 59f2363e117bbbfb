"""
Persisters

A persister stores and retrieves an opaque byte blob.
"""

import os
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime


class Persister(ABC):
    """永続化先の基底クラス"""

    @abstractmethod
    def save(self, data: bytes) -> None:
        """バイト列を保存"""

    @abstractmethod
    def load(self) -> bytes:
        """保存したバイト列を読み込む"""


class Filesystem(Persister):
    """
    ファイルに保存する永続化先

    Parameters:
    -----------
    path : str
        保存先のファイルパス
    history : bool, default=False
        Trueなら上書き前の既存ファイルを "<path>-<timestamp>.old" として残す
    """

    HISTORY_EXT = "old"

    def __init__(self, path: str, history: bool = False):
        self.path = str(path)
        self.history = history

    def save(self, data: bytes) -> None:
        directory = os.path.dirname(self.path) or os.curdir

        os.makedirs(directory, exist_ok=True)

        # 書き込みが完了するまで既存のファイルには触れない
        fd, temp_path = tempfile.mkstemp(dir=directory, prefix=".tmp-")

        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(data)

            if self.history and os.path.exists(self.path):
                timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")

                os.replace(self.path, f"{self.path}-{timestamp}.{self.HISTORY_EXT}")

            os.replace(temp_path, self.path)
        except BaseException:
            if os.path.exists(temp_path):
                os.remove(temp_path)

            raise

    def load(self) -> bytes:
        with open(self.path, 'rb') as f:
            return f.read()

    def __repr__(self) -> str:
        return f"Filesystem(path={self.path!r}, history={self.history})"
