"""
Dataset Implementation

This module contains the in-memory dataset objects consumed by the tree
learners, the neural network and the cross validators. Samples are held in
a 2-D numpy array together with the data type of every column.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from sklearn.utils import check_random_state

from ..exceptions import IncompatibleDataError, PreconditionError


class DataType(Enum):
    """
    列のデータ型

    数値（int, float）は連続値、文字列はカテゴリ値として扱う
    """

    CONTINUOUS = "continuous"
    CATEGORICAL = "categorical"

    @classmethod
    def detect(cls, value: Any) -> 'DataType':
        """
        値からデータ型を判定

        Parameters:
        -----------
        value : any
            判定する値

        Returns:
        --------
        data_type : DataType
            データ型
        """
        if isinstance(value, (bool, np.bool_)):
            raise IncompatibleDataError(f"Boolean values are not supported, {value!r} given.")

        if isinstance(value, (int, float, np.integer, np.floating)):
            return cls.CONTINUOUS

        if isinstance(value, (str, np.str_)):
            return cls.CATEGORICAL

        raise IncompatibleDataError(f"Unsupported data type {type(value).__name__} for value {value!r}.")

    def is_continuous(self) -> bool:
        return self is DataType.CONTINUOUS

    def is_categorical(self) -> bool:
        return self is DataType.CATEGORICAL

    def __str__(self) -> str:
        return self.value


def _as_matrix(samples: Union[np.ndarray, Sequence[Sequence[Any]]], validate: bool) -> Tuple[np.ndarray, List[DataType]]:
    """
    サンプルを2次元配列に変換し、列の型を推定

    すべての列が連続値の場合はfloat配列、それ以外はobject配列になる
    """
    if isinstance(samples, np.ndarray) and samples.ndim == 2 and samples.dtype.kind in "fiu":
        matrix = samples.astype(float, copy=False)
        return matrix, [DataType.CONTINUOUS] * matrix.shape[1]

    rows = [list(row) for row in samples]

    if not rows:
        return np.empty((0, 0)), []

    n_columns = len(rows[0])
    types = [DataType.detect(value) for value in rows[0]]

    if validate:
        for i, row in enumerate(rows):
            if len(row) != n_columns:
                raise IncompatibleDataError(
                    f"Sample {i} has {len(row)} columns but {n_columns} were expected."
                )

            for column, value in enumerate(row):
                if DataType.detect(value) is not types[column]:
                    raise IncompatibleDataError(
                        f"Column {column} contains mixed data types,"
                        f" {types[column]} expected but {DataType.detect(value)} found in sample {i}."
                    )

    if all(data_type.is_continuous() for data_type in types):
        return np.asarray(rows, dtype=float).reshape(len(rows), n_columns), types

    matrix = np.empty((len(rows), n_columns), dtype=object)

    for i, row in enumerate(rows):
        matrix[i, :] = row

    for column, data_type in enumerate(types):
        if data_type.is_continuous():
            matrix[:, column] = [float(value) for value in matrix[:, column]]

    return matrix, types


class Dataset:
    """
    データセットの基底クラス

    Attributes:
    -----------
    samples : array-like, shape=(n_samples, n_features)
        サンプル
    column_types : list of DataType
        各列のデータ型
    """

    def __init__(self, samples: Optional[Union[np.ndarray, Sequence[Sequence[Any]]]] = None, validate: bool = True):
        if samples is None:
            samples = []

        self._samples, self._types = _as_matrix(samples, validate)

    @classmethod
    def _quick(cls, samples: np.ndarray, types: List[DataType], **kwargs) -> 'Dataset':
        dataset = cls.__new__(cls)
        dataset._samples = samples
        dataset._types = list(types)

        return dataset

    @property
    def samples(self) -> np.ndarray:
        return self._samples

    @property
    def column_types(self) -> List[DataType]:
        return list(self._types)

    @property
    def num_rows(self) -> int:
        return self._samples.shape[0]

    @property
    def num_columns(self) -> int:
        return len(self._types)

    @property
    def shape(self) -> Tuple[int, int]:
        return self.num_rows, self.num_columns

    @property
    def empty(self) -> bool:
        return self.num_rows == 0

    def column_type(self, column: int) -> DataType:
        return self._types[column]

    def column(self, column: int) -> np.ndarray:
        return self._samples[:, column]

    def sample(self, index: int) -> np.ndarray:
        return self._samples[index]

    def is_continuous(self) -> bool:
        """すべての列が連続値かどうか"""
        return all(data_type.is_continuous() for data_type in self._types)

    def subset(self, indices: Union[np.ndarray, Sequence[int]]) -> 'Dataset':
        """
        指定したインデックスの行からなるデータセットを作成

        Parameters:
        -----------
        indices : array-like of int
            行インデックス

        Returns:
        --------
        dataset : Dataset
            部分データセット
        """
        indices = np.asarray(indices, dtype=int)

        return self._take(indices)

    def _take(self, indices: np.ndarray) -> 'Dataset':
        samples = self._samples[indices]

        return self._quick(samples, self._types)

    def partition_mask(self, column: int, value: Any) -> np.ndarray:
        """分割値に対して左側に入る行のマスク"""
        values = self._samples[:, column]

        if self._types[column].is_continuous():
            return values.astype(float) <= value

        return values == value

    def partition_by_column(self, column: int, value: Any) -> Tuple['Dataset', 'Dataset']:
        """
        列の値でデータセットを2つに分割

        連続値は <= / >、カテゴリ値は == / != で振り分ける

        Parameters:
        -----------
        column : int
            分割に使用する列
        value : float or str
            分割値

        Returns:
        --------
        left, right : tuple of Dataset
            分割後のデータセット
        """
        mask = np.asarray(self.partition_mask(column, value), dtype=bool)

        return self._take(np.flatnonzero(mask)), self._take(np.flatnonzero(~mask))

    def randomize(self, random_state: Optional[np.random.RandomState] = None) -> 'Dataset':
        """シャッフルしたコピーを返す"""
        rng = check_random_state(random_state)

        return self._take(rng.permutation(self.num_rows))

    def batch(self, size: int = 50) -> List['Dataset']:
        """
        データセットをバッチに分割

        Parameters:
        -----------
        size : int, default=50
            バッチサイズ

        Returns:
        --------
        batches : list of Dataset
            バッチのリスト
        """
        if size < 1:
            raise PreconditionError(f"Batch size must be greater than 0, {size} given.")

        return [
            self._take(np.arange(offset, min(offset + size, self.num_rows)))
            for offset in range(0, self.num_rows, size)
        ]

    def split(self, ratio: float = 0.5) -> Tuple['Dataset', 'Dataset']:
        """先頭から ratio の割合で2つに分割"""
        if ratio <= 0.0 or ratio >= 1.0:
            raise PreconditionError(f"Ratio must be between 0 and 1, {ratio} given.")

        n = int(np.floor(ratio * self.num_rows))
        indices = np.arange(self.num_rows)

        return self._take(indices[:n]), self._take(indices[n:])

    def random_subset(self, k: int, random_state: Optional[np.random.RandomState] = None) -> 'Dataset':
        """非復元抽出でk行を選ぶ"""
        rng = check_random_state(random_state)

        if k > self.num_rows:
            raise PreconditionError(f"Cannot draw {k} samples without replacement from {self.num_rows} rows.")

        return self._take(rng.choice(self.num_rows, size=k, replace=False))

    def random_subset_with_replacement(self, k: int, random_state: Optional[np.random.RandomState] = None) -> 'Dataset':
        """
        復元抽出でk行を選ぶ

        Parameters:
        -----------
        k : int
            抽出する行数
        random_state : RandomState, optional
            乱数生成器

        Returns:
        --------
        subset : Dataset
            抽出したデータセット
        """
        if k < 1:
            raise PreconditionError(f"Subset must contain at least 1 sample, {k} given.")

        if self.empty:
            raise PreconditionError("Cannot sample from an empty dataset.")

        rng = check_random_state(random_state)

        return self._take(rng.randint(0, self.num_rows, size=k))

    def random_weighted_subset_with_replacement(
        self,
        k: int,
        weights: Union[np.ndarray, Sequence[float]],
        random_state: Optional[np.random.RandomState] = None
    ) -> 'Dataset':
        """
        重み付き復元抽出でk行を選ぶ

        Parameters:
        -----------
        k : int
            抽出する行数
        weights : array-like, shape=(n_samples,)
            各サンプルの重み（正規化は不要）
        random_state : RandomState, optional
            乱数生成器

        Returns:
        --------
        subset : Dataset
            抽出したデータセット
        """
        weights = np.asarray(weights, dtype=float)

        if len(weights) != self.num_rows:
            raise PreconditionError(
                f"The number of weights must equal the number of samples,"
                f" {self.num_rows} expected but {len(weights)} given."
            )

        if k < 1:
            raise PreconditionError(f"Subset must contain at least 1 sample, {k} given.")

        total = np.sum(weights)

        if total <= 0.0 or np.any(weights < 0.0):
            raise PreconditionError("Weights must be non-negative with a positive sum.")

        rng = check_random_state(random_state)

        return self._take(rng.choice(self.num_rows, size=k, replace=True, p=weights / total))

    def merge(self, other: 'Dataset') -> 'Dataset':
        """行方向に結合"""
        if other.empty:
            return self._take(np.arange(self.num_rows))

        if self.empty:
            return other._take(np.arange(other.num_rows))

        if self._types != other._types:
            raise IncompatibleDataError("Cannot merge datasets with different column types.")

        return self._quick(np.concatenate([self._samples, other._samples]), self._types)

    def __len__(self) -> int:
        return self.num_rows

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(rows={self.num_rows}, columns={self.num_columns})"


class Unlabeled(Dataset):
    """ラベルなしデータセット"""

    @classmethod
    def from_dataframe(cls, frame: pd.DataFrame) -> 'Unlabeled':
        """pandas DataFrameから作成"""
        return cls(frame.to_numpy(dtype=object).tolist())


class Labeled(Dataset):
    """
    ラベル付きデータセット

    Attributes:
    -----------
    labels : array-like, shape=(n_samples,)
        ラベル（文字列ならカテゴリ、数値なら連続値）
    """

    def __init__(
        self,
        samples: Optional[Union[np.ndarray, Sequence[Sequence[Any]]]] = None,
        labels: Optional[Sequence[Any]] = None,
        validate: bool = True
    ):
        super().__init__(samples, validate)

        labels = [] if labels is None else list(labels)

        if len(labels) != self.num_rows:
            raise PreconditionError(
                f"Number of samples and labels must be equal,"
                f" {self.num_rows} samples but {len(labels)} labels given."
            )

        self._labels, self._label_type = self._as_labels(labels, validate)

    @staticmethod
    def _as_labels(labels: List[Any], validate: bool) -> Tuple[np.ndarray, Optional[DataType]]:
        if not labels:
            return np.empty(0, dtype=object), None

        label_type = DataType.detect(labels[0])

        if validate:
            for i, label in enumerate(labels):
                if DataType.detect(label) is not label_type:
                    raise IncompatibleDataError(f"Label {i} has a different data type than the first label.")

        if label_type.is_continuous():
            return np.asarray(labels, dtype=float), label_type

        array = np.empty(len(labels), dtype=object)
        array[:] = labels

        return array, label_type

    @classmethod
    def _quick(cls, samples: np.ndarray, types: List[DataType], labels: Optional[np.ndarray] = None,
               label_type: Optional[DataType] = None) -> 'Labeled':
        dataset = super()._quick(samples, types)
        dataset._labels = labels if labels is not None else np.empty(0, dtype=object)
        dataset._label_type = label_type

        return dataset

    @classmethod
    def from_dataframe(cls, frame: pd.DataFrame, label_column: str) -> 'Labeled':
        """
        pandas DataFrameから作成

        Parameters:
        -----------
        frame : pandas.DataFrame
            特徴量とラベルを含むデータフレーム
        label_column : str
            ラベル列の名前

        Returns:
        --------
        dataset : Labeled
            ラベル付きデータセット
        """
        features = frame.drop(columns=[label_column])

        return cls(features.to_numpy(dtype=object).tolist(), frame[label_column].tolist())

    @property
    def labels(self) -> np.ndarray:
        return self._labels

    @property
    def label_type(self) -> Optional[DataType]:
        return self._label_type

    def label(self, index: int) -> Any:
        return self._labels[index]

    def possible_outcomes(self) -> List[Any]:
        """出現順に並べたユニークなラベル"""
        return list(dict.fromkeys(self._labels.tolist()))

    def _take(self, indices: np.ndarray) -> 'Labeled':
        samples = self._samples[indices]

        return self._quick(samples, self._types, self._labels[indices], self._label_type)

    def merge(self, other: 'Dataset') -> 'Labeled':
        if not isinstance(other, Labeled):
            raise PreconditionError("Can only merge with another Labeled dataset.")

        if other.empty:
            return self._take(np.arange(self.num_rows))

        if self.empty:
            return other._take(np.arange(other.num_rows))

        if self._types != other._types or self._label_type is not other._label_type:
            raise IncompatibleDataError("Cannot merge datasets with different column or label types.")

        return self._quick(
            np.concatenate([self._samples, other._samples]),
            self._types,
            np.concatenate([self._labels, other._labels]),
            self._label_type
        )

    def stratify(self) -> Dict[Any, 'Labeled']:
        """ラベルごとにデータセットを分割"""
        strata = {}

        for outcome in self.possible_outcomes():
            strata[outcome] = self._take(np.flatnonzero(self._labels == outcome))

        return strata

    def stratified_split(self, ratio: float = 0.5) -> Tuple['Labeled', 'Labeled']:
        """
        ラベルの比率を保ったまま2つに分割

        Parameters:
        -----------
        ratio : float, default=0.5
            左側に割り当てる割合

        Returns:
        --------
        left, right : tuple of Labeled
            分割後のデータセット
        """
        if ratio <= 0.0 or ratio >= 1.0:
            raise PreconditionError(f"Ratio must be between 0 and 1, {ratio} given.")

        left_indices = []
        right_indices = []

        for outcome in self.possible_outcomes():
            indices = np.flatnonzero(self._labels == outcome)
            n = int(np.floor(ratio * len(indices)))

            left_indices.extend(indices[:n])
            right_indices.extend(indices[n:])

        return self._take(np.asarray(left_indices, dtype=int)), self._take(np.asarray(right_indices, dtype=int))

    def __repr__(self) -> str:
        return f"Labeled(rows={self.num_rows}, columns={self.num_columns}, label_type={self._label_type})"
