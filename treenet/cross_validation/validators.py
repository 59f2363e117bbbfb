"""
Cross Validators

Validators train fresh copies of an estimator on several train/test splits
of a labeled dataset and return the mean validation score. Every split is
submitted to a backend as a TrainAndValidate task.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

import numpy as np
from sklearn.base import clone
from sklearn.model_selection import KFold as _KFoldSplitter
from sklearn.model_selection import StratifiedKFold
from sklearn.utils import check_random_state

from ..backends import Backend, Serial, TrainAndValidate
from ..data.dataset import Labeled
from ..exceptions import ConfigurationError, PreconditionError
from ..models.base import check_labeled
from .metrics import Metric, check_metric_compatible

# 分割ごとに割り当てるシードの上限
MAX_SEED = np.iinfo(np.int32).max


class Validator(ABC):
    """
    交差検証の基底クラス

    Parameters:
    -----------
    backend : Backend, optional
        TrainAndValidate タスクを実行するバックエンド（デフォルトは Serial）
    random_state : int, RandomState or None, default=None
        分割に使う乱数シード
    """

    def __init__(self, backend: Optional[Backend] = None, random_state=None):
        if backend is not None and not isinstance(backend, Backend):
            raise ConfigurationError(f"Backend must be a Backend instance, {type(backend).__name__} given.")

        self.backend = backend if backend is not None else Serial()
        self.random_state = random_state

    @abstractmethod
    def _splits(self, dataset: Labeled, rng: np.random.RandomState) -> List[Tuple[Labeled, Labeled]]:
        """(学習データ, テストデータ) の組"""

    def test(self, estimator, dataset: Labeled, metric: Metric) -> float:
        """
        推定器を検証

        Parameters:
        -----------
        estimator : Estimator
            検証する学習器（分割ごとにコピーして訓練する）
        dataset : Labeled
            ラベル付きデータセット
        metric : Metric
            評価指標

        Returns:
        --------
        score : float
            平均スコア
        """
        check_metric_compatible(estimator, metric)

        dataset = check_labeled(dataset)

        rng = check_random_state(self.random_state)

        self.backend.flush()

        for training, testing in self._splits(dataset, rng):
            self.backend.enqueue(TrainAndValidate(clone(estimator), training, testing, metric))

        scores = self.backend.process()

        return float(np.mean(scores))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(backend={self.backend!r})"


class KFold(Validator):
    """
    K分割交差検証

    カテゴリラベルの場合は層化分割する

    Parameters:
    -----------
    k : int, default=5
        分割数
    """

    def __init__(self, k: int = 5, backend: Optional[Backend] = None, random_state=None):
        if k < 2:
            raise ConfigurationError(f"K must be greater than 1, {k} given.")

        super().__init__(backend=backend, random_state=random_state)

        self.k = k

    def _splits(self, dataset, rng):
        if dataset.num_rows < self.k:
            raise PreconditionError(f"Dataset must contain at least {self.k} samples, {dataset.num_rows} given.")

        seed = rng.randint(MAX_SEED)

        if dataset.label_type is not None and dataset.label_type.is_categorical():
            splitter = StratifiedKFold(n_splits=self.k, shuffle=True, random_state=seed)
            folds = splitter.split(dataset.samples, dataset.labels.astype(str))
        else:
            splitter = _KFoldSplitter(n_splits=self.k, shuffle=True, random_state=seed)
            folds = splitter.split(dataset.samples)

        return [(dataset.subset(train), dataset.subset(test)) for train, test in folds]

    def __repr__(self) -> str:
        return f"KFold(k={self.k}, backend={self.backend!r})"


class MonteCarlo(Validator):
    """
    ランダムな分割を繰り返す交差検証

    Parameters:
    -----------
    simulations : int, default=10
        分割の回数
    ratio : float, default=0.2
        テストデータの割合
    """

    def __init__(self, simulations: int = 10, ratio: float = 0.2, backend: Optional[Backend] = None,
                 random_state=None):
        if simulations < 1:
            raise ConfigurationError(f"Number of simulations must be greater than 0, {simulations} given.")

        if ratio <= 0.0 or ratio >= 1.0:
            raise ConfigurationError(f"Ratio must be between 0 and 1, {ratio} given.")

        super().__init__(backend=backend, random_state=random_state)

        self.simulations = simulations
        self.ratio = ratio

    def _splits(self, dataset, rng):
        stratify = dataset.label_type is not None and dataset.label_type.is_categorical()

        splits = []

        for _ in range(self.simulations):
            randomized = dataset.randomize(rng)

            if stratify:
                testing, training = randomized.stratified_split(self.ratio)
            else:
                testing, training = randomized.split(self.ratio)

            splits.append((training, testing))

        return splits

    def __repr__(self) -> str:
        return f"MonteCarlo(simulations={self.simulations}, ratio={self.ratio}, backend={self.backend!r})"


class LeavePOut(Validator):
    """
    連続するp個のサンプルを順にテストデータとする交差検証

    Parameters:
    -----------
    p : int, default=10
        テストデータのサンプル数
    """

    def __init__(self, p: int = 10, backend: Optional[Backend] = None, random_state=None):
        if p < 1:
            raise ConfigurationError(f"P must be greater than 0, {p} given.")

        super().__init__(backend=backend, random_state=random_state)

        self.p = p

    def _splits(self, dataset, rng):
        n = int(np.floor(dataset.num_rows / self.p + 0.5))

        indices = np.arange(dataset.num_rows)

        splits = []

        for i in range(n):
            mask = (indices >= i * self.p) & (indices < (i + 1) * self.p)

            splits.append((dataset.subset(indices[~mask]), dataset.subset(indices[mask])))

        return splits

    def __repr__(self) -> str:
        return f"LeavePOut(p={self.p}, backend={self.backend!r})"
