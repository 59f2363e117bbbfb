"""
テスト共通のフィクスチャ
"""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from treenet.data.dataset import Labeled
from treenet.data.generators import Agglomerate, Blob


@pytest.fixture
def blobs():
    """3クラスのガウス分布データ"""
    generator = Agglomerate({
        'red': Blob([255.0, 0.0, 0.0], 20.0),
        'green': Blob([0.0, 128.0, 0.0], 10.0),
        'blue': Blob([0.0, 0.0, 255.0], 30.0)
    })

    return generator.generate(150, np.random.RandomState(0))


@pytest.fixture
def clusters():
    """1次元で分離可能な2クラスのデータ"""
    samples = [[0.1], [0.4], [0.3], [0.2], [10.2], [10.5], [10.1], [10.3]]
    labels = ['a', 'a', 'a', 'a', 'b', 'b', 'b', 'b']

    return Labeled(samples, labels)


@pytest.fixture
def linear():
    """y = 2x の回帰データ"""
    return Labeled([[1.0], [2.0], [3.0]], [2.0, 4.0, 6.0])


@pytest.fixture
def regression():
    """ノイズ付きの線形回帰データ"""
    rng = np.random.RandomState(0)

    samples = rng.uniform(-3.0, 3.0, size=(120, 2))
    labels = 3.0 * samples[:, 0] - 1.0 * samples[:, 1] + rng.normal(scale=0.1, size=120)

    return Labeled(samples, labels.tolist())
