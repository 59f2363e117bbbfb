"""
Impurity / Split Evaluator

This module contains the impurity measures used to score candidate splits
and the helpers that draw random split values for the Extra-Tree variant.
"""

from typing import Any, Callable, Sequence, Union

import numpy as np

from ...data.dataset import DataType, Labeled

# これ以下の不純度は完全な分割とみなす
IMPURITY_TOLERANCE = 1e-8


def entropy(labels: np.ndarray) -> float:
    """
    ラベル集合のエントロピーを計算

    Parameters:
    -----------
    labels : array-like, shape=(n_samples,)
        カテゴリラベル

    Returns:
    --------
    entropy : float
        -Σ p_c log(p_c)（サンプル数が1以下なら0）
    """
    n = len(labels)

    if n <= 1:
        return 0.0

    _, counts = np.unique(np.asarray(labels, dtype=object).astype(str), return_counts=True)
    proportions = counts / n

    return float(-np.sum(proportions * np.log(proportions)))


def variance(values: np.ndarray) -> float:
    """
    連続値ラベルの分散を計算

    Parameters:
    -----------
    values : array-like, shape=(n_samples,)
        連続値ラベル

    Returns:
    --------
    variance : float
        母分散（サンプル数が1以下なら0）
    """
    if len(values) <= 1:
        return 0.0

    return float(np.var(np.asarray(values, dtype=float)))


def split_impurity(groups: Sequence[Union[Labeled, np.ndarray]], impurity_fn: Callable[[np.ndarray], float]) -> float:
    """
    分割後のグループの不純度をサンプル数で重み付けして合計

    Parameters:
    -----------
    groups : sequence of Labeled or label arrays
        分割後のデータセット（通常は左右の2つ）
    impurity_fn : callable
        ラベル配列から不純度を計算する関数

    Returns:
    --------
    impurity : float
        重み付き不純度（小さいほど良い）
    """
    groups = [group.labels if isinstance(group, Labeled) else group for group in groups]

    n = sum(len(labels) for labels in groups)

    if n == 0:
        return 0.0

    impurity = 0.0

    for labels in groups:
        k = len(labels)

        if k <= 1:
            continue

        impurity += (k / n) * impurity_fn(labels)

    return impurity


def random_split_value(values: np.ndarray, data_type: DataType, rng: np.random.RandomState) -> Any:
    """
    Extra-Tree用に分割値を1つランダムに選ぶ

    連続値は観測範囲 [min, max] の一様乱数、カテゴリ値は観測されたカテゴリから一様に選ぶ

    Parameters:
    -----------
    values : array-like
        列の値
    data_type : DataType
        列のデータ型
    rng : RandomState
        乱数生成器

    Returns:
    --------
    value : float or str
        分割値
    """
    if data_type.is_continuous():
        values = values.astype(float)

        return float(rng.uniform(np.min(values), np.max(values)))

    categories = list(dict.fromkeys(values.tolist()))

    return categories[rng.randint(len(categories))]


def candidate_split_values(values: np.ndarray, data_type: DataType, bins: int) -> list:
    """
    CART用に分割値の候補を列挙

    連続値はユニーク値（多すぎる場合は分位点）、カテゴリ値は全カテゴリ

    Parameters:
    -----------
    values : array-like
        列の値
    data_type : DataType
        列のデータ型
    bins : int
        連続値の候補数の上限

    Returns:
    --------
    candidates : list
        分割値の候補
    """
    if data_type.is_categorical():
        return list(dict.fromkeys(values.tolist()))

    unique = np.unique(values.astype(float))

    if len(unique) > bins:
        unique = np.unique(np.quantile(unique, np.linspace(0.0, 1.0, bins + 1)))

    # 最大値で分割すると右側が空になる
    return unique[:-1].tolist()
