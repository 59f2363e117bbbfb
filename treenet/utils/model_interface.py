"""
モデルインターフェース統一ベンチマーク用モジュール

このモジュールは、共通の Estimator インターフェース（train / predict）を
持つ学習器の学習時間・予測時間・評価スコアを計測して比較するための
ユーティリティを提供します。
"""

import time
from typing import Dict, Optional

import matplotlib.pyplot as plt
import pandas as pd
from sklearn.base import clone

from ..cross_validation.metrics import Metric, check_metric_compatible
from ..data.dataset import Labeled
from ..models.base import check_labeled


def benchmark_estimator(estimator, training: Labeled, testing: Labeled, metric: Metric) -> Dict:
    """
    学習器を訓練してテストデータで評価

    Parameters:
    -----------
    estimator : Estimator
        評価する学習器（複製して訓練するため元の学習器は変更されない）
    training : Labeled
        訓練データ
    testing : Labeled
        テストデータ
    metric : Metric
        評価指標

    Returns:
    --------
    results : dict
        学習器名、学習時間、予測時間、スコア
    """
    check_metric_compatible(estimator, metric)
    check_labeled(testing)

    model = clone(estimator)

    # 学習時間を計測
    start_time = time.time()
    model.train(training)
    train_time = time.time() - start_time

    # 予測時間を計測
    start_time = time.time()
    predictions = model.predict(testing)
    predict_time = time.time() - start_time

    return {
        'estimator': type(estimator).__name__,
        'train_time': train_time,
        'predict_time': predict_time,
        'score': metric.score(predictions, testing.labels)
    }


def compare_estimators(estimators: Dict[str, object], training: Labeled, testing: Labeled,
                       metric: Metric, verbose: bool = False) -> pd.DataFrame:
    """
    複数の学習器を同じデータで比較

    Parameters:
    -----------
    estimators : dict
        {表示名: 学習器}
    training : Labeled
        訓練データ
    testing : Labeled
        テストデータ
    metric : Metric
        評価指標
    verbose : bool, default=False
        Trueなら各学習器の結果を表示

    Returns:
    --------
    results : pandas.DataFrame
        行が学習器、列が train_time / predict_time / score
    """
    rows = {}

    for name, estimator in estimators.items():
        if verbose:
            print(f"Testing {name}...")

        result = benchmark_estimator(estimator, training, testing, metric)

        rows[name] = {
            'train_time': result['train_time'],
            'predict_time': result['predict_time'],
            'score': result['score']
        }

        if verbose:
            print(f"  Train time: {result['train_time']:.4f}s")
            print(f"  Predict time: {result['predict_time']:.4f}s")
            print(f"  Score: {result['score']:.6f}")

    return pd.DataFrame.from_dict(rows, orient='index')


def plot_comparison_results(results: pd.DataFrame, save_path: Optional[str] = None) -> None:
    """
    比較結果をプロット

    Parameters:
    -----------
    results : pandas.DataFrame
        compare_estimators の結果
    save_path : str, optional
        保存先のパス
    """
    model_names = [str(name) for name in results.index]

    fig, axes = plt.subplots(1, 3, figsize=(15, 5))

    # 訓練時間
    axes[0].bar(model_names, results['train_time'])
    axes[0].set_title('Training Time (s)')
    axes[0].set_ylabel('Time (s)')

    # 予測時間
    axes[1].bar(model_names, results['predict_time'])
    axes[1].set_title('Prediction Time (s)')
    axes[1].set_ylabel('Time (s)')

    # スコア
    axes[2].bar(model_names, results['score'])
    axes[2].set_title('Score')
    axes[2].set_ylabel('Score')

    for ax in axes:
        ax.tick_params(axis='x', rotation=30)

    plt.tight_layout()

    if save_path:
        plt.savefig(save_path)

    plt.close(fig)
