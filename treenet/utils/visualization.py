"""
実験結果の保存・可視化ユーティリティモジュール

このモジュールは、学習曲線、特徴量重要度、混同行列、モデル比較の
プロットと、実験結果をディレクトリに保存するための関数を提供します。
"""

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns
import os
import json
from typing import Any, Dict, List, Optional, Sequence
import datetime


def create_results_directory(base_dir: str = "results") -> str:
    """
    実験結果を保存するディレクトリを作成

    Parameters:
    -----------
    base_dir : str, default="results"
        基本ディレクトリ名

    Returns:
    --------
    results_dir : str
        作成された結果ディレクトリのパス
    """
    # タイムスタンプを含むディレクトリ名を生成
    timestamp = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
    results_dir = os.path.join(base_dir, f"experiment_{timestamp}")

    os.makedirs(results_dir, exist_ok=True)

    # サブディレクトリを作成
    os.makedirs(os.path.join(results_dir, "figures"), exist_ok=True)
    os.makedirs(os.path.join(results_dir, "raw_data"), exist_ok=True)

    return results_dir


def _to_serializable(value: Any) -> Any:
    if isinstance(value, np.ndarray):
        return value.tolist()

    if isinstance(value, np.generic):
        return value.item()

    if isinstance(value, dict):
        return {str(k): _to_serializable(v) for k, v in value.items()}

    if isinstance(value, (list, tuple)):
        return [_to_serializable(v) for v in value]

    return value


def save_results_json(results: Dict, path: str) -> None:
    """
    結果をJSONファイルに保存（numpyの値はPythonの値に変換）

    Parameters:
    -----------
    results : dict
        保存する結果
    path : str
        保存先のパス
    """
    with open(path, 'w') as f:
        json.dump(_to_serializable(results), f, indent=2)


def save_experiment_config(config: Dict, results_dir: str) -> None:
    """
    実験設定を保存

    Parameters:
    -----------
    config : dict
        実験設定
    results_dir : str
        結果ディレクトリのパス
    """
    save_results_json(config, os.path.join(results_dir, "experiment_config.json"))


def plot_training_curve(steps: Sequence[float],
                        scores: Optional[Sequence[float]] = None,
                        title: str = "Training Curve",
                        save_path: Optional[str] = None) -> None:
    """
    エポックごとの損失（と検証スコア）をプロット

    Parameters:
    -----------
    steps : sequence of float
        エポックごとの学習損失
    scores : sequence of float, optional
        エポックごとの検証スコア
    title : str, default="Training Curve"
        プロットのタイトル
    save_path : str, optional
        保存先のパス
    """
    epochs = np.arange(1, len(steps) + 1)

    fig, ax1 = plt.subplots(figsize=(10, 6))

    ax1.plot(epochs, steps, color='tab:blue', label='loss')
    ax1.set_xlabel('Epoch')
    ax1.set_ylabel('Loss')

    if scores:
        ax2 = ax1.twinx()
        ax2.plot(np.arange(1, len(scores) + 1), scores, color='tab:orange', label='score')
        ax2.set_ylabel('Validation Score')

    ax1.set_title(title)
    ax1.grid(True, linestyle='--', alpha=0.7)
    fig.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=300, bbox_inches='tight')

    plt.close(fig)


def plot_feature_importance(importances: Sequence[float],
                            feature_names: Optional[List[str]] = None,
                            top_n: int = 20,
                            title: str = "Feature Importance",
                            save_path: Optional[str] = None) -> None:
    """
    特徴量重要度を棒グラフでプロット

    Parameters:
    -----------
    importances : sequence of float
        特徴量重要度
    feature_names : list of str, optional
        特徴量名（省略時は列番号）
    top_n : int, default=20
        表示する上位の特徴量の数
    title : str, default="Feature Importance"
        プロットのタイトル
    save_path : str, optional
        保存先のパス
    """
    importances = np.asarray(importances, dtype=float)

    if feature_names is None:
        feature_names = [f"feature_{i}" for i in range(len(importances))]

    df = pd.DataFrame({'feature': feature_names, 'importance': importances})
    df = df.sort_values('importance', ascending=False).head(top_n)

    plt.figure(figsize=(10, max(4, len(df) * 0.4)))
    sns.barplot(data=df, x='importance', y='feature', color='tab:blue')
    plt.title(title)
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=300, bbox_inches='tight')

    plt.close()


def plot_confusion_matrix(predictions: Sequence[Any],
                          labels: Sequence[Any],
                          title: str = "Confusion Matrix",
                          save_path: Optional[str] = None) -> pd.DataFrame:
    """
    混同行列をヒートマップでプロット

    Parameters:
    -----------
    predictions : sequence
        予測クラス
    labels : sequence
        正解クラス
    title : str, default="Confusion Matrix"
        プロットのタイトル
    save_path : str, optional
        保存先のパス

    Returns:
    --------
    matrix : pandas.DataFrame
        行が正解クラス、列が予測クラスの件数表
    """
    matrix = pd.crosstab(
        pd.Series(list(labels), name='Actual'),
        pd.Series(list(predictions), name='Predicted')
    )

    plt.figure(figsize=(8, 6))
    sns.heatmap(matrix, annot=True, fmt="d", cmap="YlGnBu")
    plt.title(title)
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=300, bbox_inches='tight')

    plt.close()

    return matrix


def plot_performance_comparison(results: Dict,
                                metric: str = 'score',
                                title: str = "Model Performance Comparison",
                                save_path: Optional[str] = None) -> pd.DataFrame:
    """
    データセットごとのモデル性能をヒートマップでプロット

    Parameters:
    -----------
    results : dict
        {データセット名: {'models': {モデル名: {指標名: 値}}}}
    metric : str, default='score'
        比較する評価指標
    title : str, default="Model Performance Comparison"
        プロットのタイトル
    save_path : str, optional
        保存先のパス

    Returns:
    --------
    df : pandas.DataFrame
        行がデータセット、列がモデルの指標値
    """
    dataset_names = list(results.keys())
    model_names = list(results[dataset_names[0]]['models'].keys())

    data = {}
    for model_name in model_names:
        data[model_name] = [results[dataset]['models'][model_name][metric]
                            for dataset in dataset_names]

    df = pd.DataFrame(data, index=dataset_names)

    plt.figure(figsize=(12, 8))
    sns.heatmap(df, annot=True, fmt=".4f", cmap="YlGnBu")
    plt.title(title)
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=300, bbox_inches='tight')

    plt.close()

    return df
