"""
学習器性能比較実験モジュール

このモジュールは、決定木、Extra-Tree、ランダムフォレスト、多層パーセプトロンの
性能を合成データ上で比較するための実験スクリプトを提供します。
"""

import os
from typing import Dict, Optional

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from ..cross_validation.metrics import Accuracy, Metric
from ..cross_validation.validators import KFold, Validator
from ..data.dataset import Labeled
from ..data.generators import Agglomerate, Blob, Circle
from ..models.mlp import MultilayerPerceptron
from ..models.neural_net.activations import ReLU
from ..models.neural_net.layers import Activation, Dense
from ..models.tree_components.decision_tree import ClassificationTree, ExtraTreeClassifier
from ..models.tree_components.random_forest import RandomForest
from ..utils.model_interface import benchmark_estimator
from ..utils.visualization import (
    create_results_directory,
    plot_performance_comparison,
    save_experiment_config,
    save_results_json
)


def default_estimators(random_state: int = 42) -> Dict[str, object]:
    """
    比較する学習器を作成

    Parameters:
    -----------
    random_state : int, default=42
        乱数シード

    Returns:
    --------
    estimators : dict
        {モデル名: 学習器}
    """
    return {
        'ClassificationTree': ClassificationTree(max_height=10, random_state=random_state),
        'ExtraTreeClassifier': ExtraTreeClassifier(max_height=10, random_state=random_state),
        'RandomForest': RandomForest(estimators=50, ratio=0.5, random_state=random_state),
        'MultilayerPerceptron': MultilayerPerceptron(
            hidden_layers=[Dense(32), Activation(ReLU())],
            epochs=100,
            random_state=random_state
        )
    }


def make_datasets(n_samples: int = 500, random_state: int = 42) -> Dict[str, Labeled]:
    """
    比較に使う合成データセットを生成

    Parameters:
    -----------
    n_samples : int, default=500
        サンプル数
    random_state : int, default=42
        乱数シード

    Returns:
    --------
    datasets : dict
        {データセット名: Labeled}
    """
    blobs = Agglomerate({
        'red': Blob([255.0, 0.0, 0.0], 20.0),
        'green': Blob([0.0, 128.0, 0.0], 10.0),
        'blue': Blob([0.0, 0.0, 255.0], 30.0)
    })

    circles = Agglomerate({
        'inner': Circle(0.0, 0.0, 1.0, 0.1),
        'outer': Circle(0.0, 0.0, 3.0, 0.2)
    })

    return {
        'blobs': blobs.generate(n_samples, random_state),
        'circles': circles.generate(n_samples, random_state)
    }


def run_model_comparison(dataset_name: str,
                         dataset: Labeled,
                         estimators: Optional[Dict[str, object]] = None,
                         validator: Optional[Validator] = None,
                         metric: Optional[Metric] = None,
                         hold_out: float = 0.2,
                         random_state: int = 42,
                         output_dir: str = "results") -> Dict:
    """
    学習器を1つのデータセットで比較

    交差検証のスコアに加えて、ホールドアウトで学習時間と予測時間を計測する

    Parameters:
    -----------
    dataset_name : str
        データセット名
    dataset : Labeled
        ラベル付きデータセット
    estimators : dict, optional
        {モデル名: 学習器}（省略時は default_estimators()）
    validator : Validator, optional
        交差検証の方法（省略時は KFold(5)）
    metric : Metric, optional
        評価指標（省略時は Accuracy()）
    hold_out : float, default=0.2
        時間計測に使うテストデータの割合
    random_state : int, default=42
        乱数シード
    output_dir : str, default="results"
        結果の出力ディレクトリ

    Returns:
    --------
    results : dict
        比較結果
    """
    os.makedirs(output_dir, exist_ok=True)

    if estimators is None:
        estimators = default_estimators(random_state)

    if validator is None:
        validator = KFold(5, random_state=random_state)

    if metric is None:
        metric = Accuracy()

    rng = np.random.RandomState(random_state)

    testing, training = dataset.randomize(rng).stratified_split(hold_out)

    results = {
        'dataset': dataset_name,
        'n_samples': dataset.num_rows,
        'n_features': dataset.num_columns,
        'metric': type(metric).__name__,
        'validator': repr(validator),
        'models': {}
    }

    for model_name, estimator in estimators.items():
        print(f"\nEvaluating {model_name} on {dataset_name}...")

        benchmark = benchmark_estimator(estimator, training, testing, metric)
        cv_score = validator.test(estimator, dataset, metric)

        results['models'][model_name] = {
            'train_time': benchmark['train_time'],
            'predict_time': benchmark['predict_time'],
            'score': benchmark['score'],
            'cv_score': cv_score
        }

        print(f"  Train time: {benchmark['train_time']:.4f}s")
        print(f"  Predict time: {benchmark['predict_time']:.4f}s")
        print(f"  Hold out score: {benchmark['score']:.6f}")
        print(f"  CV score: {cv_score:.6f}")

    save_results_json(results, os.path.join(output_dir, f"{dataset_name}_comparison.json"))

    frame = pd.DataFrame.from_dict(results['models'], orient='index')
    frame.to_csv(os.path.join(output_dir, f"{dataset_name}_comparison.csv"))

    plot_comparison_results(results, os.path.join(output_dir, f"{dataset_name}_comparison.png"))

    return results


def plot_comparison_results(results: Dict, save_path: Optional[str] = None) -> None:
    """
    比較結果をプロット

    Parameters:
    -----------
    results : dict
        run_model_comparison の結果
    save_path : str, optional
        保存先のパス
    """
    model_names = list(results['models'].keys())

    train_times = [results['models'][model]['train_time'] for model in model_names]
    predict_times = [results['models'][model]['predict_time'] for model in model_names]
    scores = [results['models'][model]['score'] for model in model_names]
    cv_scores = [results['models'][model]['cv_score'] for model in model_names]

    fig, axes = plt.subplots(2, 2, figsize=(14, 10))

    fig.suptitle(f"Model Comparison on {results['dataset']} Dataset", fontsize=16)

    sns.barplot(x=model_names, y=train_times, ax=axes[0, 0])
    axes[0, 0].set_title('Training Time (s)')
    axes[0, 0].set_ylabel('Time (s)')

    sns.barplot(x=model_names, y=predict_times, ax=axes[0, 1])
    axes[0, 1].set_title('Prediction Time (s)')
    axes[0, 1].set_ylabel('Time (s)')

    sns.barplot(x=model_names, y=scores, ax=axes[1, 0])
    axes[1, 0].set_title(f"Hold Out {results['metric']}")
    axes[1, 0].set_ylabel(results['metric'])

    sns.barplot(x=model_names, y=cv_scores, ax=axes[1, 1])
    axes[1, 1].set_title(f"Cross Validated {results['metric']}")
    axes[1, 1].set_ylabel(results['metric'])

    for ax in axes.flat:
        ax.tick_params(axis='x', rotation=20)

    plt.tight_layout()
    plt.subplots_adjust(top=0.9)

    if save_path:
        plt.savefig(save_path, dpi=300, bbox_inches='tight')

    plt.close(fig)


def run_all_experiments(output_dir: str = "results", n_samples: int = 500,
                        random_state: int = 42) -> Dict:
    """
    すべての実験を実行

    Parameters:
    -----------
    output_dir : str, default="results"
        結果の出力ディレクトリ
    n_samples : int, default=500
        各データセットのサンプル数
    random_state : int, default=42
        乱数シード

    Returns:
    --------
    all_results : dict
        {データセット名: 比較結果}
    """
    results_dir = create_results_directory(output_dir)

    save_experiment_config({
        'n_samples': n_samples,
        'random_state': random_state,
        'estimators': {name: repr(estimator) for name, estimator in default_estimators(random_state).items()}
    }, results_dir)

    all_results = {}

    for dataset_name, dataset in make_datasets(n_samples, random_state).items():
        print(f"\n\n{'='*50}")
        print(f"Running experiment: {dataset_name}")
        print(f"{'='*50}")

        all_results[dataset_name] = run_model_comparison(
            dataset_name,
            dataset,
            random_state=random_state,
            output_dir=os.path.join(results_dir, "raw_data")
        )

    plot_performance_comparison(
        all_results,
        metric='cv_score',
        save_path=os.path.join(results_dir, "figures", "performance_comparison.png")
    )

    plot_performance_comparison(
        all_results,
        metric='train_time',
        title="Model Training Time Comparison",
        save_path=os.path.join(results_dir, "figures", "training_time_comparison.png")
    )

    return all_results


if __name__ == "__main__":
    run_all_experiments()
