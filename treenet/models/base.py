"""
推定器基底クラスモジュール

このモジュールは、すべての推定器（決定木、ランダムフォレスト、ニューラルネット）
が継承する抽象基底クラスと、能力フラグ・入力チェック用の関数を提供します。
"""

from abc import ABC, abstractmethod
from enum import Enum, Flag, auto
from typing import Any, Dict, List, Tuple

from sklearn.base import BaseEstimator

from ..data.dataset import DataType, Dataset, Labeled
from ..exceptions import (
    ConfigurationError,
    EmptyDatasetError,
    IncompatibleDataError,
    LabeledDatasetRequired,
)


class EstimatorType(Enum):
    """推定器の種類"""

    CLASSIFIER = "classifier"
    REGRESSOR = "regressor"

    def __str__(self) -> str:
        return self.value


class Capability(Flag):
    """
    推定器の能力フラグ

    TRAINABLE : 学習可能
    ONLINE : 部分学習（partial）が可能
    PROBABILISTIC : 確率を出力できる
    RANKING : 特徴量重要度を出力できる
    PARALLEL : バックエンドを差し替えて並列実行できる
    """

    NONE = 0
    TRAINABLE = auto()
    ONLINE = auto()
    PROBABILISTIC = auto()
    RANKING = auto()
    PARALLEL = auto()


class Estimator(BaseEstimator, ABC):
    """
    推定器の抽象基底クラス

    ハイパーパラメータはコンストラクタ引数として受け取り、その場で検証します。
    scikit-learnの BaseEstimator を継承しているので、get_params / set_params /
    sklearn.base.clone が使えます。clone は学習済み状態を持たない新しい
    インスタンスを同じハイパーパラメータで作成します。

    Attributes:
    -----------
    estimator_type : EstimatorType
        推定器の種類
    capabilities : Capability
        推定器の能力フラグ
    compatibility : tuple of DataType
        入力として扱える列のデータ型
    """

    estimator_type = EstimatorType.CLASSIFIER
    capabilities = Capability.NONE
    compatibility: Tuple[DataType, ...] = (DataType.CONTINUOUS,)

    def params(self) -> Dict[str, Any]:
        """
        ハイパーパラメータを取得

        Returns:
        --------
        params : dict
            ハイパーパラメータ
        """
        return self.get_params(deep=False)

    def has(self, capability: Capability) -> bool:
        """指定した能力をすべて持っているかどうか"""
        return (self.capabilities & capability) == capability

    @abstractmethod
    def trained(self) -> bool:
        """学習済みかどうか"""

    @abstractmethod
    def predict(self, dataset: Dataset) -> List[Any]:
        """
        予測を実行

        Parameters:
        -----------
        dataset : Dataset
            入力データセット

        Returns:
        --------
        predictions : list
            予測値
        """


def require_capabilities(estimator: Any, capability: Capability, role: str = "Estimator") -> None:
    """
    推定器が指定した能力を持っているかを構成時にチェック

    Parameters:
    -----------
    estimator : Estimator
        チェックする推定器
    capability : Capability
        必要な能力
    role : str, default="Estimator"
        エラーメッセージに使う役割名
    """
    if not isinstance(estimator, Estimator) or not estimator.has(capability):
        raise ConfigurationError(f"{role} must have the {capability} capability,"
                                 f" {type(estimator).__name__} given.")


def check_labeled(dataset: Dataset) -> Labeled:
    """学習用データセットがラベル付きかをチェック"""
    if not isinstance(dataset, Labeled):
        raise LabeledDatasetRequired("Learner requires a Labeled training set.")

    return dataset


def check_not_empty(dataset: Dataset) -> None:
    """データセットが空でないことをチェック"""
    if dataset.empty:
        raise EmptyDatasetError("Dataset must contain at least one sample.")


def check_samples_compatible(dataset: Dataset, estimator: Estimator) -> None:
    """サンプルの列型が推定器と互換かをチェック"""
    for column, data_type in enumerate(dataset.column_types):
        if data_type not in estimator.compatibility:
            supported = ", ".join(str(compatible) for compatible in estimator.compatibility)

            raise IncompatibleDataError(f"{type(estimator).__name__} is only compatible with {supported}"
                                        f" data types, {data_type} found in column {column}.")


def check_labels_compatible(dataset: Labeled, estimator: Estimator) -> None:
    """ラベルの型が推定器の種類と互換かをチェック"""
    if dataset.label_type is None:
        return

    if estimator.estimator_type is EstimatorType.CLASSIFIER and not dataset.label_type.is_categorical():
        raise IncompatibleDataError(f"{type(estimator).__name__} requires categorical labels,"
                                    f" {dataset.label_type} given.")

    if estimator.estimator_type is EstimatorType.REGRESSOR and not dataset.label_type.is_continuous():
        raise IncompatibleDataError(f"{type(estimator).__name__} requires continuous labels,"
                                    f" {dataset.label_type} given.")


def check_trainable(dataset: Dataset, estimator: Estimator) -> Labeled:
    """
    学習前のチェックをまとめて実行

    部分的な処理を行う前に、すべての前提条件を確認します。
    """
    dataset = check_labeled(dataset)

    check_not_empty(dataset)
    check_samples_compatible(dataset, estimator)
    check_labels_compatible(dataset, estimator)

    return dataset


def check_columns_match(dataset: Dataset, estimator: Estimator, column_types: List[DataType]) -> None:
    """
    予測データの列数と列型が学習時と一致するかをチェック

    Parameters:
    -----------
    dataset : Dataset
        予測に渡されたデータセット
    estimator : Estimator
        訓練済みの推定器
    column_types : list of DataType
        学習データの列型
    """
    if dataset.empty:
        return

    name = type(estimator).__name__

    if dataset.num_columns != len(column_types):
        raise IncompatibleDataError(f"{name} was trained on {len(column_types)} columns,"
                                    f" {dataset.num_columns} given.")

    for column, (data_type, trained_type) in enumerate(zip(dataset.column_types, column_types)):
        if data_type != trained_type:
            raise IncompatibleDataError(f"{name} was trained on {trained_type} data in column {column},"
                                        f" {data_type} given.")
