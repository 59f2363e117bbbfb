"""
Backend Tasks

A task is a module level function together with its bound arguments so that
it can be pickled and shipped to a worker process.
"""

from typing import Any, Callable, Tuple


class Task:
    """
    遅延実行する関数呼び出し

    Attributes:
    -----------
    fn : callable
        実行する関数（ワーカーに送るためモジュールレベルの関数であること）
    args : tuple
        関数の引数
    """

    def __init__(self, fn: Callable[..., Any], args: Tuple = ()):
        self.fn = fn
        self.args = tuple(args)

    def compute(self) -> Any:
        return self.fn(*self.args)

    def __call__(self) -> Any:
        return self.compute()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({getattr(self.fn, '__name__', self.fn)!r})"


def _train_learner(estimator, dataset):
    estimator.train(dataset)

    return estimator


def _predict(estimator, dataset):
    return estimator.predict(dataset)


def _proba(estimator, dataset):
    return estimator.proba(dataset)


def _train_and_validate(estimator, training, testing, metric):
    estimator.train(training)

    predictions = estimator.predict(testing)

    return metric.score(predictions, testing.labels)


class TrainLearner(Task):
    """学習器を訓練し、訓練済みの学習器を返す"""

    def __init__(self, estimator, dataset):
        super().__init__(_train_learner, (estimator, dataset))


class Predict(Task):
    """予測値のリストを返す"""

    def __init__(self, estimator, dataset):
        super().__init__(_predict, (estimator, dataset))


class Proba(Task):
    """クラス確率のリストを返す"""

    def __init__(self, estimator, dataset):
        super().__init__(_proba, (estimator, dataset))


class TrainAndValidate(Task):
    """学習データで訓練し、テストデータのスコアを返す"""

    def __init__(self, estimator, training, testing, metric):
        super().__init__(_train_and_validate, (estimator, training, testing, metric))
