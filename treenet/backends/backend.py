"""
Task Backends

Backends queue deferred tasks and run them all at once when process() is
called. Results always come back in the order the tasks were enqueued.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional, Tuple

from joblib import Parallel, delayed

from ..exceptions import ConfigurationError
from .tasks import Task


def _compute(task: Task) -> Any:
    return task.compute()


class Backend(ABC):
    """タスクバックエンドの基底クラス"""

    def __init__(self):
        self.queue: List[Tuple[Task, Optional[Callable[[Any], None]]]] = []

    def enqueue(self, task: Task, after: Optional[Callable[[Any], None]] = None) -> None:
        """
        タスクをキューに追加

        Parameters:
        -----------
        task : Task
            実行するタスク
        after : callable, optional
            結果を受け取るコールバック（結果の順に呼ばれる）
        """
        self.queue.append((task, after))

    def process(self) -> List[Any]:
        """
        キュー内のすべてのタスクを実行（完了までブロック）

        タスクが例外を送出した場合、キューを空にしてからそのまま再送出する

        Returns:
        --------
        results : list
            キューに追加した順の結果
        """
        queue, self.queue = self.queue, []

        if not queue:
            return []

        results = self._run([task for task, _ in queue])

        for (_, after), result in zip(queue, results):
            if after is not None:
                after(result)

        return results

    @abstractmethod
    def _run(self, tasks: List[Task]) -> List[Any]:
        """タスクを実行し、順序を保った結果を返す"""

    def flush(self) -> None:
        """キューを空にする"""
        self.queue = []

    def __len__(self) -> int:
        return len(self.queue)

    def __getstate__(self):
        state = self.__dict__.copy()
        state['queue'] = []

        return state


class Serial(Backend):
    """呼び出し元のプロセスで順番にタスクを実行"""

    def _run(self, tasks: List[Task]) -> List[Any]:
        return [_compute(task) for task in tasks]

    def __repr__(self) -> str:
        return "Serial()"


class Joblib(Backend):
    """
    joblibでワーカープロセスにタスクを分散

    Parameters:
    -----------
    n_jobs : int, default=-1
        ワーカー数（-1なら全コア）
    prefer : str, default="processes"
        joblibのバックエンドの種類（"processes" または "threads"）
    verbose : int, default=0
        joblibの進捗表示レベル
    """

    def __init__(self, n_jobs: int = -1, prefer: str = "processes", verbose: int = 0):
        super().__init__()

        if n_jobs == 0:
            raise ConfigurationError("Number of workers must not be 0.")

        if prefer not in ("processes", "threads"):
            raise ConfigurationError(f"Prefer must be 'processes' or 'threads', {prefer!r} given.")

        self.n_jobs = n_jobs
        self.prefer = prefer
        self.verbose = verbose

    def _run(self, tasks: List[Task]) -> List[Any]:
        return Parallel(n_jobs=self.n_jobs, prefer=self.prefer, verbose=self.verbose)(
            delayed(_compute)(task) for task in tasks
        )

    def __repr__(self) -> str:
        return f"Joblib(n_jobs={self.n_jobs}, prefer={self.prefer!r})"
