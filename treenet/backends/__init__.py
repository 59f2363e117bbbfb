"""
Task backends for running training and inference jobs serially or in parallel
"""

from .backend import Backend, Joblib, Serial
from .tasks import Predict, Proba, Task, TrainAndValidate, TrainLearner

__all__ = [
    'Backend',
    'Serial',
    'Joblib',
    'Task',
    'TrainLearner',
    'Predict',
    'Proba',
    'TrainAndValidate',
]
