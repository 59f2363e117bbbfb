"""
Data Package

Datasets and synthetic data generators.
"""

from .dataset import DataType, Dataset, Labeled, Unlabeled
from .generators import Agglomerate, Blob, Circle

__all__ = [
    'DataType',
    'Dataset',
    'Labeled',
    'Unlabeled',
    'Agglomerate',
    'Blob',
    'Circle'
]
