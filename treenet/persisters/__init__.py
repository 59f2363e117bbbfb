"""
Model persistence: serializers, persisters and the PersistentModel wrapper
"""

from .serializers import Serializer, Native, Joblib
from .persister import Persister, Filesystem
from .persistent_model import PersistentModel

__all__ = [
    'Serializer',
    'Native',
    'Joblib',
    'Persister',
    'Filesystem',
    'PersistentModel',
]
