"""
Synthetic Data Generators

Small generators for producing labeled test data: gaussian blobs, noisy
circles and an agglomerate that labels the output of several generators.
"""

from typing import Dict, Optional, Sequence

import numpy as np
from sklearn.utils import check_random_state

from ..exceptions import ConfigurationError
from .dataset import Labeled, Unlabeled


class Blob:
    """
    Gaussian blob around a center point

    Parameters:
    -----------
    center : sequence of float
        Center of the blob, one value per dimension
    stddev : float or sequence of float, default=1.0
        Standard deviation, global or per dimension
    """

    def __init__(self, center: Sequence[float] = (0.0, 0.0), stddev=1.0):
        center = np.asarray(center, dtype=float)

        if center.ndim != 1 or center.size < 1:
            raise ConfigurationError("Center must be a non-empty 1-D sequence of values.")

        stddev = np.broadcast_to(np.asarray(stddev, dtype=float), center.shape).copy()

        if np.any(stddev < 0.0):
            raise ConfigurationError("Standard deviation must be 0 or greater.")

        self.center = center
        self.stddev = stddev

    def dimensions(self) -> int:
        return self.center.size

    def generate(self, n: int, random_state=None) -> Unlabeled:
        rng = check_random_state(random_state)

        samples = rng.normal(size=(n, self.dimensions())) * self.stddev + self.center

        return Unlabeled(samples)


class Circle:
    """
    Noisy 2-D circle

    Parameters:
    -----------
    x, y : float
        Center of the circle
    scale : float, default=1.0
        Radius of the circle
    noise : float, default=0.1
        Standard deviation of the gaussian noise
    """

    def __init__(self, x: float = 0.0, y: float = 0.0, scale: float = 1.0, noise: float = 0.1):
        if scale < 0.0:
            raise ConfigurationError(f"Scale must be 0 or greater, {scale} given.")

        if noise < 0.0:
            raise ConfigurationError(f"Noise must be 0 or greater, {noise} given.")

        self.center = np.array([x, y], dtype=float)
        self.scale = scale
        self.noise = noise

    def dimensions(self) -> int:
        return 2

    def generate(self, n: int, random_state=None) -> Unlabeled:
        rng = check_random_state(random_state)

        theta = rng.uniform(0.0, 2.0 * np.pi, size=n)

        samples = np.column_stack([np.cos(theta), np.sin(theta)]) * self.scale
        samples += rng.normal(size=(n, 2)) * self.noise
        samples += self.center

        return Unlabeled(samples)


class Agglomerate:
    """
    Labeled mixture of generators

    Parameters:
    -----------
    generators : dict
        Mapping from class label to generator
    weights : sequence of float, optional
        Relative share of samples drawn from each generator
    """

    def __init__(self, generators: Dict[str, object], weights: Optional[Sequence[float]] = None):
        if not generators:
            raise ConfigurationError("Agglomerate must contain at least 1 generator.")

        dimensions = {generator.dimensions() for generator in generators.values()}

        if len(dimensions) > 1:
            raise ConfigurationError("Generators must all have the same dimensionality.")

        if weights is None:
            weights = np.ones(len(generators))

        weights = np.asarray(weights, dtype=float)

        if len(weights) != len(generators) or np.any(weights <= 0.0):
            raise ConfigurationError("There must be one positive weight per generator.")

        self.generators = dict(generators)
        self.weights = weights / np.sum(weights)

    def dimensions(self) -> int:
        return next(iter(self.generators.values())).dimensions()

    def generate(self, n: int, random_state=None) -> Labeled:
        rng = check_random_state(random_state)

        counts = np.floor(self.weights * n).astype(int)
        counts[0] += n - np.sum(counts)

        samples = []
        labels = []

        for (label, generator), count in zip(self.generators.items(), counts):
            if count < 1:
                continue

            samples.append(generator.generate(count, rng).samples)
            labels.extend([label] * count)

        return Labeled(np.vstack(samples), labels)
