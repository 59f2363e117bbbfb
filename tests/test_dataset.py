"""
データセットのテスト
"""

import numpy as np
import pandas as pd
import pytest

from treenet.data.dataset import DataType, Dataset, Labeled, Unlabeled
from treenet.data.generators import Agglomerate, Blob, Circle
from treenet.exceptions import ConfigurationError, IncompatibleDataError, PreconditionError


def test_column_types_are_inferred_from_first_row():
    dataset = Unlabeled([[1.0, 'red', 3], [2.5, 'blue', 4]])

    assert dataset.num_rows == 2
    assert dataset.num_columns == 3
    assert dataset.column_types == [DataType.CONTINUOUS, DataType.CATEGORICAL, DataType.CONTINUOUS]
    assert dataset.column_type(1) is DataType.CATEGORICAL


def test_ragged_rows_are_rejected():
    with pytest.raises(IncompatibleDataError):
        Unlabeled([[1.0, 2.0], [3.0]])


def test_mixed_column_types_are_rejected():
    with pytest.raises(IncompatibleDataError):
        Unlabeled([[1.0, 'a'], [2.0, 3.0]])


def test_label_count_must_match_samples():
    with pytest.raises(PreconditionError):
        Labeled([[1.0], [2.0]], ['a'])


def test_labels_types():
    categorical = Labeled([[1.0], [2.0]], ['a', 'b'])
    continuous = Labeled([[1.0], [2.0]], [0.5, 1.5])

    assert categorical.label_type is DataType.CATEGORICAL
    assert continuous.label_type is DataType.CONTINUOUS
    assert categorical.possible_outcomes() == ['a', 'b']


def test_partition_by_continuous_column():
    dataset = Labeled([[1.0], [5.0], [3.0], [7.0]], ['a', 'b', 'a', 'b'])

    left, right = dataset.partition_by_column(0, 3.0)

    assert left.column(0).tolist() == [1.0, 3.0]
    assert right.column(0).tolist() == [5.0, 7.0]
    assert left.labels.tolist() == ['a', 'a']
    assert right.labels.tolist() == ['b', 'b']


def test_partition_by_categorical_column():
    dataset = Labeled([['red'], ['blue'], ['red']], ['x', 'y', 'z'])

    left, right = dataset.partition_by_column(0, 'red')

    assert left.labels.tolist() == ['x', 'z']
    assert right.labels.tolist() == ['y']


def test_random_subset_with_replacement_keeps_rows_paired():
    dataset = Labeled([[float(i)] for i in range(10)], [f"c{i}" for i in range(10)])

    subset = dataset.random_subset_with_replacement(25, np.random.RandomState(1))

    assert subset.num_rows == 25

    for sample, label in zip(subset.samples, subset.labels):
        assert label == f"c{int(sample[0])}"


def test_weighted_subset_respects_zero_weights():
    dataset = Labeled([[0.0], [1.0], [2.0]], ['a', 'b', 'c'])

    subset = dataset.random_weighted_subset_with_replacement(50, [0.0, 1.0, 0.0], np.random.RandomState(0))

    assert set(subset.labels.tolist()) == {'b'}


def test_weighted_subset_requires_one_weight_per_sample():
    dataset = Labeled([[0.0], [1.0]], ['a', 'b'])

    with pytest.raises(PreconditionError):
        dataset.random_weighted_subset_with_replacement(5, [1.0])


def test_sampling_leaves_dataset_unchanged():
    dataset = Labeled([[1.0], [2.0], [3.0]], ['a', 'b', 'c'])
    before = dataset.samples.copy()

    dataset.randomize(np.random.RandomState(0))
    dataset.random_subset_with_replacement(10, np.random.RandomState(0))

    assert np.array_equal(dataset.samples, before)
    assert dataset.labels.tolist() == ['a', 'b', 'c']


def test_batch_and_split():
    dataset = Unlabeled([[float(i)] for i in range(10)])

    batches = dataset.batch(4)

    assert [batch.num_rows for batch in batches] == [4, 4, 2]

    left, right = dataset.split(0.3)

    assert left.num_rows == 3
    assert right.num_rows == 7


def test_stratified_split_keeps_class_ratio():
    dataset = Labeled([[float(i)] for i in range(20)], ['a'] * 10 + ['b'] * 10)

    left, right = dataset.stratified_split(0.2)

    assert left.labels.tolist().count('a') == 2
    assert left.labels.tolist().count('b') == 2
    assert right.num_rows == 16


def test_merge():
    first = Labeled([[1.0]], ['a'])
    second = Labeled([[2.0]], ['b'])

    merged = first.merge(second)

    assert merged.num_rows == 2
    assert merged.labels.tolist() == ['a', 'b']


def test_from_dataframe():
    frame = pd.DataFrame({'x': [1.0, 2.0], 'color': ['red', 'blue'], 'y': ['yes', 'no']})

    dataset = Labeled.from_dataframe(frame, 'y')

    assert dataset.column_types == [DataType.CONTINUOUS, DataType.CATEGORICAL]
    assert dataset.labels.tolist() == ['yes', 'no']


def test_empty_dataset():
    dataset = Dataset()

    assert dataset.empty
    assert dataset.num_columns == 0


def test_agglomerate_generates_labeled_data():
    generator = Agglomerate({'inner': Circle(scale=1.0), 'outer': Circle(scale=5.0)}, weights=[1, 3])

    dataset = generator.generate(100, random_state=0)

    assert isinstance(dataset, Labeled)
    assert dataset.num_rows == 100
    assert dataset.labels.tolist().count('outer') == 75


def test_agglomerate_requires_equal_dimensions():
    with pytest.raises(ConfigurationError):
        Agglomerate({'a': Blob([0.0, 0.0]), 'b': Blob([0.0, 0.0, 0.0])})
