"""
Unit tests for the batch reader and the lock-step pair iteration.
"""

import h5py
import numpy as np
import pytest
from hypothesis import given, settings, strategies as st

from utils import batched, batched_pairs
from tests.conftest import CountingArray


class TestBatched:

    @given(total=st.integers(min_value=0, max_value=300), batch_size=st.integers(min_value=1, max_value=64))
    @settings(max_examples=200, deadline=None)
    def test_chunks_cover_every_row_once_in_order(self, total, batch_size):
        data = np.arange(total * 3).reshape(total, 3)
        chunks = list(batched(data, batch_size))

        lengths = [len(c) for c in chunks]
        assert sum(lengths) == total
        assert all(n <= batch_size for n in lengths)
        assert all(n == batch_size for n in lengths[:-1])
        if total % batch_size:
            assert lengths[-1] == total % batch_size
        if chunks:
            np.testing.assert_array_equal(np.concatenate(chunks), data)

    def test_empty_dataset_yields_nothing(self):
        assert list(batched(np.zeros((0, 4)), 8)) == []

    def test_one_bounded_read_per_chunk(self):
        data = CountingArray(np.ones((2500, 2)))
        for _ in batched(data, 1024):
            pass
        assert data.reads == [1024, 1024, 452]

    def test_lazy_until_iterated(self):
        data = CountingArray(np.ones((10, 2)))
        gen = batched(data, 4)
        assert data.reads == []
        next(gen)
        assert data.reads == [4]

    def test_restarts_on_each_call(self):
        data = np.arange(10)
        first = [c.tolist() for c in batched(data, 4)]
        second = [c.tolist() for c in batched(data, 4)]
        assert first == second == [[0, 1, 2, 3], [4, 5, 6, 7], [8, 9]]

    @pytest.mark.parametrize("batch_size", [0, -3])
    def test_rejects_non_positive_batch_size(self, batch_size):
        with pytest.raises(ValueError):
            list(batched(np.ones((3, 2)), batch_size))

    def test_reads_hdf5_slices(self, write_h5):
        path = write_h5("features.h5", {"data": np.arange(14, dtype=np.float32).reshape(7, 2)})
        with h5py.File(path, "r") as f:
            chunks = list(batched(f["data"], 3))
        assert [c.shape for c in chunks] == [(3, 2), (3, 2), (1, 2)]
        assert chunks[2].tolist() == [[12.0, 13.0]]


class TestBatchedPairs:

    def test_same_boundaries(self):
        features = np.arange(20).reshape(10, 2)
        items = np.arange(10) % 3
        pairs = list(batched_pairs(features, items, 4))
        assert [(len(f), len(i)) for f, i in pairs] == [(4, 4), (4, 4), (2, 2)]
        np.testing.assert_array_equal(pairs[1][1], items[4:8])

    @pytest.mark.parametrize("n_items", [9, 11, 0])
    def test_length_mismatch_fails_before_reading(self, n_items):
        features = CountingArray(np.ones((10, 2)))
        with pytest.raises(ValueError, match="rows"):
            batched_pairs(features, np.zeros(n_items), 4)
        assert features.reads == []
