"""
Shared fixtures: synthetic feature sets and small HDF5 files written to tmp_path.
"""

import h5py
import numpy as np
import pytest


CLUSTER_CENTERS = np.array([[0, 0], [10, 0], [0, 10], [10, 10]], dtype=np.float32)


@pytest.fixture
def random_seed():
    return 42


@pytest.fixture
def four_clusters(random_seed):
    """100 2-D vectors, 25 tightly packed around each of the four centers."""
    rng = np.random.default_rng(random_seed)
    X = np.concatenate([c + rng.normal(scale=0.1, size=(25, 2)) for c in CLUSTER_CENTERS])
    return X.astype(np.float32)


@pytest.fixture
def codebook():
    return CLUSTER_CENTERS.copy()


@pytest.fixture
def write_h5(tmp_path):
    """Write {name: array} into a fresh HDF5 file and return its path."""

    def _write(filename, datasets):
        path = tmp_path / filename
        with h5py.File(path, "w") as f:
            for name, data in datasets.items():
                if isinstance(data, list) and data and isinstance(data[0], str):
                    f.create_dataset(name, data=data, dtype=h5py.string_dtype())
                else:
                    f.create_dataset(name, data=data)
        return path

    return _write


class CountingArray:
    """Array wrapper recording every slice read from it."""

    def __init__(self, data):
        self.data = np.asarray(data)
        self.reads = []

    @property
    def shape(self):
        return self.data.shape

    def __len__(self):
        return len(self.data)

    def __getitem__(self, key):
        chunk = self.data[key]
        self.reads.append(len(chunk))
        return chunk


class EveryThirdUnassigned:
    """
    Index stub labelling vector i with i % n_words, except every third vector
    (0, 3, 6, ...) which gets the -1 sentinel. Counts positions across calls.
    """

    def __init__(self, n_words):
        self.ntotal = n_words
        self.seen = 0
        self.calls = 0

    def assign(self, queries):
        n = len(queries)
        pos = np.arange(self.seen, self.seen + n)
        self.seen += n
        self.calls += 1
        labels = pos % self.ntotal
        labels[pos % 3 == 0] = -1
        return labels
