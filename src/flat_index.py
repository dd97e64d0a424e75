import numpy as np
import utils

"""
Exhaustive squared-L2 nearest-centroid search over a fixed codebook.
"""

SENTINEL = -1

class FlatL2Index:
    """
    Holds a codebook of K centroids of dimension d.

    The codebook is loaded once with add(); after that the index is only
    queried, so it can be shared by every batch of a run. assign() returns
    the id of the closest centroid per query row, or SENTINEL when there is
    nothing to match against (empty index, non-finite query).
    """

    def __init__(self, d):
        if d <= 0:
            raise ValueError(f"index dimension must be positive, got {d}")
        self.d = int(d)
        self._C = np.zeros((0, self.d), dtype=np.float32)
        self._C2 = np.zeros((1, 0), dtype=np.float32)
        self._loaded = False

    @property
    def ntotal(self):
        return self._C.shape[0]

    @property
    def centroids(self):
        view = self._C.view()
        view.flags.writeable = False
        return view

    def add(self, vectors):
        if self._loaded:
            raise RuntimeError("index already holds a codebook; it is read-only after the first add()")
        C = self._as_matrix(vectors)
        self._C = C
        self._C2 = utils.squared_norms(C)
        self._loaded = True

    def assign(self, queries):
        X = self._as_matrix(queries)
        n = X.shape[0]
        if self.ntotal == 0 or n == 0:
            return np.full(n, SENTINEL, dtype=np.int64)

        D2 = utils.euclidean_d(X, self._C, self._C2)
        labels = np.argmin(D2, axis=1).astype(np.int64)
        labels[~np.isfinite(D2).all(axis=1)] = SENTINEL
        return labels

    def _as_matrix(self, vectors):
        X = np.ascontiguousarray(vectors, dtype=np.float32)
        if X.ndim == 1 and X.size == 0:
            X = X.reshape(0, self.d)
        if X.ndim != 2 or X.shape[1] != self.d:
            raise ValueError(f"expected vectors of dimension {self.d}, got shape {X.shape}")
        return X

def build_index(codebook):
    """
    Index over the rows of a K x d codebook, loaded once.
    """
    codebook = np.asarray(codebook)
    if codebook.ndim != 2 or codebook.shape[0] < 1:
        raise ValueError(f"codebook must be a non-empty K x d matrix, got shape {codebook.shape}")
    index = FlatL2Index(codebook.shape[1])
    index.add(codebook)
    return index

def assign_batch(index, batch):
    """
    One centroid id per row of `batch`, in input order.
    """
    X = np.ascontiguousarray(batch, dtype=np.float32)
    if X.ndim != 2:
        raise ValueError(f"feature batch must be 2-D, got shape {X.shape}")
    labels = np.asarray(index.assign(X), dtype=np.int64).ravel()
    if labels.shape[0] != X.shape[0]:
        raise RuntimeError(f"assignment returned {labels.shape[0]} labels for {X.shape[0]} vectors")
    return labels
