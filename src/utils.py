import os
import h5py
import numpy as np

def ensure_dir(path):
    os.makedirs(path, exist_ok=True)

def ensure_parent_dir(path):
    parent = os.path.dirname(os.fspath(path))
    if parent:
        ensure_dir(parent)

def status(tag, msg):
    print(f"[{tag}] {msg}", flush=True)

# hdf5

def open_dataset(f, name, ndim=None):
    """
    Look up `name` in an open h5py file and optionally check its rank.
    A missing dataset raises KeyError naming both the file and the path.
    """
    if name not in f:
        raise KeyError(f"dataset '{name}' not found in {f.filename}")
    dset = f[name]
    if not isinstance(dset, h5py.Dataset):
        raise ValueError(f"'{name}' in {f.filename} is a group, not a dataset")
    if ndim is not None and dset.ndim != ndim:
        raise ValueError(f"dataset '{name}' in {f.filename} must be {ndim}-D, got shape {dset.shape}")
    return dset

def write_dataset(f, name, data, dtype=None, attrs=None):
    """
    Contiguous, uncompressed dataset (no chunking, no filters).
    """
    dset = f.create_dataset(name, data=data, dtype=dtype)
    for key, value in (attrs or {}).items():
        dset.attrs[key] = value
    return dset

# batching

def _num_rows(dset):
    shape = getattr(dset, "shape", None)
    if shape is not None:
        return int(shape[0]) if len(shape) else 0
    return len(dset)

def batched(dset, batch_size):
    """
    Yields consecutive slices dset[begin:end] along the first axis.

    Every chunk has `batch_size` rows except the last, which holds the
    remainder when the row count is not a multiple of `batch_size`. An empty
    dataset yields nothing. Each chunk is a single read from the backing store,
    so only one batch is ever held in memory. Calling again starts over.
    """
    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    total = _num_rows(dset)
    nbatches = total // batch_size + (1 if total % batch_size else 0)

    for i in range(nbatches):
        begin = i * batch_size
        end = min(begin + batch_size, total)
        yield dset[begin:end]

def batched_pairs(features, item_ids, batch_size):
    """
    Lock-step batches of (features, item_ids) sharing the same chunk
    boundaries. Both sources must have the same number of rows.
    """
    n_feat, n_ids = _num_rows(features), _num_rows(item_ids)
    if n_feat != n_ids:
        raise ValueError(f"features have {n_feat} rows but item ids have {n_ids}")
    return zip(batched(features, batch_size), batched(item_ids, batch_size))

# distances

def squared_norms(C):
    """
    Row-wise squared L2 norms of C as a 1 x K row vector.
    """
    return np.sum(C * C, axis=1, keepdims=True).T

def euclidean_d(X, C, C2=None):
    """
    X = a batch of feature vectors
    X has the dimension of N x D
        - N the number of feature vectors in the batch
        - D the number of features in a feature vector

    C = the codebook
    C has the dimension K x D
        - K the number of centroids in the codebook
        - D the number of features

    C2 = optional precomputed squared_norms(C), so a fixed codebook
    only pays for it once

    It returns the N x K matrix of squared euclidean distances between
    every feature vector and every centroid
    """
    if C2 is None:
        C2 = squared_norms(C)
    X2 = np.sum(X * X, axis=1, keepdims=True)
    D2 = X2 + C2 - 2.0 * (X @ C.T)
    # cancellation can leave tiny negatives
    return np.maximum(D2, 0.0)
