import numpy as np

class BagAccumulator:
    """
    Running bag-of-features histogram, one row per item and one column per
    vocabulary entry.

    Single-item mode (n_items=None) keeps a single row. Negative labels mean
    the assignment found no centroid and are skipped. Any other out-of-range
    label or item id is an error and leaves the histogram untouched.
    """

    def __init__(self, n_words, n_items=None):
        if n_words < 1:
            raise ValueError(f"vocabulary must have at least one word, got {n_words}")
        if n_items is not None and n_items < 0:
            raise ValueError(f"n_items must be non-negative, got {n_items}")
        self.n_words = int(n_words)
        self.n_items = n_items
        rows = 1 if n_items is None else int(n_items)
        self._bows = np.zeros((rows, self.n_words), dtype=np.uint32)

    @property
    def single_item(self):
        return self.n_items is None

    @property
    def bows(self):
        return self._bows

    @property
    def total(self):
        return int(self._bows.sum(dtype=np.int64))

    def add(self, labels, item_ids=None):
        labels = np.asarray(labels, dtype=np.int64).ravel()

        if self.single_item:
            if item_ids is not None:
                raise ValueError("item ids given to a single-item accumulator")
            items = np.zeros_like(labels)
        else:
            if item_ids is None:
                raise ValueError("multi-item accumulator needs item ids for every batch")
            items = np.asarray(item_ids)
            if items.size and items.dtype.kind not in "iu":
                raise ValueError(f"item ids must be integers, got dtype {items.dtype}")
            items = items.astype(np.int64).ravel()
            if items.shape[0] != labels.shape[0]:
                raise ValueError(f"{labels.shape[0]} labels but {items.shape[0]} item ids")

        keep = labels >= 0
        labels, items = labels[keep], items[keep]
        rows = self._bows.shape[0]

        bad = (labels >= self.n_words) | (items < 0) | (items >= rows)
        if bad.any():
            i = int(np.flatnonzero(bad)[0])
            if self.single_item:
                raise IndexError(f"invalid BoW index ({labels[i]})")
            raise IndexError(f"invalid BoW index ({items[i]}, {labels[i]})")

        if self.single_item:
            self._bows[0] += np.bincount(labels, minlength=self.n_words).astype(np.uint32)
        else:
            # unbuffered, so repeated (item, label) pairs within a batch all count
            np.add.at(self._bows, (items, labels), np.uint32(1))
        return int(labels.shape[0])
