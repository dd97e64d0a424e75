import numpy as np
from sklearn.cluster import KMeans, kmeans_plusplus

DEFAULT_NITER = 25

def train(x, k, niter=None, random_state=None):
    """
    Lloyd k-means over the rows of x, seeded with k-means++.

    Each iteration is a single-step KMeans fit warm-started from the previous
    centroids, so the inertia (sum of squared distances to the closest
    centroid) can be recorded after every update. Stops after `niter`
    iterations or as soon as the centroids no longer move.

    Returns (centroids, objectives); objectives is empty when niter == 0,
    in which case the k-means++ seeds are returned as-is.
    """
    if niter is None:
        niter = DEFAULT_NITER
    if niter < 0:
        raise ValueError(f"niter must be non-negative, got {niter}")
    x = np.ascontiguousarray(x, dtype=np.float32)

    if niter == 0:
        centers, _ = kmeans_plusplus(x, n_clusters=k, random_state=random_state)
        return centers.astype(np.float32), []

    objectives = []
    init = "k-means++"
    centers = None
    for _ in range(niter):
        km = KMeans(n_clusters=k, init=init, n_init=1, max_iter=1,
                    random_state=random_state)
        km.fit(x)
        objectives.append(float(km.inertia_))

        new_centers = km.cluster_centers_.astype(np.float32)
        if centers is not None and np.array_equal(new_centers, centers):
            break
        centers = new_centers
        init = centers

    return centers, objectives
