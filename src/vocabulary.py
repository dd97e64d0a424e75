import argparse, sys
import h5py
import numpy as np
import kmeans, utils

"""
Train the feature vocabulary (codebook) with k-means and store the centroids.
"""

def train_vocabulary(features, k, niter=None, random_state=None):
    """
    Cluster `features` into k centroids.

    Returns (centroids, loss) where loss is the last objective value reported
    by the clustering, or +inf when it reported none. Centroid order is kept
    exactly as the clustering returns it; it becomes the column order of every
    histogram quantized against this vocabulary.
    """
    centroids, objectives = kmeans.train(features, k, niter=niter, random_state=random_state)
    loss = objectives[-1] if objectives else float("inf")
    return centroids, loss

def generate_vocabulary(features, k, out="vocabulary.h5", dataset_name="data", n=None, niter=None, random_state=None):
    if n is not None and n < 0:
        raise ValueError(f"feature limit must be non-negative, got {n}")
    utils.status("vocabulary", "Loading features to memory...")
    with h5py.File(features, "r") as f:
        dset = utils.open_dataset(f, dataset_name, ndim=2)
        if n is not None and n > dset.shape[0]:
            raise ValueError(f"feature limit {n} exceeds the {dset.shape[0]} rows of '{dataset_name}'")
        # prefix, not a random sample
        X = dset[:n] if n is not None else dset[()]

    utils.status("vocabulary", f"Clustering {X.shape[0]} descriptors into {k} components ...")
    centroids, loss = train_vocabulary(X, k, niter=niter, random_state=random_state)
    print(f"Done. Final objective loss: {loss}")

    utils.status("vocabulary", f"Saving centroids to {out} ...")
    utils.ensure_parent_dir(out)
    with h5py.File(out, "w") as f:
        utils.write_dataset(f, "data", centroids.astype(np.float32), attrs={
            "k": int(centroids.shape[0]),
            "d": int(centroids.shape[1]),
            "n_features": int(X.shape[0]),
            "niter": int(kmeans.DEFAULT_NITER if niter is None else niter),
            "objective": float(loss),
        })
    return centroids

def add_arguments(ap):
    ap.add_argument("features", metavar="FEATURES", help="hdf5 file containing the features")
    ap.add_argument("--name", dest="dataset_name", default="data", help="group path where the features are")
    ap.add_argument("-k", "--size", type=int, required=True, help="size of the codebook")
    ap.add_argument("-o", "--out", default="vocabulary.h5", help="hdf5 file to store the k centroids")
    ap.add_argument("-N", dest="n", type=int, default=None, help="only use the first N features for clustering")
    ap.add_argument("--niter", type=int, default=None, help="number of k-means iterations")
    ap.add_argument("--random_state", type=int, default=None, help="seed for the k-means++ initialization")

def run(args):
    generate_vocabulary(args.features, args.size, out=args.out, dataset_name=args.dataset_name,
                        n=args.n, niter=args.niter, random_state=args.random_state)

def main(argv=None):
    ap = argparse.ArgumentParser(description="Generate a feature vocabulary")
    add_arguments(ap)
    args = ap.parse_args(argv)
    try:
        run(args)
    except Exception as e:
        ap.exit(1, f"{ap.prog}: error: {type(e).__name__}: {e}\n")
    return 0

if __name__ == '__main__':
    sys.exit(main())
