import argparse, sys
import h5py
import numpy as np
from tqdm import tqdm
import utils
from bags import BagAccumulator
from flat_index import assign_batch, build_index

"""
Quantize feature vectors against a vocabulary into bag-of-features histograms.
"""

BATCH_SIZE = 1024

def construct_bows_one(features_dset, index, batch_size=BATCH_SIZE, tick=None):
    """
    One histogram of length index.ntotal over every row of `features_dset`.
    """
    acc = BagAccumulator(index.ntotal)
    for feature_batch in utils.batched(features_dset, batch_size):
        acc.add(assign_batch(index, feature_batch))
        if tick is not None:
            tick(len(feature_batch))
    return acc.bows[0]

def construct_bows(features_dset, item_dset, n_items, index, batch_size=BATCH_SIZE, tick=None):
    """
    An (n_items, index.ntotal) histogram matrix; row i counts the features
    whose entry in `item_dset` is i.
    """
    acc = BagAccumulator(index.ntotal, n_items=n_items)
    for feature_batch, item_batch in utils.batched_pairs(features_dset, item_dset, batch_size):
        acc.add(assign_batch(index, feature_batch), item_batch)
        if tick is not None:
            tick(len(feature_batch))
    return acc.bows

def load_codebook(path):
    with h5py.File(path, "r") as f:
        codebook = utils.open_dataset(f, "data", ndim=2)[()]
    if codebook.shape[0] < 1:
        raise ValueError(f"vocabulary in {path} has no centroids")
    return codebook

def generate_descriptors(vocabulary, features, out="bows.h5", features_dataset_name="data",
                         item_id="item_id", item_name="id_volume", single_item=False,
                         batch_size=BATCH_SIZE):
    utils.status("quantize", "Reading data ...")
    index = build_index(load_codebook(vocabulary))

    with h5py.File(features, "r") as fin:
        features_dset = utils.open_dataset(fin, features_dataset_name, ndim=2)
        if features_dset.shape[1] != index.d:
            raise ValueError(f"features have dimension {features_dset.shape[1]} "
                             f"but the vocabulary has dimension {index.d}")

        if single_item:
            with tqdm(total=features_dset.shape[0], desc="Building bags", unit="feat") as pbar:
                bows = construct_bows_one(features_dset, index, batch_size, tick=pbar.update)
            bows = bows[np.newaxis, :]
        else:
            item_dset = utils.open_dataset(fin, item_id, ndim=1)
            # peek at item_name to find the number of items
            names_dset = utils.open_dataset(fin, item_name, ndim=1)
            n_items = names_dset.shape[0]

            with tqdm(total=item_dset.shape[0], desc="Building bags", unit="feat") as pbar:
                bows = construct_bows(features_dset, item_dset, n_items, index, batch_size, tick=pbar.update)

        utils.status("quantize", "Saving to file ...")
        utils.ensure_parent_dir(out)
        with h5py.File(out, "w") as fout:
            utils.write_dataset(fout, "data", bows.astype(np.float32))
            if not single_item:
                n_items = bows.shape[0]
                # sequential range replaces the input item ids
                utils.write_dataset(fout, item_id, np.arange(n_items, dtype=np.uint32))
                utils.write_dataset(fout, item_name, names_dset[()], dtype=names_dset.dtype)

    utils.status("quantize", f"Bags saved: {out}")
    return bows

def add_arguments(ap):
    ap.add_argument("vocabulary", metavar="VOCABULARY", help="hdf5 file containing the codebook")
    ap.add_argument("features", metavar="FEATURES", help="hdf5 file containing the features")
    ap.add_argument("--name", dest="features_dataset_name", default="data", help="group path where the features are")
    ap.add_argument("--item_id", "--id_slice", dest="item_id", default="item_id",
                    help="group path where the item ids are defined for each feature")
    ap.add_argument("--item_name", default="id_volume",
                    help="group path where the names (or textual ids) are defined for each item")
    ap.add_argument("--single_item", "--single_volume", dest="single_item", action="store_true",
                    help="features file represents a single item (don't read item_id nor item_name)")
    ap.add_argument("--batch_size", type=int, default=BATCH_SIZE, help="feature rows per batch")
    ap.add_argument("-o", "--out", default="bows.h5", help="hdf5 file to store the bags")

def run(args):
    generate_descriptors(args.vocabulary, args.features, out=args.out,
                         features_dataset_name=args.features_dataset_name,
                         item_id=args.item_id, item_name=args.item_name,
                         single_item=args.single_item, batch_size=args.batch_size)

def main(argv=None):
    ap = argparse.ArgumentParser(description="Generate bags of features")
    add_arguments(ap)
    args = ap.parse_args(argv)
    try:
        run(args)
    except Exception as e:
        ap.exit(1, f"{ap.prog}: error: {type(e).__name__}: {e}\n")
    return 0

if __name__ == "__main__":
    sys.exit(main())
