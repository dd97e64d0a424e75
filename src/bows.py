import argparse, sys
import quantize, vocabulary

"""
Bags of features: `bows vocabulary` trains the codebook, `bows quantize`
turns feature files into per-item histograms against it.
"""

def build_parser():
    ap = argparse.ArgumentParser(prog="bows", description="Visual vocabulary and bag-of-features quantization")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("vocabulary", help="generate a feature vocabulary")
    vocabulary.add_arguments(p)
    p.set_defaults(run=vocabulary.run)

    p = sub.add_parser("quantize", aliases=["bows"], help="generate bags of features")
    quantize.add_arguments(p)
    p.set_defaults(run=quantize.run)
    return ap

def main(argv=None):
    ap = build_parser()
    args = ap.parse_args(argv)
    try:
        args.run(args)
    except Exception as e:
        ap.exit(1, f"{ap.prog}: error: {type(e).__name__}: {e}\n")
    return 0

if __name__ == "__main__":
    sys.exit(main())
