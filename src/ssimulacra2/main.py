import argparse
import logging
import os
import sys

from . import VERSION
from .errors import Ssimulacra2Error, error_message
from .orchestrator import compare_files
from .processing import SRGB
from .report import plot_contributions, score_breakdown, write_score_report
from .score import quality_label
from .sniff import analyze_image_header


def _background(value):
    try:
        bg = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value}") from None
    if not 0.0 <= bg <= 1.0:
        raise argparse.ArgumentTypeError("background intensity must be between 0.0 and 1.0")
    return bg


def build_parser():
    parser = argparse.ArgumentParser(
        prog="ssimulacra2",
        description="SSIMULACRA 2.1: perceptual similarity of a distorted image to its original "
                    "(100 = identical, lower is worse)")
    parser.add_argument("original", help="Path to the original (reference) image")
    parser.add_argument("distorted", help="Path to the distorted image")
    parser.add_argument("--background", type=_background, default=None,
                        help="Gray level (0.0-1.0) to composite transparent images on. "
                             "Default: score on 0.1 and 0.9 and report the worse")
    parser.add_argument("--colorspace", default=SRGB,
                        help=f"OCIO color space the files are encoded in (default: {SRGB})")
    parser.add_argument("--config", default=None,
                        help="Path to OCIO config file (.ocio). Default: built-in studio config")
    parser.add_argument("--workers", type=int, default=1,
                        help="Threads for the dark/light background passes (default: 1)")
    parser.add_argument("--analyze", action="store_true",
                        help="Print a header analysis of both files before scoring")
    parser.add_argument("--report", default=None,
                        help="Write a per-feature CSV score breakdown to this path")
    parser.add_argument("--plot", default=None,
                        help="Save a bar chart of weighted errors per scale to this path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=VERSION)
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s - %(levelname)s - %(message)s")

    if args.analyze:
        for label, path in (("Original", args.original), ("Distorted", args.distorted)):
            print(f"{label} image analysis ({os.path.basename(path)}):")
            if os.path.isfile(path):
                with open(path, "rb") as f:
                    print(analyze_image_header(f.read()))
            else:
                print("File not found\n")

    try:
        comparison = compare_files(args.original, args.distorted, args.background,
                                   colorspace=args.colorspace, config_path=args.config,
                                   workers=args.workers)
    except Ssimulacra2Error as e:
        print(f"Error: {error_message(e.kind)}: {e}", file=sys.stderr)
        if e.details:
            print(e.details, file=sys.stderr)
        return -int(e.kind)

    print(f"{comparison.score:.8f}")
    print(f"Quality: {quality_label(comparison.score)}", file=sys.stderr)

    if args.report or args.plot:
        rows = score_breakdown(comparison)
        if args.report:
            write_score_report(args.report, rows)
            print(f"Detailed score report written to: {args.report}", file=sys.stderr)
        if args.plot:
            plot_contributions(rows, args.plot, title=os.path.basename(args.distorted))
            print(f"Plot saved to: {args.plot}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
