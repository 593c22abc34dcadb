"""
Command-line interface for the data augmentation tool.

Adds rotation, slide, blur and noise to labeled regions of input images:

    data-augmentation <input> <output folder> -a <output annotation> -c <config file>

<input> is an image directory, a single image, or an annotation file.
"""

import argparse
import logging
import os
import sys
from pathlib import Path

import numpy as np
from dotenv import load_dotenv

from .annotations import resolve_inputs
from .config import load_config
from .errors import AnnotationError, ConfigError
from .pipeline import AugmentationPipeline
from .sink import AnnotatedImageWriter

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="data-augmentation",
        description="Add rotation, slide, blur, and noise into input images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s annotation.txt ./augmented -c config.txt -a augmented.txt
  %(prog)s ./images ./augmented --seed 42
        """,
    )
    parser.add_argument(
        "input",
        help="Image directory, image file, or annotation file",
    )
    parser.add_argument(
        "output_folder",
        help="Folder to write generated images to",
    )
    parser.add_argument(
        "--conf",
        "-c",
        default=os.environ.get("DATA_AUGMENTATION_CONFIG", "config.txt"),
        help="Configuration file (default: $DATA_AUGMENTATION_CONFIG or config.txt)",
    )
    parser.add_argument(
        "--anno",
        "-a",
        default="annotation.txt",
        help="Output annotation file (default: annotation.txt)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible output",
    )
    return parser


def main(argv=None):
    """Main CLI entry point."""
    load_dotenv()

    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.FileHandler("data_augmentation.log"),
            logging.StreamHandler(sys.stderr),
        ],
    )
    logging.getLogger("data_augmentation").setLevel(logging.INFO)

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.input.startswith("-") or args.output_folder.startswith("-"):
        parser.print_help()
        sys.exit(1)

    try:
        config = load_config(args.conf)
        img_files, areas = resolve_inputs(args.input)
    except (ConfigError, AnnotationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if not img_files:
        print(f"Error: no input images found in {args.input}", file=sys.stderr)
        sys.exit(1)

    try:
        sink = AnnotatedImageWriter(Path(args.output_folder), Path(args.anno))
    except OSError as e:
        print(f"Error: cannot create output folder {args.output_folder}: {e}", file=sys.stderr)
        sys.exit(1)
    pipeline = AugmentationPipeline(config, rng=np.random.default_rng(args.seed))

    try:
        stats = pipeline.run(img_files, sink, areas)
    except KeyboardInterrupt:
        print("\nAugmentation interrupted.")
        sys.exit(130)

    print(f"Images loaded: {stats.images_loaded}, skipped: {stats.images_skipped}")
    print(
        f"Variants written: {stats.variants_written}, "
        f"skipped: {stats.variants_skipped}, failed: {stats.variants_failed}"
    )
    print(f"Annotation file: {sink.annotation_file.absolute()}")


if __name__ == "__main__":
    main()
