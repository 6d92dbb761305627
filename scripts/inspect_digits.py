#!/usr/bin/env python3
"""Print raw and normalized pixels with labels for the first N MNIST samples.

Usage::

    python scripts/inspect_digits.py --data-root data/mnist --split test -n 3
    python scripts/inspect_digits.py --data-root data/mnist -n 20 --export-dir digits/
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np
from loguru import logger
from PIL import Image
from rich.console import Console

# Add project root to path so we can import digit_training
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from digit_training.data.idx import DigitSplit, load_split  # noqa: E402
from digit_training.errors import DigitDataError  # noqa: E402
from digit_training.render import normalized_to_text, raw_to_text  # noqa: E402
from digit_training.transforms import normalize  # noqa: E402


def describe_sample(split: DigitSplit, index: int) -> str:
    """Text block with the raw image, normalized image and label of one sample."""
    raw = split.images[index]
    return (
        "Raw image data:\n"
        f"{raw_to_text(raw)}"
        "Normalized image:\n"
        f"{normalized_to_text(normalize(raw))}"
        "Image label:\n"
        f"{int(split.labels[index])}\n"
    )


def export_png(split: DigitSplit, index: int, output_dir: Path) -> Path:
    """Save one raw image as ``{split}_{index:05d}_{label}.png``."""
    output_dir.mkdir(parents=True, exist_ok=True)
    label = int(split.labels[index])
    path = output_dir / f"{split.name}_{index:05d}_{label}.png"
    Image.fromarray(np.asarray(split.images[index], dtype=np.uint8)).save(path)
    return path


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--data-root", type=Path, default=Path("data/mnist"))
    parser.add_argument("--split", choices=("train", "test"), default="test")
    parser.add_argument("-n", "--count", type=int, default=1, help="Samples to show")
    parser.add_argument(
        "--export-dir", type=Path, default=None, help="Also write PNGs here"
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logger.remove()
    logger.add(sys.stderr, level="INFO")
    try:
        split = load_split(args.data_root, args.split)
    except (DigitDataError, OSError) as e:
        logger.error(f"Could not read {args.split} split from {args.data_root}: {e}")
        return 1

    console = Console()
    count = min(args.count, len(split))
    for index in range(count):
        console.rule(f"{split.name} #{index}")
        console.print(describe_sample(split, index), highlight=False, markup=False)
        if args.export_dir is not None:
            logger.info(f"Saved {export_png(split, index, args.export_dir)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
