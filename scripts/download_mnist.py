#!/usr/bin/env python3
"""Download the four MNIST IDX archives.

Usage::

    python scripts/download_mnist.py --output data/mnist
    python scripts/download_mnist.py --output data/mnist --retries 3
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from loguru import logger

# Add project root to path so we can import digit_training
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from digit_training.constants import MNIST_URL  # noqa: E402
from digit_training.data.fetcher import download_mnist  # noqa: E402
from digit_training.errors import DownloadError  # noqa: E402


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--output", type=Path, default=Path("data/mnist"), help="Destination directory"
    )
    parser.add_argument("--base-url", default=MNIST_URL, help="Remote base URL")
    parser.add_argument(
        "--retries", type=int, default=0, help="Extra attempts per file on failure"
    )
    parser.add_argument("--timeout", type=float, default=60.0, help="HTTP timeout (s)")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logger.remove()
    logger.add(sys.stderr, level="INFO")
    try:
        download_mnist(
            args.output,
            base_url=args.base_url,
            retries=args.retries,
            timeout_seconds=args.timeout,
        )
    except DownloadError as e:
        logger.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
