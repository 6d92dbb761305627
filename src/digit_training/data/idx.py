"""Decoder for the gzip-compressed IDX files MNIST is distributed in.

Image files::

    int32 magic (0x00000803) | int32 count | int32 rows | int32 columns
    uint8[count * rows * columns]      # image-major, row-major

Label files::

    int32 magic (0x00000801) | int32 count | uint8[count]

All integers are big-endian. Decoded arrays are read-only ``uint8`` views.
"""

from __future__ import annotations

import gzip
import os
import struct
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import IO, TYPE_CHECKING, Literal

import numpy as np
from loguru import logger

from digit_training.constants import IMAGES_MAGIC, LABELS_MAGIC, SPLIT_FILES
from digit_training.errors import FormatError

if TYPE_CHECKING:
    from loguru import Logger

__all__ = ["DigitSplit", "load_split", "read_images", "read_labels"]

Source = str | os.PathLike[str] | IO[bytes]
Split = Literal["train", "test"]

_CHUNK_SIZE = 1 << 20


def _read_exact(stream: IO[bytes], size: int, what: str) -> bytes:
    """Read exactly ``size`` bytes or raise FormatError.

    The body is read in bounded chunks, so a header claiming more data than
    the stream holds fails as truncation instead of sizing one huge buffer.
    """
    chunks: list[bytes] = []
    remaining = size
    try:
        while remaining > 0:
            chunk = stream.read(min(remaining, _CHUNK_SIZE))
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)
    except EOFError as e:
        raise FormatError(f"Truncated stream while reading {what}") from e
    except zlib.error as e:
        raise FormatError(f"Corrupt compressed data while reading {what}: {e}") from e
    if remaining:
        raise FormatError(
            f"Truncated {what}: expected {size} bytes, got {size - remaining}"
        )
    return b"".join(chunks)


def _read_header(stream: IO[bytes], expected_magic: int, dims: int) -> tuple[int, ...]:
    """Check the magic number and return ``dims`` non-negative header integers."""
    (magic,) = struct.unpack(">i", _read_exact(stream, 4, "magic number"))
    if magic != expected_magic:
        raise FormatError(
            f"Bad magic number 0x{magic & 0xFFFFFFFF:08x}, "
            f"expected 0x{expected_magic:08x}"
        )
    values = struct.unpack(f">{dims}i", _read_exact(stream, 4 * dims, "header"))
    if any(v < 0 for v in values):
        raise FormatError(f"Negative dimension in header: {values}")
    return values


def read_images(source: Source, *, log: Logger | None = None) -> np.ndarray:
    """Read an IDX image file.

    Args:
        source: Path to a ``*-idx3-ubyte.gz`` file, or a binary file object
            positioned at the start of the gzip stream.
        log: Optional logger; defaults to the module logger.

    Returns:
        Read-only ``uint8`` array of shape ``(count, rows, columns)``.

    Raises:
        FormatError: Wrong magic number or truncated data.
        OSError: The file cannot be opened or is not a gzip stream.
    """
    log = log or logger
    with gzip.open(source, "rb") as stream:
        count, rows, columns = _read_header(stream, IMAGES_MAGIC, 3)
        log.debug(f"Reading {count} {rows}x{columns} images ...")
        body = _read_exact(stream, count * rows * columns, "image data")

    images = np.frombuffer(body, dtype=np.uint8).reshape(count, rows, columns)
    log.info(f"Read {count} {rows}x{columns} images from {_describe(source)}")
    return images


def read_labels(source: Source, *, log: Logger | None = None) -> np.ndarray:
    """Read an IDX label file.

    Args:
        source: Path to a ``*-idx1-ubyte.gz`` file, or a binary file object.
        log: Optional logger; defaults to the module logger.

    Returns:
        Read-only ``uint8`` array of shape ``(count,)``.

    Raises:
        FormatError: Wrong magic number or truncated data.
        OSError: The file cannot be opened or is not a gzip stream.
    """
    log = log or logger
    with gzip.open(source, "rb") as stream:
        (count,) = _read_header(stream, LABELS_MAGIC, 1)
        body = _read_exact(stream, count, "label data")

    labels = np.frombuffer(body, dtype=np.uint8)
    log.info(f"Read {count} labels from {_describe(source)}")
    return labels


def _describe(source: Source) -> str:
    if isinstance(source, (str, os.PathLike)):
        return os.fspath(source)
    return getattr(source, "name", "<stream>")


@dataclass(frozen=True)
class DigitSplit:
    """One dataset partition: index-aligned images and labels."""

    name: str
    images: np.ndarray
    labels: np.ndarray

    def __post_init__(self) -> None:
        if self.images.ndim != 3:
            raise FormatError(
                f"{self.name}: images must be (N, rows, columns), "
                f"got shape {self.images.shape}"
            )
        if len(self.images) != len(self.labels):
            raise FormatError(
                f"{self.name}: {len(self.images)} images but "
                f"{len(self.labels)} labels"
            )

    def __len__(self) -> int:
        return len(self.labels)

    @property
    def image_shape(self) -> tuple[int, int]:
        return int(self.images.shape[1]), int(self.images.shape[2])


def load_split(
    directory: str | Path, split: Split, *, log: Logger | None = None
) -> DigitSplit:
    """Decode the image/label pair for ``split`` from ``directory``."""
    if split not in SPLIT_FILES:
        raise ValueError(f"Unknown split {split!r}; expected one of {list(SPLIT_FILES)}")
    images_name, labels_name = SPLIT_FILES[split]
    base_dir = Path(directory)
    return DigitSplit(
        name=split,
        images=read_images(base_dir / images_name, log=log),
        labels=read_labels(base_dir / labels_name, log=log),
    )
