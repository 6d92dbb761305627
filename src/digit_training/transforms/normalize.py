"""Intensity scaling from raw ``uint8`` pixels to ``[0, 1]`` floats."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

_MAX_INTENSITY = np.float32(255.0)


def normalize(image: np.ndarray | Sequence[Sequence[int]]) -> np.ndarray:
    """Convert one raw image to float32 and rescale it to ``[0, 1]``.

    Args:
        image: ``rows x columns`` grid of 0-255 intensities, as an array or a
            nested sequence. Non-square grids are fine.

    Returns:
        New float32 array of the same shape, each value divided by 255.

    Raises:
        ValueError: If the rows do not all have the same length.
    """
    if not isinstance(image, np.ndarray):
        widths = {len(row) for row in image}
        if len(widths) > 1:
            raise ValueError(f"Ragged image: row lengths {sorted(widths)}")
        image = np.asarray(image)
    if image.ndim != 2:
        raise ValueError(f"Expected a 2D image, got shape {image.shape}")
    return image.astype(np.float32) / _MAX_INTENSITY


def normalize_batch(images: np.ndarray) -> np.ndarray:
    """Vectorised :func:`normalize` over an ``(N, rows, columns)`` stack."""
    if images.ndim != 3:
        raise ValueError(f"Expected (N, rows, columns), got shape {images.shape}")
    return images.astype(np.float32) / _MAX_INTENSITY
