"""Plain-text renderings of digit images for terminal inspection."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np


def raw_to_text(image: np.ndarray | Sequence[Sequence[int]]) -> str:
    """Render raw intensities as two-digit lowercase hex, one row per line.

    Every value is followed by a space, e.g. ``"00 7f ff \\n"``.
    """
    return "".join(
        "".join(f"{int(v):02x} " for v in row) + "\n" for row in image
    )


def normalized_to_text(image: np.ndarray | Sequence[Sequence[float]]) -> str:
    """Render normalized intensities with three decimals, one row per line."""
    return "".join(
        "".join(f"{float(v):.3f} " for v in row) + "\n" for row in image
    )
