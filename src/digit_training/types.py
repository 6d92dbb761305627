"""Type aliases and TypedDicts for digit_training inter-module contracts."""

from typing import TypedDict

import torch


class ClassificationBatch(TypedDict):
    """A single batch handed to the Lightning models.

    images: Float tensor of shape (B, 1, H, W), intensities scaled to [0, 1].
    labels: Long tensor of shape (B,), digit class indices 0-9.
    """

    images: torch.Tensor
    labels: torch.Tensor
