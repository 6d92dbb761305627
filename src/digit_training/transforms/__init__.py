"""Pixel transforms for digit_training."""

from digit_training.transforms.normalize import normalize, normalize_batch

__all__ = ["normalize", "normalize_batch"]
