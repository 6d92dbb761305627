"""Digit classification models (importing registers them with Hydra)."""

from digit_training.models.base import BaseClassificationModel
from digit_training.models.lenet import LeNetClassificationModel
from digit_training.models.mlp import FeedForwardClassificationModel

__all__ = [
    "BaseClassificationModel",
    "FeedForwardClassificationModel",
    "LeNetClassificationModel",
]
