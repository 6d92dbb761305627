"""Fully-connected digit classifier."""

from __future__ import annotations

from typing import Any

import torch
from torch import nn

from digit_training.models.base import BaseClassificationModel
from digit_training.utils.hydra import register


@register(
    group="model",
    name="mlp",
    num_classes=10,
    input_size=784,
    hidden_size=50,
    learning_rate=0.006,
    momentum=0.9,
    weight_decay=1e-4,
)
class FeedForwardClassificationModel(BaseClassificationModel):
    """One hidden ReLU layer between the flattened image and the class logits.

    784 -> 50 (ReLU) -> 10, Xavier-initialised.
    """

    def __init__(
        self,
        num_classes: int = 10,
        input_size: int = 784,
        hidden_size: int = 50,
        learning_rate: float = 0.006,
        weight_decay: float = 1e-4,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            num_classes=num_classes,
            learning_rate=learning_rate,
            weight_decay=weight_decay,
            **kwargs,
        )
        self.model = nn.Sequential(
            nn.Flatten(),
            nn.Linear(input_size, hidden_size),
            nn.ReLU(),
            nn.Linear(hidden_size, num_classes),
        )
        self.init_weights()

    def forward(self, images: torch.Tensor) -> torch.Tensor:
        return self.model(images)  # type: ignore[no-any-return]
