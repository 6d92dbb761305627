"""LeNet-style convolutional digit classifier."""

from __future__ import annotations

from typing import Any

import torch
from torch import nn

from digit_training.models.base import BaseClassificationModel
from digit_training.utils.hydra import register


@register(
    group="model",
    name="lenet",
    num_classes=10,
    in_channels=1,
    image_size=28,
    learning_rate=0.01,
    momentum=0.9,
    weight_decay=5e-4,
)
class LeNetClassificationModel(BaseClassificationModel):
    """Two conv/max-pool stages followed by a 500-unit dense layer.

    conv 5x5x20 -> maxpool 2 -> conv 5x5x50 -> maxpool 2 -> dense 500 (ReLU)
    -> num_classes. The convolutions have identity activations.
    """

    def __init__(
        self,
        num_classes: int = 10,
        in_channels: int = 1,
        image_size: int = 28,
        learning_rate: float = 0.01,
        weight_decay: float = 5e-4,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            num_classes=num_classes,
            learning_rate=learning_rate,
            weight_decay=weight_decay,
            **kwargs,
        )
        # Two valid 5x5 convolutions, each followed by a stride-2 pool.
        side = ((image_size - 4) // 2 - 4) // 2
        if side <= 0:
            raise ValueError(f"image_size {image_size} too small for LeNet")
        self.features = nn.Sequential(
            nn.Conv2d(in_channels, 20, kernel_size=5, stride=1),
            nn.MaxPool2d(kernel_size=2, stride=2),
            nn.Conv2d(20, 50, kernel_size=5, stride=1),
            nn.MaxPool2d(kernel_size=2, stride=2),
        )
        self.classifier = nn.Sequential(
            nn.Flatten(),
            nn.Linear(50 * side * side, 500),
            nn.ReLU(),
            nn.Linear(500, num_classes),
        )
        self.init_weights()

    def forward(self, images: torch.Tensor) -> torch.Tensor:
        return self.classifier(self.features(images))  # type: ignore[no-any-return]
