"""Base LightningModule for the digit classifiers."""

from __future__ import annotations

from typing import Any

import lightning as L
import torch
from torch import nn
from torchmetrics.classification import (
    MulticlassAccuracy,
    MulticlassF1Score,
    MulticlassPrecision,
    MulticlassRecall,
)

from digit_training.types import ClassificationBatch


class BaseClassificationModel(L.LightningModule):
    """Shared training loop for the digit classifiers.

    Subclasses build their layers in ``__init__``, call :meth:`init_weights`
    and implement ``forward()`` returning logits ``(B, num_classes)``.

    Optimisation is SGD with Nesterov momentum and L2 weight decay. The loss
    is cross-entropy on logits (softmax + negative log-likelihood).
    """

    def __init__(
        self,
        num_classes: int = 10,
        learning_rate: float = 0.01,
        momentum: float = 0.9,
        nesterov: bool = True,
        weight_decay: float = 5e-4,
    ) -> None:
        super().__init__()
        self.save_hyperparameters()
        self.loss_fn = nn.CrossEntropyLoss()

        # One metric set per split.
        self.train_acc = MulticlassAccuracy(num_classes=num_classes, average="micro")
        self.val_acc = MulticlassAccuracy(num_classes=num_classes, average="micro")
        self.val_f1 = MulticlassF1Score(num_classes=num_classes, average="macro")
        self.test_acc = MulticlassAccuracy(num_classes=num_classes, average="micro")
        self.test_precision = MulticlassPrecision(
            num_classes=num_classes, average="macro"
        )
        self.test_recall = MulticlassRecall(num_classes=num_classes, average="macro")
        self.test_f1 = MulticlassF1Score(num_classes=num_classes, average="macro")
        self.test_per_cls = MulticlassAccuracy(num_classes=num_classes, average="none")

    def init_weights(self) -> None:
        """Xavier-uniform weights and zero biases for every linear/conv layer."""
        for module in self.modules():
            if isinstance(module, (nn.Linear, nn.Conv2d)):
                nn.init.xavier_uniform_(module.weight)
                if module.bias is not None:
                    nn.init.zeros_(module.bias)

    def training_step(
        self, batch: ClassificationBatch, batch_idx: int
    ) -> torch.Tensor:
        images, labels = batch["images"], batch["labels"]
        logits = self(images)
        loss: torch.Tensor = self.loss_fn(logits, labels)
        self.log(
            "train/loss", loss, on_step=True, on_epoch=True, prog_bar=True
        )
        self.train_acc.update(logits, labels)
        return loss

    def on_train_epoch_end(self) -> None:
        self.log("train/acc", self.train_acc.compute())
        self.train_acc.reset()

    def validation_step(
        self, batch: ClassificationBatch, batch_idx: int
    ) -> None:
        images, labels = batch["images"], batch["labels"]
        logits = self(images)
        loss = self.loss_fn(logits, labels)
        self.log("val/loss", loss, on_step=False, on_epoch=True, prog_bar=True)
        self.val_acc.update(logits, labels)
        self.val_f1.update(logits, labels)

    def on_validation_epoch_end(self) -> None:
        self.log("val/acc", self.val_acc.compute(), prog_bar=True)
        self.log("val/f1", self.val_f1.compute())
        self.val_acc.reset()
        self.val_f1.reset()

    def test_step(
        self, batch: ClassificationBatch, batch_idx: int
    ) -> torch.Tensor:
        """Update the test metrics and return the logits for callbacks."""
        images, labels = batch["images"], batch["labels"]
        logits = self(images)
        loss = self.loss_fn(logits, labels)
        self.log("test/loss", loss, on_step=False, on_epoch=True)
        for metric in (
            self.test_acc,
            self.test_precision,
            self.test_recall,
            self.test_f1,
            self.test_per_cls,
        ):
            metric.update(logits, labels)
        return logits

    def on_test_epoch_end(self) -> None:
        self.log("test/acc", self.test_acc.compute())
        self.log("test/precision", self.test_precision.compute())
        self.log("test/recall", self.test_recall.compute())
        self.log("test/f1", self.test_f1.compute())
        per_cls: torch.Tensor = self.test_per_cls.compute()
        for i, acc in enumerate(per_cls):
            self.log(f"test/acc_class_{i}", acc)
        for metric in (
            self.test_acc,
            self.test_precision,
            self.test_recall,
            self.test_f1,
            self.test_per_cls,
        ):
            metric.reset()

    def predict_step(
        self, batch: ClassificationBatch, batch_idx: int
    ) -> torch.Tensor:
        return self(batch["images"]).argmax(dim=1)

    def configure_optimizers(self) -> dict[str, Any]:  # type: ignore[override]
        optimizer = torch.optim.SGD(
            self.parameters(),
            lr=self.hparams["learning_rate"],
            momentum=self.hparams["momentum"],
            nesterov=self.hparams["nesterov"],
            weight_decay=self.hparams["weight_decay"],
        )
        return {"optimizer": optimizer}
