"""Per-iteration loss logging."""

from __future__ import annotations

from typing import Any

import lightning as L
import torch
from loguru import logger


class ScoreLoggerCallback(L.Callback):
    """Log the training loss every ``every_n_steps`` optimisation steps.

    Args:
        every_n_steps: Logging period in global steps. 1 logs every batch.
    """

    def __init__(self, every_n_steps: int = 1) -> None:
        super().__init__()
        if every_n_steps <= 0:
            raise ValueError(f"every_n_steps must be positive, got {every_n_steps}")
        self.every_n_steps = every_n_steps

    def on_train_batch_end(
        self,
        trainer: L.Trainer,
        pl_module: L.LightningModule,
        outputs: Any,
        batch: Any,
        batch_idx: int,
    ) -> None:
        step = trainer.global_step
        if step % self.every_n_steps != 0:
            return
        loss = outputs["loss"] if isinstance(outputs, dict) else outputs
        if isinstance(loss, torch.Tensor):
            logger.info(f"Score at iteration {step} is {loss.item():.6f}")
