"""Wall-clock timing of a training run."""

from __future__ import annotations

import time

import lightning as L
from loguru import logger


def format_elapsed(seconds: float) -> str:
    """Format a duration as zero-padded ``MM:SS`` (minutes may exceed 59)."""
    total = int(seconds)
    minutes, secs = divmod(total, 60)
    return f"{minutes:02d}:{secs:02d}"


class TrainingTimerCallback(L.Callback):
    """Log elapsed time at the end of fitting and at the end of testing.

    The clock starts at the first ``on_fit_start`` (or ``on_test_start`` when
    only testing), so the test-end total covers training plus evaluation.
    """

    def __init__(self) -> None:
        super().__init__()
        self._start: float | None = None

    def _ensure_started(self) -> None:
        if self._start is None:
            self._start = time.perf_counter()

    def elapsed(self) -> float:
        if self._start is None:
            return 0.0
        return time.perf_counter() - self._start

    def on_fit_start(self, trainer: L.Trainer, pl_module: L.LightningModule) -> None:
        self._ensure_started()

    def on_train_epoch_end(
        self, trainer: L.Trainer, pl_module: L.LightningModule
    ) -> None:
        logger.info(f"*** Completed epoch {trainer.current_epoch} ***")

    def on_fit_end(self, trainer: L.Trainer, pl_module: L.LightningModule) -> None:
        logger.info(f"Training time: {format_elapsed(self.elapsed())}")

    def on_test_start(self, trainer: L.Trainer, pl_module: L.LightningModule) -> None:
        self._ensure_started()

    def on_test_end(self, trainer: L.Trainer, pl_module: L.LightningModule) -> None:
        logger.info(f"Total time: {format_elapsed(self.elapsed())}")
