"""Digit class distribution printed at training start."""

from __future__ import annotations

import lightning as L
import numpy as np
from loguru import logger
from rich import box
from rich.console import Console
from rich.table import Table


class DatasetStatisticsCallback(L.Callback):
    """Print a rich table of per-digit sample counts for train and test.

    Reads the decoded splits from ``trainer.datamodule`` (``_train_split``
    and ``_test_split``); missing splits are skipped.
    """

    def on_fit_start(self, trainer: L.Trainer, pl_module: L.LightningModule) -> None:
        datamodule = getattr(trainer, "datamodule", None)
        if datamodule is None:
            logger.warning("No datamodule found. Skipping dataset statistics.")
            return

        num_classes: int = getattr(datamodule, "num_classes", 10)
        counts: dict[str, np.ndarray] = {}
        for name in ("train", "test"):
            split = getattr(datamodule, f"_{name}_split", None)
            if split is None:
                continue
            counts[name] = np.bincount(split.labels, minlength=num_classes)
            logger.info(
                f"{name} split: {len(split)} samples, "
                f"{split.image_shape[0]}x{split.image_shape[1]} images"
            )

        if not counts:
            logger.warning("No decoded splits on datamodule. Skipping dataset statistics.")
            return

        table = Table(
            title="Digit Class Distribution",
            header_style="bold magenta",
            box=box.SQUARE,
            show_lines=True,
        )
        table.add_column("Digit", style="cyan", justify="right")
        for name in counts:
            table.add_column(f"{name} count", justify="right", style="green")
            table.add_column(f"{name} %", justify="right", style="yellow")

        for digit in range(num_classes):
            row = [str(digit)]
            for split_counts in counts.values():
                total = int(split_counts.sum())
                count = int(split_counts[digit])
                pct = count / total * 100 if total > 0 else 0.0
                row.extend([str(count), f"{pct:.1f}%"])
            table.add_row(*row)

        Console().print(table)
