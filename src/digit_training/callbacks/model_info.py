"""Parameter counts and optimiser settings of the model being trained."""

from __future__ import annotations

import lightning as L
from loguru import logger
from rich import box
from rich.console import Console
from rich.table import Table


class ModelInfoCallback(L.Callback):
    """Print a table of model statistics when fitting starts.

    Reports total and trainable parameters, model size in MB and the
    optimiser hyper-parameters saved on the module.
    """

    _HPARAM_ROWS = (
        ("learning_rate", "Learning Rate"),
        ("momentum", "Momentum"),
        ("weight_decay", "L2 Weight Decay"),
    )

    def on_fit_start(
        self, trainer: L.Trainer, pl_module: L.LightningModule
    ) -> None:
        total_params = sum(p.numel() for p in pl_module.parameters())
        trainable_params = sum(
            p.numel() for p in pl_module.parameters() if p.requires_grad
        )
        param_size = sum(
            p.numel() * p.element_size() for p in pl_module.parameters()
        )
        buffer_size = sum(
            b.numel() * b.element_size() for b in pl_module.buffers()
        )
        model_size_mb = (param_size + buffer_size) / (1024 * 1024)

        table = Table(
            title="Model Information",
            header_style="bold magenta",
            box=box.SQUARE,
            show_lines=True,
        )
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green")

        table.add_row("Model Class", type(pl_module).__name__)
        table.add_row("Total Parameters", f"{total_params:,}")
        table.add_row("Trainable Parameters", f"{trainable_params:,}")
        table.add_row("Model Size", f"{model_size_mb:.2f} MB")
        hparams = getattr(pl_module, "hparams", {})
        for key, label in self._HPARAM_ROWS:
            if key in hparams:
                table.add_row(label, str(hparams[key]))

        Console().print(table)

        logger.info(
            f"Model: {type(pl_module).__name__} | "
            f"Params: {total_params:,} ({trainable_params:,} trainable) | "
            f"Size: {model_size_mb:.2f} MB"
        )
