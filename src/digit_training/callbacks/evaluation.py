"""Summary metrics and confusion matrix after testing."""

from __future__ import annotations

from pathlib import Path

import lightning as L
import matplotlib
import matplotlib.pyplot as plt
import torch
from loguru import logger
from rich import box
from rich.console import Console
from rich.table import Table
from torchmetrics.classification import MulticlassConfusionMatrix


class EvaluationReportCallback(L.Callback):
    """Print accuracy, precision, recall, F1 and a confusion matrix after testing.

    Summary metrics are read from ``trainer.callback_metrics`` (logged by
    :class:`~digit_training.models.base.BaseClassificationModel`). The
    confusion matrix is accumulated here from the test batches. The metric is
    created in ``on_test_start`` so it lives on the model's device.

    Args:
        num_classes: Number of target classes.
        output_dir: Where ``confusion_matrix.png`` is written when
            ``save_plot`` is True.
        save_plot: Also render the matrix as a heatmap PNG.
    """

    _SUMMARY_KEYS = (
        ("test/acc", "Accuracy"),
        ("test/precision", "Precision"),
        ("test/recall", "Recall"),
        ("test/f1", "F1 Score"),
    )

    def __init__(
        self,
        num_classes: int = 10,
        output_dir: str = "outputs",
        save_plot: bool = False,
    ) -> None:
        super().__init__()
        self.num_classes = num_classes
        self.output_dir = Path(output_dir)
        self.save_plot = save_plot
        self._cm: MulticlassConfusionMatrix | None = None
        self.last_matrix: torch.Tensor | None = None

    def on_test_start(self, trainer: L.Trainer, pl_module: L.LightningModule) -> None:
        self._cm = MulticlassConfusionMatrix(num_classes=self.num_classes).to(
            pl_module.device
        )

    def on_test_batch_end(
        self,
        trainer: L.Trainer,
        pl_module: L.LightningModule,
        outputs: object,
        batch: object,
        batch_idx: int,
        dataloader_idx: int = 0,
    ) -> None:
        """Accumulate predictions for the current test batch.

        Uses the logits returned by ``test_step``; a forward pass is run only
        when the step returned nothing.
        """
        if self._cm is None:
            return

        # batch is a ClassificationBatch dict
        labels = batch["labels"]  # type: ignore[index]
        if isinstance(outputs, torch.Tensor):
            logits = outputs.detach()
        else:
            with torch.no_grad():
                logits = pl_module(batch["images"])  # type: ignore[index]
        preds = logits.argmax(dim=1)
        self._cm.update(preds, labels)

    def on_test_epoch_end(
        self, trainer: L.Trainer, pl_module: L.LightningModule
    ) -> None:
        if self._cm is None:
            return

        cm = self._cm.compute().cpu()
        self._cm.reset()
        self.last_matrix = cm

        console = Console()
        console.print(self._summary_table(trainer))
        console.print(self._matrix_table(cm))
        logger.info(f"Evaluated {int(cm.sum())} test samples")

        if self.save_plot:
            self._plot_and_save(cm)

    def _summary_table(self, trainer: L.Trainer) -> Table:
        table = Table(
            title="Evaluation Metrics",
            header_style="bold magenta",
            box=box.SQUARE,
        )
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right", style="green")
        metrics = trainer.callback_metrics
        for key, label in self._SUMMARY_KEYS:
            value = metrics.get(key)
            if value is not None:
                table.add_row(label, f"{float(value):.4f}")
        return table

    def _matrix_table(self, cm: torch.Tensor) -> Table:
        table = Table(
            title="Confusion Matrix (rows: actual, columns: predicted)",
            header_style="bold magenta",
            box=box.SIMPLE,
        )
        table.add_column("", style="cyan", justify="right")
        for i in range(cm.shape[1]):
            table.add_column(str(i), justify="right")
        for i, row in enumerate(cm.tolist()):
            cells = [
                f"[green]{v}[/green]" if i == j else str(v) for j, v in enumerate(row)
            ]
            table.add_row(str(i), *cells)
        return table

    def _plot_and_save(self, cm: torch.Tensor) -> Path:
        """Render the confusion matrix as a heatmap and save it to disk."""
        matplotlib.use("Agg")
        self.output_dir.mkdir(parents=True, exist_ok=True)

        cm_np = cm.numpy()
        n = cm_np.shape[0]
        fig, ax = plt.subplots(figsize=(8, 7))
        im = ax.imshow(cm_np, interpolation="nearest", cmap="Blues")
        fig.colorbar(im, ax=ax)
        ax.set_title("Confusion Matrix")
        ax.set_xlabel("Predicted")
        ax.set_ylabel("True")
        ticks = list(range(n))
        ax.set_xticks(ticks)
        ax.set_yticks(ticks)

        fig.tight_layout()
        save_path = self.output_dir / "confusion_matrix.png"
        fig.savefig(save_path, dpi=150)
        plt.close(fig)

        logger.info(f"Confusion matrix saved to {save_path}")
        return save_path
