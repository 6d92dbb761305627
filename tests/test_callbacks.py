"""Tests for the observability callbacks.

All tests use minimal models, MagicMock trainers, tmp_path and CPU only.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
import torch
import torch.nn as nn
from loguru import logger

from digit_training.callbacks import (
    DatasetStatisticsCallback,
    EvaluationReportCallback,
    ModelInfoCallback,
    ScoreLoggerCallback,
    TrainingTimerCallback,
    format_elapsed,
)
from digit_training.data import MnistDataModule

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class _TinyModule(nn.Module):
    def __init__(self, num_classes: int = 10) -> None:
        super().__init__()
        self.fc = nn.Linear(4, num_classes)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return self.fc(x.flatten(1))


class _FakeLightningModule:
    """Minimal stand-in for pl_module (not a real LightningModule)."""

    def __init__(self, num_classes: int = 10) -> None:
        self._model = _TinyModule(num_classes)
        self.device = torch.device("cpu")
        self.hparams = {"learning_rate": 0.01, "momentum": 0.9}

    def __call__(self, x: torch.Tensor) -> torch.Tensor:
        return self._model(x)

    def parameters(self) -> Any:
        return self._model.parameters()

    def buffers(self) -> Any:
        return self._model.buffers()


def _mock_trainer(
    datamodule: Any = None,
    current_epoch: int = 0,
    global_step: int = 0,
    callback_metrics: dict[str, Any] | None = None,
) -> MagicMock:
    trainer = MagicMock()
    trainer.datamodule = datamodule
    trainer.current_epoch = current_epoch
    trainer.global_step = global_step
    trainer.callback_metrics = callback_metrics or {}
    return trainer


@pytest.fixture()
def log_lines() -> Any:
    lines: list[str] = []
    handler_id = logger.add(lambda msg: lines.append(str(msg)), level="DEBUG")
    yield lines
    logger.remove(handler_id)


# ---------------------------------------------------------------------------
# ModelInfoCallback
# ---------------------------------------------------------------------------


class TestModelInfoCallback:
    def test_logs_parameter_count(self, log_lines: list[str]) -> None:
        pl_module = _FakeLightningModule()
        ModelInfoCallback().on_fit_start(_mock_trainer(), pl_module)  # type: ignore[arg-type]
        # Linear(4, 10): 40 weights + 10 biases
        assert any("Params: 50 (50 trainable)" in line for line in log_lines)


# ---------------------------------------------------------------------------
# DatasetStatisticsCallback
# ---------------------------------------------------------------------------


class TestDatasetStatisticsCallback:
    def test_reports_both_splits(self, mnist_dir: Path, log_lines: list[str]) -> None:
        dm = MnistDataModule(data_root=str(mnist_dir), download=False)
        dm.setup("fit")
        DatasetStatisticsCallback().on_fit_start(
            _mock_trainer(datamodule=dm), _FakeLightningModule()  # type: ignore[arg-type]
        )
        assert any("train split: 100 samples, 28x28" in line for line in log_lines)
        assert any("test split: 40 samples" in line for line in log_lines)

    def test_without_datamodule(self, log_lines: list[str]) -> None:
        DatasetStatisticsCallback().on_fit_start(
            _mock_trainer(datamodule=None), _FakeLightningModule()  # type: ignore[arg-type]
        )
        assert any("Skipping dataset statistics" in line for line in log_lines)


# ---------------------------------------------------------------------------
# ScoreLoggerCallback
# ---------------------------------------------------------------------------


class TestScoreLoggerCallback:
    def test_logs_on_period(self, log_lines: list[str]) -> None:
        cb = ScoreLoggerCallback(every_n_steps=5)
        pl_module = _FakeLightningModule()
        for step in range(11):
            cb.on_train_batch_end(
                _mock_trainer(global_step=step),  # type: ignore[arg-type]
                pl_module,  # type: ignore[arg-type]
                {"loss": torch.tensor(0.5)},
                None,
                step,
            )
        scores = [line for line in log_lines if "Score at iteration" in line]
        assert len(scores) == 3  # steps 0, 5, 10
        assert "0.500000" in scores[0]

    def test_accepts_bare_tensor(self, log_lines: list[str]) -> None:
        ScoreLoggerCallback().on_train_batch_end(
            _mock_trainer(global_step=3),  # type: ignore[arg-type]
            _FakeLightningModule(),  # type: ignore[arg-type]
            torch.tensor(1.25),
            None,
            0,
        )
        assert any("Score at iteration 3 is 1.250000" in line for line in log_lines)

    def test_rejects_non_positive_period(self) -> None:
        with pytest.raises(ValueError):
            ScoreLoggerCallback(every_n_steps=0)


# ---------------------------------------------------------------------------
# TrainingTimerCallback
# ---------------------------------------------------------------------------


class TestTrainingTimerCallback:
    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [(0, "00:00"), (59.9, "00:59"), (61, "01:01"), (3725, "62:05")],
    )
    def test_format_elapsed(self, seconds: float, expected: str) -> None:
        assert format_elapsed(seconds) == expected

    def test_total_time_spans_fit_and_test(self, log_lines: list[str]) -> None:
        cb = TrainingTimerCallback()
        trainer, pl_module = _mock_trainer(), _FakeLightningModule()
        with patch(
            "digit_training.callbacks.timer.time.perf_counter",
            side_effect=[100.0, 130.0, 225.0],
        ):
            cb.on_fit_start(trainer, pl_module)  # type: ignore[arg-type]
            cb.on_fit_end(trainer, pl_module)  # type: ignore[arg-type]
            cb.on_test_start(trainer, pl_module)  # type: ignore[arg-type]
            cb.on_test_end(trainer, pl_module)  # type: ignore[arg-type]
        assert any("Training time: 00:30" in line for line in log_lines)
        assert any("Total time: 02:05" in line for line in log_lines)

    def test_elapsed_before_start(self) -> None:
        assert TrainingTimerCallback().elapsed() == 0.0


# ---------------------------------------------------------------------------
# EvaluationReportCallback
# ---------------------------------------------------------------------------


class TestEvaluationReportCallback:
    def _run(self, cb: EvaluationReportCallback) -> None:
        pl_module = _FakeLightningModule()
        trainer = _mock_trainer(
            callback_metrics={
                "test/acc": torch.tensor(0.9),
                "test/precision": torch.tensor(0.8),
            }
        )
        cb.on_test_start(trainer, pl_module)  # type: ignore[arg-type]
        for i in range(3):
            batch = {
                "images": torch.rand(5, 1, 2, 2),
                "labels": torch.randint(0, 10, (5,)),
            }
            cb.on_test_batch_end(trainer, pl_module, None, batch, i)  # type: ignore[arg-type]
        cb.on_test_epoch_end(trainer, pl_module)  # type: ignore[arg-type]

    def test_confusion_matrix_counts_every_sample(self, tmp_path: Path) -> None:
        cb = EvaluationReportCallback(output_dir=str(tmp_path))
        self._run(cb)
        assert cb.last_matrix is not None
        assert cb.last_matrix.shape == (10, 10)
        assert int(cb.last_matrix.sum()) == 15
        assert not (tmp_path / "confusion_matrix.png").exists()

    def test_saves_plot_when_enabled(self, tmp_path: Path) -> None:
        cb = EvaluationReportCallback(output_dir=str(tmp_path), save_plot=True)
        self._run(cb)
        assert (tmp_path / "confusion_matrix.png").exists()

    def test_noop_without_start(self) -> None:
        cb = EvaluationReportCallback()
        cb.on_test_epoch_end(_mock_trainer(), _FakeLightningModule())  # type: ignore[arg-type]
        assert cb.last_matrix is None

    def test_uses_test_step_logits(self) -> None:
        pl_module = MagicMock()
        pl_module.device = torch.device("cpu")
        trainer = _mock_trainer()
        cb = EvaluationReportCallback()
        cb.on_test_start(trainer, pl_module)
        logits = torch.zeros(4, 10)
        logits[torch.arange(4), torch.tensor([1, 2, 3, 3])] = 1.0
        batch = {"images": torch.rand(4, 1, 2, 2), "labels": torch.tensor([1, 2, 3, 0])}
        cb.on_test_batch_end(trainer, pl_module, logits, batch, 0)
        cb.on_test_epoch_end(trainer, pl_module)
        pl_module.assert_not_called()
        assert cb.last_matrix is not None
        assert int(cb.last_matrix.trace()) == 3
        assert int(cb.last_matrix[0, 3]) == 1
