"""Training callbacks for digit_training."""

from digit_training.callbacks.evaluation import EvaluationReportCallback
from digit_training.callbacks.model_info import ModelInfoCallback
from digit_training.callbacks.score import ScoreLoggerCallback
from digit_training.callbacks.statistics import DatasetStatisticsCallback
from digit_training.callbacks.timer import TrainingTimerCallback, format_elapsed

__all__ = [
    "DatasetStatisticsCallback",
    "EvaluationReportCallback",
    "ModelInfoCallback",
    "ScoreLoggerCallback",
    "TrainingTimerCallback",
    "format_elapsed",
]
