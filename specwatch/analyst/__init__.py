"""Route change analysis: classifier and bounded fan-out."""

from specwatch.analyst.classifier import STRATEGIES, ChangeClassifier, PromptStrategy, strip_docs
from specwatch.analyst.fanout import run_bounded

__all__ = [
    "STRATEGIES",
    "ChangeClassifier",
    "PromptStrategy",
    "run_bounded",
    "strip_docs",
]
