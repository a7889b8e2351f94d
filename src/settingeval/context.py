from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .registry import EvaluatorRegistry

RandomSource = Callable[[], float]
"""A zero-argument callable returning a float in ``[0, 1)``."""


@dataclass
class EvaluationContext:
    """Context passed to conditions while one setting is evaluated.

    The context bundles the request attributes with everything a condition
    may consult. It is created by ``SettingEvaluator.evaluate()`` for a
    single call and discarded afterwards.

    Attributes:
        setting: Name of the setting being evaluated. Percentage buckets
            are derived from it.
        attributes: Request attributes (``farm``, ``percentageSeed``,
            ``customCondition``, ...). Read-only.
        answers: Already resolved values of other settings. Read-only.
        registry: Custom evaluators available to ``customCondition``.
        random: Source of uniform draws for ``randomPercentage``.
        metrics: Counters for the current call. Keys include
            ``"condition_eval"`` and ``"rule_eval"``.
    """

    setting: str
    attributes: Mapping[str, Any]
    answers: Mapping[str, Any]
    registry: EvaluatorRegistry
    random: RandomSource
    metrics: dict[str, int] = field(default_factory=dict)

    def get(self, key: str) -> Any:
        """Return the request attribute ``key``, or ``None`` when absent."""
        return self.attributes.get(key)

    def bump(self, metric: str, amount: int = 1) -> None:
        """Increment a metric counter."""
        self.metrics[metric] = self.metrics.get(metric, 0) + amount
