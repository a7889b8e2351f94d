from __future__ import annotations

import logging
import random as _random
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union

from .conditions import Condition, parse_conditions
from .context import EvaluationContext, RandomSource
from .errors import EntryLoadError
from .loader import EntrySpec, parse_entry
from .registry import ConditionEvaluator, EvaluatorFunc, EvaluatorRegistry, get_default_registry

logger = logging.getLogger(__name__)

CustomEvaluators = Union[EvaluatorRegistry, Mapping[str, Union[EvaluatorFunc, ConditionEvaluator]]]


@dataclass(frozen=True)
class ExceptionRule:
    """A compiled exception rule.

    Attributes:
        value: Value returned when every condition matches.
        conditions: Compiled conditions, combined with logical AND. An
            empty tuple always matches.
    """

    value: Any
    conditions: tuple[Condition, ...] = ()

    def matches(self, ctx: EvaluationContext) -> bool:
        ctx.bump("rule_eval")
        for condition in self.conditions:
            if not condition.matches(ctx):
                return False
        return True


@dataclass(frozen=True)
class Entry:
    """A compiled setting entry ready for evaluation.

    Entries are compiled from an ``EntrySpec`` by ``compile_entry()``. This
    is a frozen (immutable) dataclass; compile once and evaluate as often
    as needed.

    Attributes:
        setting: Setting name.
        value: Default value.
        rules: Compiled exception rules in priority order.
    """

    setting: str
    value: Any
    rules: tuple[ExceptionRule, ...] = ()


@dataclass(frozen=True)
class Answer:
    """The effective value of one setting.

    Attributes:
        key: The setting name.
        value: The resolved value.
        source: Where the value came from: ``"override"``, ``"exception"``
            or ``"default"``.
        rule: Index of the matching exception rule when ``source`` is
            ``"exception"``, otherwise ``None``.
        explanation: Detailed evaluation breakdown. Only populated when
            ``explain=True`` was passed to ``evaluate()``. Structure:
            ``{"setting": str, "source": str, "rule": int | None,
            "value": Any, "metrics": dict, "rules": list}``
    """

    key: str
    value: Any
    source: str = "default"
    rule: int | None = None
    explanation: dict[str, Any] | None = None


def compile_entry(entry: Entry | EntrySpec | Mapping[str, Any]) -> Entry:
    """Compile an entry into its executable form.

    Args:
        entry: An ``Entry`` (returned unchanged), an ``EntrySpec`` or a raw
            entry mapping (``setting``, ``value``, ``except``).

    Returns:
        The compiled ``Entry``.

    Raises:
        EntryLoadError: If a raw mapping is not a valid entry.
        ConditionSyntaxError: If a rule condition is malformed.
        UnsupportedFieldTypeError: If a condition value has an
            unsupported shape.
    """
    if isinstance(entry, Entry):
        return entry
    if isinstance(entry, Mapping):
        entry, conditions = parse_entry(entry)
    elif isinstance(entry, EntrySpec):
        conditions = [parse_conditions(rule) for rule in entry.exceptions]
    else:
        raise EntryLoadError("entry must be an Entry, an EntrySpec or a mapping")
    rules = tuple(
        ExceptionRule(value=rule.get("value"), conditions=compiled)
        for rule, compiled in zip(entry.exceptions, conditions)
    )
    return Entry(setting=entry.setting, value=entry.value, rules=rules)


class SettingEvaluator:
    """Evaluates setting entries against request contexts.

    The evaluator holds the long-lived collaborators (custom evaluator
    registry and random source); everything request-specific is passed
    to ``evaluate()``.

    Attributes:
        registry: Custom evaluators used when a call supplies none.
        random: Default random source for ``randomPercentage``.

    Example:
        >>> evaluator = SettingEvaluator()
        >>> answer = evaluator.evaluate(
        ...     {"setting": "beta", "value": False, "except": [{"value": True, "farm": "111"}]},
        ...     {"farm": "111"},
        ... )
        >>> answer.value
        True
    """

    def __init__(
        self,
        registry: CustomEvaluators | None = None,
        *,
        random: RandomSource | None = None,
    ) -> None:
        """Initialize a setting evaluator.

        Args:
            registry: Custom evaluators, as an ``EvaluatorRegistry`` or a
                ``name -> evaluator`` mapping. If ``None``, uses
                ``get_default_registry()``.
            random: Callable returning floats in ``[0, 1)``. If ``None``,
                uses ``random.random``.
        """
        self.registry = _as_registry(registry) if registry is not None else get_default_registry()
        self.random = random or _random.random

    def evaluate(
        self,
        entry: Entry | EntrySpec | Mapping[str, Any],
        context: Mapping[str, Any] | None = None,
        overrides: Mapping[str, Any] | None = None,
        answers: Mapping[str, Any] | None = None,
        custom_evaluators: CustomEvaluators | None = None,
        *,
        random: RandomSource | None = None,
        explain: bool = False,
    ) -> Answer:
        """Determine the effective value of a setting.

        An override for the setting wins outright. Otherwise exception
        rules are tried in order and the first one whose conditions all
        match supplies the value; if none matches, the entry's default
        value is returned.

        Args:
            entry: The setting definition (compiled, spec or raw mapping).
            context: Request attributes. May be empty.
            overrides: Forced values by setting name.
            answers: Resolved values of other settings, consulted by
                ``setting`` conditions.
            custom_evaluators: Evaluators for ``customCondition`` rules.
                If ``None``, the evaluator's registry is used.
            random: Random source override for this call.
            explain: If ``True``, populates ``Answer.explanation``.

        Returns:
            The ``Answer`` for the setting.

        Raises:
            MissingSeedError: If a ``percentage`` condition is reached and
                the context has no ``percentageSeed``.
            UnknownEvaluatorError: If a ``customCondition`` names an
                evaluator that is not registered.
            UnsupportedFieldTypeError: If a condition or context value has
                an unsupported shape.
        """
        compiled = compile_entry(entry)
        overrides = overrides or {}

        if compiled.setting in overrides:
            logger.debug("Setting %s forced by override", compiled.setting)
            return self._answer(compiled, overrides[compiled.setting], "override", None, explain)

        ctx = EvaluationContext(
            setting=compiled.setting,
            attributes=context or {},
            answers=answers or {},
            registry=_as_registry(custom_evaluators) if custom_evaluators is not None else self.registry,
            random=random or self.random,
        )

        details: list[dict[str, Any]] = []
        for index, rule in enumerate(compiled.rules):
            matched = rule.matches(ctx)
            if explain:
                details.append(_explain_rule(index, rule, matched))
            if matched:
                logger.debug("Setting %s matched exception rule %d", compiled.setting, index)
                return self._answer(compiled, rule.value, "exception", index, explain, ctx.metrics, details)

        logger.debug("Setting %s fell back to its default value", compiled.setting)
        return self._answer(compiled, compiled.value, "default", None, explain, ctx.metrics, details)

    @staticmethod
    def _answer(
        entry: Entry,
        value: Any,
        source: str,
        rule: int | None,
        explain: bool,
        metrics: dict[str, int] | None = None,
        details: list[dict[str, Any]] | None = None,
    ) -> Answer:
        explanation = None
        if explain:
            explanation = {
                "setting": entry.setting,
                "source": source,
                "rule": rule,
                "value": value,
                "metrics": dict(metrics or {}),
                "rules": details or [],
            }
        return Answer(key=entry.setting, value=value, source=source, rule=rule, explanation=explanation)


def _as_registry(evaluators: CustomEvaluators) -> EvaluatorRegistry:
    if isinstance(evaluators, EvaluatorRegistry):
        return evaluators
    return EvaluatorRegistry.from_mapping(evaluators)


def _explain_rule(index: int, rule: ExceptionRule, matched: bool) -> dict[str, Any]:
    return {
        "index": index,
        "value": rule.value,
        "conditions": [c.describe() for c in rule.conditions],
        "matched": matched,
    }


def evaluate(
    entry: Entry | EntrySpec | Mapping[str, Any],
    context: Mapping[str, Any] | None = None,
    overrides: Mapping[str, Any] | None = None,
    answers: Mapping[str, Any] | None = None,
    custom_evaluators: CustomEvaluators | None = None,
    *,
    random: RandomSource | None = None,
    explain: bool = False,
) -> Answer:
    """Evaluate one entry with a default ``SettingEvaluator``.

    Convenience wrapper equivalent to
    ``SettingEvaluator().evaluate(entry, context, overrides, answers,
    custom_evaluators, random=random, explain=explain)``. When
    ``custom_evaluators`` is ``None`` the built-in evaluators are available.
    """
    return SettingEvaluator(random=random).evaluate(
        entry, context, overrides, answers, custom_evaluators, explain=explain
    )
