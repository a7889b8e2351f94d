from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, ClassVar

from .bucketing import percentage_bucket
from .context import EvaluationContext
from .errors import ConditionSyntaxError, MissingSeedError, UnsupportedFieldTypeError
from .utils import is_number, is_primitive, normalize_seed, strict_equals

SEED_FIELD = "percentageSeed"
CUSTOM_FIELD = "customCondition"
VALUE_KEY = "value"


class Condition:
    """Base class for all condition variants.

    A condition is one ``key: spec`` pair of an exception rule, compiled
    into the variant that knows how to match it. Variants are chosen once,
    when the rule is parsed, so matching never re-inspects the raw spec.

    Attributes:
        kind: The variant identifier (e.g. ``'scalar'``, ``'percentage'``).
    """

    kind: ClassVar[str] = "condition"

    def matches(self, ctx: EvaluationContext) -> bool:
        """Evaluate the condition against the given context.

        Args:
            ctx: The evaluation context of the current call.

        Returns:
            bool: True if the condition matches, False otherwise.

        Raises:
            NotImplementedError: If not overridden by a subclass.
        """
        raise NotImplementedError

    def describe(self) -> dict[str, Any]:
        """Return the static parts of this condition for explanations."""
        return {"kind": self.kind}


def _context_value(ctx: EvaluationContext, key: str) -> Any:
    actual = ctx.get(key)
    if not is_primitive(actual):
        raise UnsupportedFieldTypeError(key, actual)
    return actual


@dataclass(frozen=True)
class ScalarMatch(Condition):
    """Matches when the request attribute strictly equals a scalar.

    Attributes:
        key: Name of the request attribute.
        expected: The string, number or boolean to compare against.
    """

    kind: ClassVar[str] = "scalar"

    key: str
    expected: Any

    def matches(self, ctx: EvaluationContext) -> bool:
        ctx.bump("condition_eval")
        return strict_equals(_context_value(ctx, self.key), self.expected)

    def describe(self) -> dict[str, Any]:
        return {"kind": self.kind, "key": self.key, "expected": self.expected}


@dataclass(frozen=True)
class MembershipMatch(Condition):
    """Matches when the request attribute equals any of the options.

    Attributes:
        key: Name of the request attribute.
        options: Accepted scalar values, in configuration order.
    """

    kind: ClassVar[str] = "membership"

    key: str
    options: tuple[Any, ...]

    def matches(self, ctx: EvaluationContext) -> bool:
        ctx.bump("condition_eval")
        actual = _context_value(ctx, self.key)
        return any(strict_equals(actual, option) for option in self.options)

    def describe(self) -> dict[str, Any]:
        return {"kind": self.kind, "key": self.key, "options": list(self.options)}


@dataclass(frozen=True)
class SettingDependency(Condition):
    """Matches when every named setting has a truthy answer.

    A list of settings is a conjunction: all of them must be enabled. This
    is the opposite of ``MembershipMatch``, where any option is enough.

    Attributes:
        names: Settings whose answers must all be truthy.
    """

    kind: ClassVar[str] = "setting"

    names: tuple[str, ...]

    def matches(self, ctx: EvaluationContext) -> bool:
        ctx.bump("condition_eval")
        return all(ctx.answers.get(name) for name in self.names)

    def describe(self) -> dict[str, Any]:
        return {"kind": self.kind, "names": list(self.names)}


@dataclass(frozen=True)
class PercentageMatch(Condition):
    """Deterministic rollout to a share of ``percentageSeed`` values.

    The seed and the setting name are hashed into a bucket in ``[0, 100)``;
    the condition matches when the bucket lies below ``percentage``. A given
    seed therefore always gets the same answer for the same setting.

    Attributes:
        percentage: Share of seeds that match, from 0 to 100.
    """

    kind: ClassVar[str] = "percentage"

    percentage: float

    def matches(self, ctx: EvaluationContext) -> bool:
        ctx.bump("condition_eval")
        seed = normalize_seed(ctx.get(SEED_FIELD))
        if seed is None:
            raise MissingSeedError(
                f"The property `{SEED_FIELD}` must be set in the context to evaluate "
                f"percentage conditions of setting '{ctx.setting}' (string or number)"
            )
        return percentage_bucket(ctx.setting, seed) < self.percentage

    def describe(self) -> dict[str, Any]:
        return {"kind": self.kind, "percentage": self.percentage}


@dataclass(frozen=True)
class RandomPercentageMatch(Condition):
    """Matches on a fresh random draw, ``percentage`` percent of the time.

    Attributes:
        percentage: Probability of a match, from 0 to 100.
    """

    kind: ClassVar[str] = "randomPercentage"

    percentage: float

    def matches(self, ctx: EvaluationContext) -> bool:
        ctx.bump("condition_eval")
        return ctx.random() < self.percentage / 100

    def describe(self) -> dict[str, Any]:
        return {"kind": self.kind, "percentage": self.percentage}


@dataclass(frozen=True)
class CustomPredicate(Condition):
    """Delegates matching to a registered custom evaluator.

    The evaluator is called with ``dimension_value`` and the request's
    ``customCondition`` attribute; its result is interpreted by truthiness.

    Attributes:
        evaluator: Registered evaluator name.
        dimension_value: Value configured on the rule.
    """

    kind: ClassVar[str] = "customCondition"

    evaluator: str
    dimension_value: Any = None

    def matches(self, ctx: EvaluationContext) -> bool:
        ctx.bump("condition_eval")
        func = ctx.registry.get(self.evaluator)
        return bool(func(self.dimension_value, ctx.get(CUSTOM_FIELD)))

    def describe(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "evaluator": self.evaluator,
            "dimensionValue": self.dimension_value,
        }


def _is_scalar(value: Any) -> bool:
    return value is not None and is_primitive(value)


def _parse_percentage(key: str, spec: Any) -> float:
    if not is_number(spec) or not 0 <= spec <= 100:
        raise ConditionSyntaxError(f"'{key}' must be a number between 0 and 100")
    return spec


def parse_condition(key: str, spec: Any) -> Condition:
    """Compile one ``key: spec`` pair of an exception rule.

    The key selects the variant: ``setting``, ``percentage``,
    ``randomPercentage`` and ``customCondition`` are reserved; any other
    key compares the request attribute of that name, as a scalar match
    or, when ``spec`` is a list, as a membership match.

    Args:
        key: The condition key (anything but ``value``).
        spec: The configured condition value.

    Returns:
        Condition: The compiled condition.

    Raises:
        ConditionSyntaxError: If a reserved key carries a malformed spec.
        UnsupportedFieldTypeError: If a generic key carries something other
            than a scalar or a list of scalars.
    """
    if key == "setting":
        if isinstance(spec, str) and spec:
            return SettingDependency(names=(spec,))
        if isinstance(spec, (list, tuple)) and all(isinstance(n, str) and n for n in spec):
            return SettingDependency(names=tuple(spec))
        raise ConditionSyntaxError("'setting' must be a setting name or a list of names")

    if key == "percentage":
        return PercentageMatch(percentage=_parse_percentage(key, spec))

    if key == "randomPercentage":
        return RandomPercentageMatch(percentage=_parse_percentage(key, spec))

    if key == CUSTOM_FIELD:
        if not isinstance(spec, Mapping):
            raise ConditionSyntaxError(f"'{CUSTOM_FIELD}' must be an object with an 'evaluator'")
        name = spec.get("evaluator")
        if not isinstance(name, str) or not name:
            raise ConditionSyntaxError(f"'{CUSTOM_FIELD}' requires non-empty 'evaluator'")
        return CustomPredicate(evaluator=name, dimension_value=spec.get("dimensionValue"))

    if _is_scalar(spec):
        return ScalarMatch(key=key, expected=spec)
    if isinstance(spec, (list, tuple)) and all(_is_scalar(option) for option in spec):
        return MembershipMatch(key=key, options=tuple(spec))
    raise UnsupportedFieldTypeError(key, spec)


def parse_conditions(rule: Mapping[str, Any]) -> tuple[Condition, ...]:
    """Compile every condition of an exception rule, skipping ``value``."""
    return tuple(parse_condition(key, spec) for key, spec in rule.items() if key != VALUE_KEY)
