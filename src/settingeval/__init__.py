"""settingeval - A rule-based setting evaluator.

settingeval determines the effective value of a setting from its default
value and an ordered list of conditional exceptions. It backs feature flags
and experiments that are switched per farm, environment, bucket, percentage
rollout or dependent setting.

Quick Start:
    >>> from settingeval import evaluate
    >>> entry = {
    ...     "setting": "newCheckout",
    ...     "value": False,
    ...     "except": [{"value": True, "farm": ["111", "222"]}],
    ... }
    >>> evaluate(entry, {"farm": "111"}).value
    True

Main Components:
    - evaluate(): Evaluate one entry with default collaborators
    - SettingEvaluator: Evaluator with a configurable registry and random source
    - Answer: Result of an evaluation
    - EvaluatorRegistry: Registry for custom condition evaluators
    - SettingsResolver: Evaluate a whole configuration in dependency order
    - load_entry() / load_entries(): Load entries from dict, JSON, YAML or file

Condition Keys:
    - setting: Other setting(s) must be truthy (a list means all of them)
    - percentage: Deterministic rollout keyed by ``percentageSeed``
    - randomPercentage: Random rollout, drawn on every evaluation
    - customCondition: Delegate to a registered custom evaluator
    - any other key: Request attribute equals the value (a list means any of them)

Exceptions:
    - EntryLoadError: Entry loading or parsing failed
    - ConditionSyntaxError: Malformed condition
    - UnsupportedFieldTypeError: Condition or context value of unsupported type
    - MissingSeedError: ``percentageSeed`` missing for a percentage condition
    - UnknownEvaluatorError: Custom evaluator not registered
    - CyclicDependencyError: Settings depend on each other in a cycle
    - UnknownSettingError: Setting not part of the configuration
"""

from .conditions import (
    Condition,
    CustomPredicate,
    MembershipMatch,
    PercentageMatch,
    RandomPercentageMatch,
    ScalarMatch,
    SettingDependency,
    parse_condition,
)
from .engine import Answer, Entry, ExceptionRule, SettingEvaluator, compile_entry, evaluate
from .errors import (
    ConditionEvaluationError,
    ConditionSyntaxError,
    CyclicDependencyError,
    EntryLoadError,
    MissingSeedError,
    SettingEvalError,
    UnknownEvaluatorError,
    UnknownSettingError,
    UnsupportedFieldTypeError,
)
from .loader import EntrySpec, load_entries, load_entry
from .registry import ConditionEvaluator, EvaluatorRegistry, get_default_registry
from .resolver import SettingsResolver

__all__ = [
    "Answer",
    "Condition",
    "ConditionEvaluationError",
    "ConditionEvaluator",
    "ConditionSyntaxError",
    "CustomPredicate",
    "CyclicDependencyError",
    "Entry",
    "EntryLoadError",
    "EntrySpec",
    "EvaluatorRegistry",
    "ExceptionRule",
    "MembershipMatch",
    "MissingSeedError",
    "PercentageMatch",
    "RandomPercentageMatch",
    "ScalarMatch",
    "SettingDependency",
    "SettingEvalError",
    "SettingEvaluator",
    "SettingsResolver",
    "UnknownEvaluatorError",
    "UnknownSettingError",
    "UnsupportedFieldTypeError",
    "compile_entry",
    "evaluate",
    "get_default_registry",
    "load_entries",
    "load_entry",
    "parse_condition",
]
