from __future__ import annotations


class SettingEvalError(Exception):
    """Base exception for all settingeval errors.

    All other exceptions in this package inherit from this class,
    allowing callers to catch all settingeval-related errors with
    a single except clause.
    """


class EntryLoadError(SettingEvalError):
    """Raised when a setting entry or configuration cannot be loaded.

    Common causes:
        - Invalid JSON or YAML syntax in the source
        - File not found or unreadable
        - Missing or empty ``setting`` field
        - ``except`` is not a list of dicts
        - Duplicate setting names in a configuration
        - A rule condition that fails to compile
    """


class ConditionSyntaxError(SettingEvalError):
    """Raised when a condition specification is malformed.

    Common causes:
        - ``percentage`` or ``randomPercentage`` is not a number in 0..100
        - ``setting`` is neither a name nor a list of names
        - ``customCondition`` has no ``evaluator`` name
    """


class UnsupportedFieldTypeError(ConditionSyntaxError):
    """Raised when a field value has a shape no condition understands.

    This covers condition values that are neither a primitive, a list of
    primitives, nor one of the recognized structured shapes, and context
    values that are not primitives when a condition compares them.
    """

    def __init__(self, key: str, value: object = None) -> None:
        super().__init__(f"Unknown type of context field '{key}': {type(value).__name__}")
        self.key = key


class ConditionEvaluationError(SettingEvalError):
    """Base class for errors raised while matching conditions."""


class MissingSeedError(ConditionEvaluationError):
    """Raised when a ``percentage`` condition has no usable ``percentageSeed``."""


class UnknownEvaluatorError(ConditionEvaluationError):
    """Raised when a custom condition names an unregistered evaluator."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown custom evaluator '{name}'")
        self.name = name


class CyclicDependencyError(SettingEvalError):
    """Raised when settings depend on each other in a cycle.

    The ``cycle`` attribute lists the setting names along the cycle, with
    the first name repeated at the end.
    """

    def __init__(self, cycle: list[str]) -> None:
        super().__init__("Cyclic setting dependency: " + " -> ".join(cycle))
        self.cycle = cycle


class UnknownSettingError(SettingEvalError):
    """Raised when a setting name is not part of the configuration."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown setting '{name}'")
        self.name = name
