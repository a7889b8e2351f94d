from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from typing import Any, Protocol, runtime_checkable

from .errors import UnknownEvaluatorError

EvaluatorFunc = Callable[[Any, Any], Any]
"""Type alias for plain custom evaluator functions.

The function receives the rule's ``dimensionValue`` and the request's
``customCondition`` attribute. Its return value is interpreted by
truthiness.
"""


@runtime_checkable
class ConditionEvaluator(Protocol):
    """Interface for named custom condition evaluators."""

    def evaluate(self, condition_value: Any, context_value: Any) -> Any: ...


class EvaluatorRegistry:
    """Registry mapping custom evaluator names to predicates.

    ``customCondition`` rules name an evaluator; the registry resolves the
    name at evaluation time. Both ``ConditionEvaluator`` instances and plain
    two-argument callables can be registered.

    Example:
        >>> registry = EvaluatorRegistry()
        >>> registry.register("locale", lambda wanted, actual: actual.startswith(wanted))
        >>> registry.get("locale")("en", "en-US")
        True
    """

    def __init__(self) -> None:
        """Create an empty evaluator registry."""
        self._evaluators: dict[str, EvaluatorFunc] = {}

    @classmethod
    def from_mapping(cls, evaluators: Mapping[str, EvaluatorFunc | ConditionEvaluator]) -> EvaluatorRegistry:
        """Build a registry from a ``name -> evaluator`` mapping."""
        registry = cls()
        for name, evaluator in evaluators.items():
            registry.register(name, evaluator)
        return registry

    def register(self, name: str, evaluator: EvaluatorFunc | ConditionEvaluator) -> None:
        """Register an evaluator under ``name``.

        If an evaluator is already registered for the name, it will be
        replaced.

        Args:
            name: The value rules use in ``customCondition.evaluator``.
            evaluator: A ``ConditionEvaluator`` or a callable taking
                ``(condition_value, context_value)``.

        Raises:
            TypeError: If ``evaluator`` is neither callable nor has an
                ``evaluate`` method.
        """
        if isinstance(evaluator, ConditionEvaluator):
            self._evaluators[name] = evaluator.evaluate
        elif callable(evaluator):
            self._evaluators[name] = evaluator
        else:
            raise TypeError(f"evaluator '{name}' must be callable or define evaluate()")

    def unregister(self, name: str) -> None:
        """Remove an evaluator. Does nothing if the name is not registered."""
        self._evaluators.pop(name, None)

    def get(self, name: str) -> EvaluatorFunc:
        """Return the evaluator registered under ``name``.

        Raises:
            UnknownEvaluatorError: If no evaluator has that name.
        """
        try:
            return self._evaluators[name]
        except KeyError:
            raise UnknownEvaluatorError(name) from None

    def names(self) -> list[str]:
        """Return the registered evaluator names, sorted."""
        return sorted(self._evaluators)

    def __contains__(self, name: object) -> bool:
        """Return ``True`` if an evaluator is registered under ``name``."""
        return name in self._evaluators

    def __iter__(self) -> Iterator[str]:
        """Iterate over registered names in sorted order."""
        return iter(self.names())

    def __len__(self) -> int:
        """Return the number of registered evaluators."""
        return len(self._evaluators)


_default_registry: EvaluatorRegistry | None = None


def get_default_registry() -> EvaluatorRegistry:
    """Return the shared registry with the built-in evaluators registered.

    The default registry is lazily initialized on first access and cached
    for subsequent calls. It includes ``contains`` and ``prefix``.

    Returns:
        The shared default ``EvaluatorRegistry`` instance.
    """
    global _default_registry
    if _default_registry is None:
        _default_registry = EvaluatorRegistry()
        register_builtin_evaluators(_default_registry)
    return _default_registry


def register_builtin_evaluators(registry: EvaluatorRegistry) -> None:
    """Register the built-in evaluators with a registry.

    This function registers:
        - ``contains``: the request value contains the rule's value
          (substring for strings, membership for lists)
        - ``prefix``: the request string starts with the rule's value

    Args:
        registry: The ``EvaluatorRegistry`` to register evaluators with.
    """

    def _contains(condition_value: Any, context_value: Any) -> bool:
        if isinstance(context_value, str):
            return isinstance(condition_value, str) and condition_value in context_value
        if isinstance(context_value, (list, tuple)):
            return condition_value in context_value
        return False

    def _prefix(condition_value: Any, context_value: Any) -> bool:
        return (
            isinstance(context_value, str)
            and isinstance(condition_value, str)
            and context_value.startswith(condition_value)
        )

    registry.register("contains", _contains)
    registry.register("prefix", _prefix)
