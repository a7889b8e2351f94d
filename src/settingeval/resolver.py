from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from .conditions import SettingDependency
from .engine import Answer, CustomEvaluators, Entry, SettingEvaluator, compile_entry
from .errors import CyclicDependencyError, EntryLoadError, UnknownSettingError
from .loader import EntrySpec

logger = logging.getLogger(__name__)


class SettingsResolver:
    """Evaluates a whole configuration of settings.

    Settings may depend on each other through ``setting`` conditions. The
    resolver orders entries so that every setting is evaluated after the
    settings it depends on, and feeds each answer into the ``answers`` map
    used by the ones that follow.

    The dependency graph is checked when the resolver is created: a cycle
    raises ``CyclicDependencyError`` right away.

    Example:
        >>> resolver = SettingsResolver([
        ...     {"setting": "base", "value": True},
        ...     {"setting": "child", "value": False, "except": [{"value": True, "setting": "base"}]},
        ... ])
        >>> resolver.order()
        ['base', 'child']
        >>> resolver.resolve()["child"].value
        True
    """

    def __init__(
        self,
        entries: Iterable[Entry | EntrySpec | Mapping[str, Any]],
        evaluator: SettingEvaluator | None = None,
    ) -> None:
        """Compile the entries and compute the evaluation order.

        Args:
            entries: Setting definitions, compiled or raw.
            evaluator: Evaluator used for every entry. If ``None``, a
                ``SettingEvaluator`` with default collaborators is created.

        Raises:
            EntryLoadError: If two entries share a setting name.
            CyclicDependencyError: If settings depend on each other in a cycle.
        """
        self.evaluator = evaluator or SettingEvaluator()
        self._entries: dict[str, Entry] = {}
        for item in entries:
            entry = compile_entry(item)
            if entry.setting in self._entries:
                raise EntryLoadError(f"duplicate setting '{entry.setting}'")
            self._entries[entry.setting] = entry
        self._order = self._sort()

    def __contains__(self, name: object) -> bool:
        """Return ``True`` if ``name`` is a configured setting."""
        return name in self._entries

    def __len__(self) -> int:
        """Return the number of configured settings."""
        return len(self._entries)

    def entry(self, name: str) -> Entry:
        """Return the compiled entry for ``name``.

        Raises:
            UnknownSettingError: If ``name`` is not configured.
        """
        try:
            return self._entries[name]
        except KeyError:
            raise UnknownSettingError(name) from None

    def dependencies(self, name: str) -> list[str]:
        """Return the settings ``name`` depends on, in first-seen order."""
        seen: dict[str, None] = {}
        for rule in self.entry(name).rules:
            for condition in rule.conditions:
                if isinstance(condition, SettingDependency):
                    seen.update(dict.fromkeys(condition.names))
        return list(seen)

    def order(self) -> list[str]:
        """Return all setting names in evaluation order."""
        return list(self._order)

    def _sort(self) -> list[str]:
        order: list[str] = []
        done: set[str] = set()
        path: list[str] = []

        def visit(name: str) -> None:
            if name in done:
                return
            if name in path:
                raise CyclicDependencyError(path[path.index(name):] + [name])
            path.append(name)
            for dep in self.dependencies(name):
                if dep not in self._entries:
                    logger.warning("Setting %s depends on unknown setting %s", name, dep)
                    continue
                visit(dep)
            path.pop()
            done.add(name)
            order.append(name)

        for name in self._entries:
            visit(name)
        return order

    def _closure(self, name: str) -> set[str]:
        needed: set[str] = set()
        pending = [name]
        while pending:
            current = pending.pop()
            if current in needed or current not in self._entries:
                continue
            needed.add(current)
            pending.extend(self.dependencies(current))
        return needed

    def resolve(
        self,
        context: Mapping[str, Any] | None = None,
        overrides: Mapping[str, Any] | None = None,
        custom_evaluators: CustomEvaluators | None = None,
        *,
        only: str | None = None,
        explain: bool = False,
    ) -> dict[str, Answer]:
        """Evaluate settings in dependency order.

        Args:
            context: Request attributes shared by every setting.
            overrides: Forced values by setting name. Overrides for settings
                outside the configuration are visible to `setting` conditions.
            custom_evaluators: Evaluators for ``customCondition`` rules.
            only: If given, evaluate just this setting and the settings it
                transitively depends on.
            explain: If ``True``, every ``Answer`` carries an explanation.

        Returns:
            Answers keyed by setting name, in evaluation order.

        Raises:
            UnknownSettingError: If ``only`` names an unknown setting.
            SettingEvalError: Any error raised while evaluating an entry.
        """
        names = self._order
        if only is not None:
            self.entry(only)
            needed = self._closure(only)
            names = [name for name in self._order if name in needed]

        answers: dict[str, Answer] = {}
        # Overrides of settings outside the configuration still satisfy
        # `setting` conditions.
        values: dict[str, Any] = {
            name: value for name, value in (overrides or {}).items() if name not in self._entries
        }
        for name in names:
            answer = self.evaluator.evaluate(
                self._entries[name],
                context,
                overrides,
                values,
                custom_evaluators,
                explain=explain,
            )
            answers[name] = answer
            values[name] = answer.value
        logger.debug("Resolved %d settings", len(answers))
        return answers
