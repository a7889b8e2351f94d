from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .conditions import Condition, parse_conditions
from .errors import ConditionSyntaxError, EntryLoadError

logger = logging.getLogger(__name__)

_YAML_SUFFIXES = {".yaml", ".yml"}


@dataclass(frozen=True)
class EntrySpec:
    """A validated setting entry.

    This is a frozen (immutable) dataclass representing an entry that has
    been loaded and validated but not yet compiled into conditions.

    Attributes:
        setting: Setting name. Must be a non-empty string.
        value: Default value returned when no exception rule matches.
        exceptions: The raw ``except`` list. Each dict holds a ``value``
            and any number of condition keys. Order is priority order.
    """

    setting: str
    value: Any = None
    exceptions: list[dict[str, Any]] = field(default_factory=list)


def _read_source(source: Any, base_dir: str | None, opening: str) -> Any:
    if isinstance(source, (str, Path)):
        text = str(source)
        if isinstance(source, str) and text.strip().startswith(opening):
            return json.loads(text)
        path = Path(text)
        if not path.is_absolute() and base_dir:
            path = Path(base_dir) / path
        logger.debug("Reading settings from %s", path)
        content = path.read_text(encoding="utf-8")
        if path.suffix.lower() in _YAML_SUFFIXES:
            return yaml.safe_load(content)
        return json.loads(content)
    return source


def parse_entry(data: Any) -> tuple[EntrySpec, list[tuple[Condition, ...]]]:
    """Validate one entry mapping and compile its exception rules.

    Returns the ``EntrySpec`` together with the compiled conditions of each
    rule, in rule order, so callers that go on to evaluate the entry need
    not compile it again.

    Raises:
        EntryLoadError: If the mapping is not a valid entry.
        ConditionSyntaxError: If a rule condition fails to compile.
    """
    if not isinstance(data, Mapping):
        raise EntryLoadError(f"setting entry must be an object, got {type(data).__name__}")

    setting = data.get("setting")
    exceptions = data.get("except")
    if exceptions is None:
        exceptions = []

    if not isinstance(setting, str) or not setting:
        raise EntryLoadError("setting entry requires non-empty 'setting'")
    if not isinstance(exceptions, list):
        raise EntryLoadError(f"'except' of setting '{setting}' must be a list")

    compiled: list[tuple[Condition, ...]] = []
    for rule in exceptions:
        if not isinstance(rule, Mapping):
            raise EntryLoadError(f"exception rules of setting '{setting}' must be objects")
        compiled.append(parse_conditions(rule))

    spec = EntrySpec(setting=setting, value=data.get("value"), exceptions=[dict(r) for r in exceptions])
    return spec, compiled


def entry_from_dict(data: Any) -> EntrySpec:
    """Validate one entry mapping and return an ``EntrySpec``.

    Every exception rule is compiled once so that malformed conditions are
    reported at load time rather than on first evaluation.

    Raises:
        EntryLoadError: If the mapping is not a valid entry.
        ConditionSyntaxError: If a rule condition fails to compile.
    """
    return parse_entry(data)[0]


def load_entry(source: Any, *, base_dir: str | None = None) -> EntrySpec:
    """Load and validate a single setting entry.

    Args:
        source: Entry source. Can be:
            - A ``dict`` with entry data (keys: ``setting``, ``value``, ``except``)
            - A JSON string (detected by leading ``{`` after stripping whitespace)
            - A file path (``str`` or ``Path``) to a JSON or YAML file
        base_dir: Base directory for resolving relative file paths.

    Returns:
        A validated ``EntrySpec``.

    Raises:
        EntryLoadError: If the source cannot be read, parsed or validated.
            Wraps underlying ``json.JSONDecodeError``, ``yaml.YAMLError``,
            ``OSError`` or ``ConditionSyntaxError`` exceptions.

    Examples:
        >>> load_entry({"setting": "beta", "value": False})
        EntrySpec(setting='beta', value=False, exceptions=[])

        >>> load_entry("settings/beta.yaml", base_dir="/app/config")
        EntrySpec(...)
    """
    try:
        return entry_from_dict(_read_source(source, base_dir, "{"))
    except (json.JSONDecodeError, yaml.YAMLError, OSError, ConditionSyntaxError) as exc:
        raise EntryLoadError(str(exc)) from exc


def load_entries(source: Any, *, base_dir: str | None = None) -> list[EntrySpec]:
    """Load and validate a whole configuration of setting entries.

    Args:
        source: Configuration source. Can be:
            - A ``list`` of entry dicts
            - A ``dict`` with a ``settings`` list
            - A JSON string holding either of the above
            - A file path (``str`` or ``Path``) to a JSON or YAML file
        base_dir: Base directory for resolving relative file paths.

    Returns:
        The validated entries, in configuration order.

    Raises:
        EntryLoadError: If the source cannot be read, parsed or validated,
            or if two entries share a setting name.
    """
    try:
        if isinstance(source, str) and source.strip().startswith("{"):
            data = json.loads(source)
        else:
            data = _read_source(source, base_dir, "[")
        if isinstance(data, Mapping):
            data = data.get("settings")
        if not isinstance(data, list):
            raise EntryLoadError("configuration must be a list of setting entries")
        entries = [entry_from_dict(item) for item in data]
    except (json.JSONDecodeError, yaml.YAMLError, OSError, ConditionSyntaxError) as exc:
        raise EntryLoadError(str(exc)) from exc

    seen: set[str] = set()
    for entry in entries:
        if entry.setting in seen:
            raise EntryLoadError(f"duplicate setting '{entry.setting}'")
        seen.add(entry.setting)
    logger.debug("Loaded %d setting entries", len(entries))
    return entries
