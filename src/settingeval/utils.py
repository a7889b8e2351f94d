from __future__ import annotations

import math
from typing import Any

PRIMITIVE_TYPES = (str, int, float, bool)


def is_primitive(value: Any) -> bool:
    """Return ``True`` for values a condition can compare directly.

    Primitives are ``None``, ``str``, ``bool``, ``int`` and ``float``.
    Lists, dicts and any other objects are not primitives.

    Examples:
        >>> is_primitive("111")
        True
        >>> is_primitive(None)
        True
        >>> is_primitive({})
        False
    """
    return value is None or isinstance(value, PRIMITIVE_TYPES)


def is_number(value: Any) -> bool:
    """Return ``True`` for ``int``/``float`` values, excluding ``bool``."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def strict_equals(left: Any, right: Any) -> bool:
    """Compare two primitives without cross-kind coercion.

    Python considers ``True == 1`` and ``False == 0``; setting conditions
    must not. Two values are equal only when they are of the same kind
    (string, boolean, number or ``None``) and equal within that kind.
    ``int`` and ``float`` are the same kind, so ``1`` equals ``1.0``.

    Examples:
        >>> strict_equals(True, 1)
        False
        >>> strict_equals(1, 1.0)
        True
        >>> strict_equals("1", 1)
        False
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    if is_number(left) and is_number(right):
        return left == right
    if left is None or right is None:
        return left is right
    return type(left) is type(right) and left == right


def normalize_seed(seed: Any) -> str | None:
    """Render a percentage seed as the string that gets hashed.

    Strings are used as-is and integers in decimal. Floats with an integral
    value are rendered without the fractional part, so ``5.0`` and ``5``
    land in the same bucket. Returns ``None`` for anything that cannot act
    as a seed (``None``, booleans, NaN/infinity, containers).

    Examples:
        >>> normalize_seed(87625364382)
        '87625364382'
        >>> normalize_seed(5.0)
        '5'
        >>> normalize_seed(True) is None
        True
    """
    if isinstance(seed, str):
        return seed
    if isinstance(seed, bool) or not is_number(seed):
        return None
    if isinstance(seed, float):
        if not math.isfinite(seed):
            return None
        if seed.is_integer():
            return str(int(seed))
        return repr(seed)
    return str(seed)
