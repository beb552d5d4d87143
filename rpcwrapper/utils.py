"""
Value classification helpers shared by the dispatcher and services.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any, List

# Members every object carries; never reported as operations.
_OBJECT_PROTOCOL = frozenset(dir(object))


def is_string_or_number(value: Any) -> bool:
    """
    Check whether a value can be used as a request id.

    Strings qualify, as do ints and floats that are finite. ``bool`` is an
    ``int`` subclass in Python but is not a number on the wire, so it is
    rejected.
    """
    if isinstance(value, str):
        return True
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if isinstance(value, float) and not math.isfinite(value):
        return False
    return True


def is_nil(value: Any) -> bool:
    """JSON ``null`` and a missing member both decode to None."""
    return value is None


def get_object_functions(obj: Any) -> List[str]:
    """
    List the names of every callable member reachable on ``obj``.

    Walks the full attribute set (instance, class and base classes) and, for
    mappings, the keys whose values are callable. Members defined on
    ``object`` itself and dunder names are left out.

    Args:
        obj: Object to inspect

    Returns:
        Sorted, de-duplicated list of member names
    """
    names = set()
    for name in dir(obj):
        if name in _OBJECT_PROTOCOL or _is_dunder(name):
            continue
        try:
            member = getattr(obj, name)
        except AttributeError:
            continue
        if callable(member):
            names.add(name)

    if isinstance(obj, Mapping):
        for key, value in obj.items():
            if isinstance(key, str) and callable(value):
                names.add(key)

    return sorted(names)


def _is_dunder(name: str) -> bool:
    return len(name) > 4 and name.startswith("__") and name.endswith("__")
