"""
Argument validation shared by the attribution methods.

Every check raises before any model evaluation. ``TypeError`` is used when a
value has the wrong kind (e.g. a string where indices are expected) and
``ValueError`` when it has the right kind but lies outside the accepted domain.
"""
from __future__ import annotations
import numbers
from typing import Iterable, List, Sequence

import numpy as np


def _is_integerish(x) -> bool:
    if isinstance(x, (bool, np.bool_)):
        return False
    if isinstance(x, numbers.Integral):
        return True
    if isinstance(x, numbers.Real):
        return float(x).is_integer()
    return False


def check_flag(value, name: str) -> bool:
    if not isinstance(value, (bool, np.bool_)):
        raise TypeError(f"'{name}' must be a single boolean (True/False), got {value!r}")
    return bool(value)


def check_choice(value, choices: Sequence[str], name: str) -> str:
    if not isinstance(value, str) or value not in choices:
        raise ValueError(f"'{name}' must be one of {list(choices)}, got {value!r}")
    return value


def check_count(value, name: str, lower: int = 1) -> int:
    if not _is_integerish(value):
        raise TypeError(f"'{name}' must be an integer >= {lower}, got {value!r}")
    value = int(value)
    if value < lower:
        raise ValueError(f"'{name}' must be an integer >= {lower}, got {value}")
    return value


def check_instance(instance, n_instances: int) -> List[int]:
    """Return the 1-based instance selection as a list of ints, order and duplicates kept."""
    if isinstance(instance, (str, bytes)):
        raise TypeError(f"'instance' must be integer indices in [1, {n_instances}], got {instance!r}")
    if np.ndim(instance) == 0:
        values: Iterable = [instance]
    else:
        values = np.asarray(instance, dtype=object).ravel().tolist()
    out = []
    for v in values:
        if not _is_integerish(v):
            raise TypeError(f"'instance' must be integer indices in [1, {n_instances}], got {v!r}")
        v = int(v)
        if v < 1 or v > n_instances:
            raise ValueError(f"'instance' values must lie in [1, {n_instances}], got {v}")
        out.append(v)
    if not out:
        raise ValueError("'instance' must select at least one instance")
    return out
