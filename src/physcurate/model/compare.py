"""NaN-aware structural equality of record trees.

Two records are equal when they are the same level, carry the same field
names with equal values, the same property entries in the same order and
pairwise-equal children. NaN equals NaN so that "no data" compares equal
to "no data". An ignore set removes field names, the property list
('<level>Property') or the children ('operation', 'instrument', ...) from
the comparison at the top level only.
"""

from collections.abc import Iterable

import numpy as np

from physcurate.model.records import PropertyEntry, Record


def values_equal(a, b) -> bool:
    """Equality of two field values, with NaN == NaN."""
    if isinstance(a, np.ndarray) or isinstance(b, np.ndarray):
        left, right = np.asarray(a), np.asarray(b)
        if left.shape != right.shape:
            return False
        if left.dtype.kind in "fc" and right.dtype.kind in "fc":
            return bool(np.array_equal(left, right, equal_nan=True))
        if left.dtype.kind in "fciu" and right.dtype.kind in "fciu":
            return bool(np.array_equal(left, right))
        if left.dtype.kind != right.dtype.kind:
            return False
        return all(values_equal(x, y) for x, y in zip(left.ravel().tolist(), right.ravel().tolist()))
    if isinstance(a, float) and isinstance(b, float) and np.isnan(a) and np.isnan(b):
        return True
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        return len(a) == len(b) and all(values_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, dict) and isinstance(b, dict):
        return a.keys() == b.keys() and all(values_equal(a[k], b[k]) for k in a)
    if isinstance(a, Record) and isinstance(b, Record):
        return structural_equal(a, b)
    if isinstance(a, PropertyEntry) and isinstance(b, PropertyEntry):
        return a.code == b.code and values_equal(a.value, b.value)
    if type(a) is not type(b) and (isinstance(a, str) or isinstance(b, str)):
        return False
    try:
        return bool(a == b)
    except (TypeError, ValueError):
        return False


def structural_equal(a: Record, b: Record, ignore: Iterable = ()) -> bool:
    """Deep equality of two records, skipping the names in `ignore`.

    Parameters
    ----------
    a, b : Record
        Records of the same level.
    ignore : iterable of str
        Field names to skip at this level. The child key (e.g. 'operation')
        skips the children, '<level>Property' skips the property list.

    Returns
    -------
    bool
    """
    if type(a) is not type(b):
        return False
    ignore = set(ignore)

    left = {k: v for k, v in a.fields.items() if k not in ignore}
    right = {k: v for k, v in b.fields.items() if k not in ignore}
    if left.keys() != right.keys():
        return False
    if not all(values_equal(left[k], right[k]) for k in left):
        return False

    if a.has_properties and a.level.property_key not in ignore:
        if not values_equal(a.properties, b.properties):
            return False

    child_key = a.child_key()
    if child_key is not None and child_key not in ignore:
        if len(a.children) != len(b.children):
            return False
        if not all(structural_equal(x, y) for x, y in zip(a.children, b.children)):
            return False

    return True
