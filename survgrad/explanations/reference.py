from __future__ import annotations
from typing import List, Optional, Sequence

import numpy as np


def mean_reference(input_data: Sequence[np.ndarray]) -> List[np.ndarray]:
    """Per-modality mean over the instance axis, shape (1, features...)."""
    refs = []
    for x in input_data:
        ref = np.asarray(x, dtype=np.float64).mean(axis=0)
        if ref.ndim == 0:
            ref = ref.reshape(1, 1)
        else:
            ref = ref[None, ...]
        refs.append(ref)
    return refs


def resolve_reference(input_data: Sequence[np.ndarray], x_ref, n_instances: int) -> List[np.ndarray]:
    """
    Validate a user reference against the stored data, or build the mean one.

    `x_ref` is an array (single modality) or a list with one array per
    modality. Each array is either shaped like one instance (features...) or
    carries a leading axis of length 1 or `n_instances`.
    """
    if x_ref is None:
        return mean_reference(input_data)

    if not isinstance(x_ref, (list, tuple)):
        x_ref = [x_ref]
    if len(x_ref) != len(input_data):
        hint = ""
        if len(input_data) == 1:
            hint = "; a list is read as one reference per input, wrap a single reference in np.asarray(...)"
        raise ValueError(f"'x_ref' must provide one reference per input ({len(input_data)}), "
                         f"got {len(x_ref)}{hint}")

    refs = []
    for m, (ref, x) in enumerate(zip(x_ref, input_data)):
        ref = np.array(ref, dtype=np.float64)   # copy, caller data stays untouched
        feat_shape = x.shape[1:]
        if ref.shape == feat_shape:
            ref = ref[None, ...]
        if ref.shape[1:] != feat_shape or ref.shape[0] not in (1, n_instances):
            raise ValueError(f"'x_ref' for input {m + 1} must have shape {feat_shape} or "
                             f"(1 or {n_instances}, {', '.join(map(str, feat_shape))}), got {ref.shape}")
        refs.append(ref)
    return refs


def replicate_reference(refs: Sequence[np.ndarray], n_instances: int, n_grid: int) -> List[np.ndarray]:
    """
    Expand references to one row per (instance, grid point), instance-major.

    Row r belongs to instance r // n_grid and grid point r % n_grid.
    """
    out = []
    for ref in refs:
        if ref.shape[0] == 1:
            rep = np.repeat(ref, n_instances * n_grid, axis=0)
        else:
            rep = np.repeat(ref, n_grid, axis=0)
        out.append(rep)
    return out


def zero_reference(input_data: Sequence[np.ndarray]) -> List[np.ndarray]:
    return [np.zeros((1,) + x.shape[1:]) for x in input_data]
