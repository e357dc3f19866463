from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np
import torch
import torch.nn as nn

MODEL_CLASSES = ("CoxTime", "DeepSurv", "DeepHit")

Array = np.ndarray


def _as_modalities(input_data) -> Tuple[Array, ...]:
    if isinstance(input_data, (list, tuple)):
        arrays = [np.asarray(x, dtype=np.float64) for x in input_data]
    else:
        arrays = [np.asarray(input_data, dtype=np.float64)]
    if not arrays:
        raise ValueError("'input_data' must contain at least one input array")
    out = []
    for a in arrays:
        if a.ndim == 0:
            raise ValueError("'input_data' arrays need a leading instance axis")
        if a.ndim == 1:
            a = a.reshape(-1, 1)
        a = a.copy()
        a.setflags(write=False)
        out.append(a)
    n = out[0].shape[0]
    if any(a.shape[0] != n for a in out):
        raise ValueError(f"all 'input_data' arrays must share the instance axis, "
                         f"got {[a.shape[0] for a in out]}")
    return tuple(out)


@dataclass(frozen=True, eq=False)
class Explainer:
    """
    Read-only bundle of a trained survival network and the data it explains.

    Attributes:
        model: torch module (or a wrapper exposing ``torch_module()``) called as
            ``model(*inputs)``.
        input_data: one array per input modality, instance axis first.
        model_class: "CoxTime", "DeepSurv" or "DeepHit".
        base_hazard: (T, 2) array of (time, hazard) rows, CoxTime/DeepSurv only.
        time_bins: (T,) discrete time axis, DeepHit only.
        time_standardize: (mean, std) of the CoxTime duration transform.
        log_duration: CoxTime durations were log1p-transformed before
            standardisation.
        preprocess_fun: CoxTime only, replaces the default time-covariate
            augmentation (time appended to the first, tabular input) for
            networks with another input layout. Must be a pure function of
            the list of input tensors; see `survgrad.models.CoxTime`. Use a
            module-level function if the explainer is to be saved.
    """
    model: nn.Module
    input_data: Tuple[Array, ...]
    model_class: str
    base_hazard: Optional[Array] = None
    time_bins: Optional[Array] = None
    time_standardize: Optional[Tuple[float, float]] = None
    log_duration: bool = False
    preprocess_fun: Optional[Callable] = None

    def __post_init__(self):
        if self.model_class not in MODEL_CLASSES:
            raise ValueError(f"'model_class' must be one of {list(MODEL_CLASSES)}, got {self.model_class!r}")
        if not isinstance(self.torch_module(), nn.Module):
            raise TypeError("'model' must be a torch.nn.Module or expose torch_module()")
        object.__setattr__(self, "input_data", _as_modalities(self.input_data))

        if self.model_class in ("CoxTime", "DeepSurv"):
            if self.base_hazard is None:
                raise ValueError(f"{self.model_class} explainers require 'base_hazard'")
            bh = np.asarray(self.base_hazard, dtype=np.float64)
            if bh.ndim != 2 or bh.shape[1] != 2 or bh.shape[0] == 0:
                raise ValueError(f"'base_hazard' must have shape (T, 2) of (time, hazard) rows, got {bh.shape}")
            bh = bh.copy()
            bh.setflags(write=False)
            object.__setattr__(self, "base_hazard", bh)
        else:
            if self.time_bins is None:
                raise ValueError("DeepHit explainers require 'time_bins'")
            tb = np.asarray(self.time_bins, dtype=np.float64).ravel().copy()
            if tb.size == 0:
                raise ValueError("'time_bins' must not be empty")
            tb.setflags(write=False)
            object.__setattr__(self, "time_bins", tb)

        if self.time_standardize is not None:
            mean, std = (float(v) for v in self.time_standardize)
            if std <= 0:
                raise ValueError(f"'time_standardize' std must be positive, got {std}")
            object.__setattr__(self, "time_standardize", (mean, std))

        if self.preprocess_fun is not None:
            if not callable(self.preprocess_fun):
                raise TypeError(f"'preprocess_fun' must be callable, got {type(self.preprocess_fun).__name__}")
            if self.model_class != "CoxTime":
                raise ValueError(f"'preprocess_fun' is only used by CoxTime explainers, got {self.model_class}")

    # ------------------------------------------------------------------
    def torch_module(self) -> nn.Module:
        m = self.model
        return m.torch_module() if hasattr(m, "torch_module") else m

    @property
    def n_instances(self) -> int:
        return self.input_data[0].shape[0]

    @property
    def time(self) -> Array:
        if self.model_class == "DeepHit":
            return self.time_bins
        return self.base_hazard[:, 0]

    def transform_time(self, t: Array) -> Array:
        """Map original durations onto the scale the CoxTime network was trained on."""
        t = np.asarray(t, dtype=np.float64)
        if self.log_duration:
            t = np.log1p(t)
        if self.time_standardize is not None:
            mean, std = self.time_standardize
            t = (t - mean) / std
        return t

    # ------------------------------------------------------------------
    def save(self, path: str):
        torch.save(self, path)

    @staticmethod
    def load(path: str, map_location=None) -> "Explainer":
        exp = torch.load(path, map_location=map_location, weights_only=False)
        if not isinstance(exp, Explainer):
            raise TypeError(f"{path} does not hold a saved Explainer (got {type(exp).__name__})")
        return exp
