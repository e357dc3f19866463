from __future__ import annotations
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple

import numpy as np


def _frozen(a) -> np.ndarray:
    a = np.array(a)
    a.setflags(write=False)
    return a


@dataclass(frozen=True, eq=False)
class SurvResult:
    """
    Attribution curves of one call.

    res:  one (n_instances, features..., T) array per input modality
    pred: (n_instances, T) target prediction at the unperturbed instances
    time: (T,) timepoints shared by `res` and `pred`
    """
    res: Tuple[np.ndarray, ...]
    pred: np.ndarray
    time: np.ndarray
    method: str
    method_args: Mapping[str, Any]
    model_class: str
    competing_risks: bool = False

    def __post_init__(self):
        object.__setattr__(self, "res", tuple(_frozen(r) for r in self.res))
        object.__setattr__(self, "pred", _frozen(self.pred))
        object.__setattr__(self, "time", _frozen(self.time))
        object.__setattr__(self, "method_args", MappingProxyType(dict(self.method_args)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "res": [np.array(r) for r in self.res],
            "pred": np.array(self.pred),
            "time": np.array(self.time),
            "method": self.method,
            "method_args": dict(self.method_args),
            "competing_risks": self.competing_risks,
            "model_class": self.model_class,
        }
