from abc import ABC, abstractmethod
from typing import List, Sequence

import numpy as np
import torch
import torch.nn as nn


class BaseSurvModel(ABC):
    """
    Uniform calling convention over one family of neural survival models.

    An adapter turns a batch of (per-modality) input tensors into the
    requested survival target evaluated on the model's time grid, shape
    (batch, T). `preprocess` and `reduce_grad` bracket the forward pass for
    families whose network sees a different input layout than the caller
    (CoxTime's time covariate); both default to the identity.
    """
    name = "BaseSurvModel"
    targets: Sequence[str] = ()

    def __init__(self, net: nn.Module, time: np.ndarray, target: str,
                 dtype: torch.dtype, device: torch.device):
        self.net = net
        self.time = np.asarray(time, dtype=np.float64)
        self.target = target
        self.dtype = dtype
        self.device = device

    @classmethod
    def from_explainer(cls, explainer, target, dtype, device, net=None, **options):
        # options a family does not use (use_base_hazard, include_time) are ignored
        return cls(explainer.torch_module() if net is None else net, explainer.time, target, dtype, device)

    @property
    def n_timepoints(self) -> int:
        return len(self.time)

    def _tensor(self, x) -> torch.Tensor:
        return torch.tensor(np.asarray(x), dtype=self.dtype, device=self.device)

    def _check_out(self, out: torch.Tensor) -> torch.Tensor:
        if out.dim() != 2 or out.shape[1] != self.n_timepoints:
            raise RuntimeError(f"[{self.name}] model output of shape {tuple(out.shape)} does not match "
                               f"the {self.n_timepoints} timepoints of the time grid")
        return out

    def preprocess(self, inputs: List[torch.Tensor]) -> List[torch.Tensor]:
        return inputs

    def reduce_grad(self, grads: List[torch.Tensor]) -> List[torch.Tensor]:
        return grads

    @abstractmethod
    def forward(self, inputs: List[torch.Tensor]) -> torch.Tensor:
        """Return the target-transformed prediction, shape (batch, T)."""
        ...


class HazardSurvModel(BaseSurvModel):
    """Shared target transforms of the proportional-hazards families (CoxTime, DeepSurv)."""
    targets = ("survival", "cum_hazard", "hazard")

    def __init__(self, net, time, target, dtype, device, base_hazard=None):
        super().__init__(net, time, target, dtype, device)
        if base_hazard is None:
            base_hazard = np.ones(len(self.time))
        self.base_hazard = self._tensor(base_hazard).reshape(1, -1)

    def transform(self, score: torch.Tensor) -> torch.Tensor:
        # score: (batch, T) relative risk exp(g(x[, t]))
        hazard = score * self.base_hazard
        if self.target == "hazard":
            return hazard
        cum_hazard = torch.cumsum(hazard, dim=1)
        if self.target == "cum_hazard":
            return cum_hazard
        return torch.exp(-cum_hazard)
