import torch

from .base_model import HazardSurvModel
from ..utils.registry import Registry


@Registry.register_model("DeepSurv")
class DeepSurv(HazardSurvModel):
    """DeepSurv: a time-independent log-risk g(x) scaled by the baseline hazard."""
    name = "DeepSurv"

    @classmethod
    def from_explainer(cls, explainer, target, dtype, device, net=None, use_base_hazard=True, **options):
        base_hazard = explainer.base_hazard[:, 1] if use_base_hazard else None
        return cls(explainer.torch_module() if net is None else net, explainer.time, target, dtype, device,
                   base_hazard=base_hazard)

    def forward(self, inputs):
        out = self.net(*inputs)
        score = torch.exp(out.reshape(out.shape[0], -1))  # (B, 1)
        if score.shape[1] != 1:
            raise RuntimeError(f"[DeepSurv] expected a single log-risk per row, got {tuple(out.shape)}")
        score = score.expand(-1, self.n_timepoints)
        return self._check_out(self.transform(score))
