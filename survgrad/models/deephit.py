import torch
import torch.nn.functional as F

from .base_model import BaseSurvModel
from ..utils.registry import Registry


@Registry.register_model("DeepHit")
class DeepHit(BaseSurvModel):
    """
    DeepHit (single risk): one logit per discrete time bin.

    The probability mass function is the softmax over the logits with a zero
    logit appended for "beyond the last bin", which is then dropped, so the
    cif may stay below one at the last bin.
    """
    name = "DeepHit"
    targets = ("survival", "cif", "pmf")

    def forward(self, inputs):
        out = self.net(*inputs)
        out = out.reshape(out.shape[0], -1)            # (B, T)
        pmf = F.softmax(F.pad(out, (0, 1)), dim=1)[:, :-1]
        if self.target == "pmf":
            res = pmf
        else:
            cif = torch.cumsum(pmf, dim=1)
            res = cif if self.target == "cif" else 1.0 - cif
        return self._check_out(res)
