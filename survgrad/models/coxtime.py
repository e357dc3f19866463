import torch

from .base_model import HazardSurvModel
from ..utils.registry import Registry


@Registry.register_model("CoxTime")
class CoxTime(HazardSurvModel):
    """
    Cox-Time: a time-dependent log-risk g(x, t).

    The network sees the tabular input with the (transformed) time appended
    as last column, so every row is replicated once per timepoint before the
    forward pass. Gradients on the replicated rows are summed back onto the
    original row; the time column is dropped from them unless `remove_time`
    is False.

    Networks with another input layout (e.g. image first, tabular second)
    pass their own `preprocess_fun`: a pure function mapping the list of
    per-input tensors of B rows onto the network inputs of B * T rows, each
    row repeated T times in a row (``repeat_interleave``). Any trailing
    columns it adds to a tabular input are treated as time columns.
    """
    name = "CoxTime"

    def __init__(self, net, time, target, dtype, device, feature_shapes, base_hazard=None,
                 time_covariate=None, remove_time=True, preprocess_fun=None):
        super().__init__(net, time, target, dtype, device, base_hazard=base_hazard)
        if time_covariate is None:
            time_covariate = self.time
        self.time_covariate = self._tensor(time_covariate).reshape(-1)
        self.feature_shapes = [tuple(s) for s in feature_shapes]
        self.remove_time = remove_time
        self.preprocess_fun = preprocess_fun

    @classmethod
    def from_explainer(cls, explainer, target, dtype, device, net=None, use_base_hazard=True,
                       include_time=False, **options):
        base_hazard = explainer.base_hazard[:, 1] if use_base_hazard else None
        return cls(explainer.torch_module() if net is None else net, explainer.time,
                   target, dtype, device,
                   feature_shapes=[x.shape[1:] for x in explainer.input_data],
                   base_hazard=base_hazard,
                   time_covariate=explainer.transform_time(explainer.time),
                   remove_time=not include_time,
                   preprocess_fun=explainer.preprocess_fun)

    def preprocess(self, inputs):
        if self.preprocess_fun is not None:
            return self._custom_preprocess(inputs)
        tab = inputs[0]
        if tab.dim() != 2:
            raise ValueError(f"[CoxTime] the first input must be tabular (batch, features), got {tuple(tab.shape)}; "
                             f"pass a 'preprocess_fun' for other input layouts")
        n_t = self.n_timepoints
        n_rows = tab.shape[0]
        t_col = self.time_covariate.repeat(n_rows).reshape(-1, 1)
        out = [torch.cat([tab.repeat_interleave(n_t, dim=0), t_col], dim=1)]
        out += [x.repeat_interleave(n_t, dim=0) for x in inputs[1:]]
        return out

    def _custom_preprocess(self, inputs):
        out = self.preprocess_fun(list(inputs))
        if isinstance(out, torch.Tensor):
            out = [out]
        out = list(out)
        n_expected = inputs[0].shape[0] * self.n_timepoints
        if len(out) != len(inputs) or any(x.shape[0] != n_expected for x in out):
            raise RuntimeError(f"[CoxTime] 'preprocess_fun' must return {len(inputs)} input(s) with "
                               f"{n_expected} rows each (one per instance and timepoint), got "
                               f"{[tuple(x.shape) for x in out]}")
        return out

    def forward(self, inputs):
        out = self.net(*inputs)
        out = out.reshape(out.shape[0], -1)
        if out.shape[1] != 1:
            raise RuntimeError(f"[CoxTime] expected a single log-risk per row, got {tuple(out.shape)}")
        score = torch.exp(out.reshape(-1, self.n_timepoints))   # (B, T)
        return self._check_out(self.transform(score))

    def reduce_grad(self, grads):
        n_t = self.n_timepoints
        out = []
        for g, shape in zip(grads, self.feature_shapes):
            g = g.reshape(g.shape[0] // n_t, n_t, *g.shape[1:]).sum(dim=1)
            if self.remove_time and tuple(g.shape[1:-1]) != shape:
                if len(shape) != 1 or g.dim() != 3 or g.shape[1] < shape[0]:
                    raise RuntimeError(f"[CoxTime] cannot map network input of shape {tuple(g.shape[1:-1])} "
                                       f"back onto input features {shape}")
                g = g[:, :shape[0]]
            out.append(g)
        return out
