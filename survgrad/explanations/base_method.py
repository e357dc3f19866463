"""
Batch executor shared by all survival attribution methods.

The full set of (instance, grid point) rows is processed in contiguous
chunks: each chunk is interpolated between reference and instance, passed
through the adapter's preprocessing hook and forward pass, and differentiated
once per timepoint. Weighted gradients are summed per selected instance, so
the result does not depend on the chunk size beyond floating-point summation
order.
"""
from __future__ import annotations
from typing import List, Sequence, Tuple

import torch
from tqdm.auto import tqdm

from .grid import IntegrationGrid
from ..models.base_model import BaseSurvModel
from ..utils.logging_utils import get_logger

log = get_logger()


def _bcast(v: torch.Tensor, like: torch.Tensor) -> torch.Tensor:
    """Reshape a per-row vector so it broadcasts over the remaining axes of `like`."""
    return v.reshape(-1, *([1] * (like.dim() - 1)))


def _timepoint_grads(out: torch.Tensor, inputs: List[torch.Tensor]) -> List[torch.Tensor]:
    """Gradient of every output column w.r.t. `inputs`, stacked on a trailing time axis."""
    n_t = out.shape[1]
    per_t = []
    for t in range(n_t):
        g = torch.autograd.grad(out[:, t].sum(), inputs, retain_graph=t < n_t - 1,
                                allow_unused=True)
        per_t.append([torch.zeros_like(x) if gi is None else gi for gi, x in zip(g, inputs)])
    return [torch.stack([g[m] for g in per_t], dim=-1) for m in range(len(inputs))]


def predict(adapter: BaseSurvModel, data: Sequence[torch.Tensor], index: torch.Tensor,
            batch_size: int) -> torch.Tensor:
    """Target prediction at the unperturbed instances, evaluated once per distinct index."""
    uniq, inverse = torch.unique(index, return_inverse=True)
    preds = []
    with torch.no_grad():
        for s in range(0, len(uniq), batch_size):
            idx = uniq[s:s + batch_size]
            preds.append(adapter.forward(adapter.preprocess([x[idx] for x in data])))
    return torch.cat(preds, dim=0)[inverse]


def base_method(adapter: BaseSurvModel,
                data: Sequence[torch.Tensor],
                instance: Sequence[int],
                grid: IntegrationGrid,
                inputs_ref: Sequence[torch.Tensor],
                batch_size: int,
                times_input: bool,
                second_order: bool,
                verbose: bool = False) -> Tuple[List[torch.Tensor], torch.Tensor]:
    """
    Accumulate weighted gradients over all (instance, grid point) rows.

    Args:
        adapter: model adapter providing preprocess / forward / reduce_grad.
        data: per-modality tensors with the full instance axis.
        instance: 0-based positions into `data`, order and duplicates kept.
        grid: interpolation fractions, weights and normalisation.
        inputs_ref: per-modality references already replicated to
            len(instance) * grid.n_grid rows (instance-major).
        batch_size: maximum number of rows per forward/backward pass.
        times_input: multiply gradients by the instance's own input value.
        second_order: normalise the sum by the number of grid cells.

    Returns:
        (res, pred): one (len(instance), features..., T) tensor per modality
        and the (len(instance), T) prediction at the instances.
    """
    dtype, device = adapter.dtype, adapter.device
    n_inst, n_grid = len(instance), grid.n_grid
    n_rows = n_inst * n_grid

    index = torch.as_tensor(list(instance), dtype=torch.long, device=device)
    fractions = torch.as_tensor(grid.fractions, dtype=dtype, device=device)
    weights = torch.as_tensor(grid.weights, dtype=dtype, device=device)

    acc = None
    for s in tqdm(range(0, n_rows, batch_size), desc=f"[{adapter.name}] batches",
                  leave=False, disable=not verbose):
        rows = torch.arange(s, min(s + batch_size, n_rows), device=device)
        pos = rows // n_grid                    # position in the selection
        point = rows % n_grid                   # grid point
        scale = fractions[point]

        x_inst = [x[index[pos]] for x in data]
        x_ref = [r[rows] for r in inputs_ref]
        x_interp = [r + _bcast(scale, r) * (x - r) for x, r in zip(x_inst, x_ref)]

        inputs = [x.detach().requires_grad_(True) for x in adapter.preprocess(x_interp)]
        out = adapter.forward(inputs)
        grads = _timepoint_grads(out, inputs)

        if times_input:
            with torch.no_grad():
                values = adapter.preprocess(x_inst)
            grads = [g * v.unsqueeze(-1) for g, v in zip(grads, values)]

        grads = adapter.reduce_grad(grads)
        grads = [g * _bcast(weights[point], g) for g in grads]

        if acc is None:
            acc = [torch.zeros((n_inst,) + tuple(g.shape[1:]), dtype=dtype, device=device) for g in grads]
        for a, g in zip(acc, grads):
            a.index_add_(0, pos, g.detach())

        log.debug("[%s] rows %d-%d of %d done", adapter.name, s, rows[-1].item(), n_rows)

    norm = grid.normalization if second_order else 1.0
    res = [a / norm for a in acc]
    pred = predict(adapter, data, index, batch_size)
    return res, pred
