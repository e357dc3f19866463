from contextlib import contextmanager

import torch
import torch.nn as nn

from .checks import check_choice

DTYPES = {"float": torch.float32, "double": torch.float64}


def resolve_dtype(name):
    """Map the user-facing precision tag onto a torch dtype."""
    check_choice(name, tuple(DTYPES), "dtype")
    return DTYPES[name]


def _module_dtype(net):
    for p in net.parameters():
        if p.is_floating_point():
            return p.dtype
    return None


@contextmanager
def model_precision(net: nn.Module, dtype: torch.dtype):
    """
    Run `net` in `dtype` with stochastic layers neutralised, then restore it.

    BatchNorm layers are put in eval mode so running stats are used and
    Dropout rates are set to zero; the original dtype, training flags and
    dropout rates are put back on exit, also when the body raises.
    """
    # --- Save states and neutralize stochastic layers ---
    was_training = net.training
    orig_dtype = _module_dtype(net)
    bn_layers = []
    dropout_layers = []

    for m in net.modules():
        if isinstance(m, nn.modules.batchnorm._BatchNorm):
            bn_layers.append((m, m.training))
            m.eval()
        elif isinstance(m, nn.modules.dropout._DropoutNd):
            dropout_layers.append((m, m.p))
            m.p = 0.0

    net.to(dtype)
    try:
        yield net
    finally:
        # --- Restore original states ---
        if orig_dtype is not None:
            net.to(orig_dtype)
        net.train(was_training)
        for m, was_train in bn_layers:
            m.train(was_train)
        for m, p in dropout_layers:
            m.p = p
