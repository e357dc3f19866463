import pytest
import torch
import torch.nn as nn

from survgrad.utils.precision import model_precision, resolve_dtype

from conftest import MLP


def test_resolve_dtype():
    assert resolve_dtype("float") is torch.float32
    assert resolve_dtype("double") is torch.float64
    with pytest.raises(ValueError, match="dtype"):
        resolve_dtype("wrong dtype")


def _layers(net, kind):
    return [m for m in net.modules() if isinstance(m, kind)]


def test_model_precision_casts_and_restores():
    net = MLP(3, 1, dropout=0.3)
    net.train()
    with model_precision(net, torch.float64):
        assert all(p.dtype == torch.float64 for p in net.parameters())
        assert not any(bn.training for bn in _layers(net, nn.BatchNorm1d))
        assert all(d.p == 0.0 for d in _layers(net, nn.Dropout))
    assert all(p.dtype == torch.float32 for p in net.parameters())
    assert net.training
    assert all(bn.training for bn in _layers(net, nn.BatchNorm1d))
    assert all(d.p == 0.3 for d in _layers(net, nn.Dropout))


def test_model_precision_restores_on_error():
    net = MLP(3, 1)
    net.eval()
    with pytest.raises(RuntimeError):
        with model_precision(net, torch.float64):
            raise RuntimeError("boom")
    assert all(p.dtype == torch.float32 for p in net.parameters())
    assert not net.training
