import numpy as np
import pytest
import torch
import torch.nn as nn

from survgrad import Explainer


class MLP(nn.Module):
    """Small vanilla MLP in the shape survival nets are usually trained with."""
    def __init__(self, in_dim, out_dim, hidden=8, batch_norm=True, dropout=0.1):
        super().__init__()
        layers = [nn.Linear(in_dim, hidden), nn.ReLU()]
        if batch_norm:
            layers.append(nn.BatchNorm1d(hidden))
        if dropout:
            layers.append(nn.Dropout(dropout))
        layers += [nn.Linear(hidden, hidden), nn.Tanh(), nn.Linear(hidden, out_dim)]
        self.net = nn.Sequential(*layers)

    def forward(self, x):
        return self.net(x)


class TabImageNet(nn.Module):
    """Two-input net: tabular (B, D) plus image-like (B, C, H, W)."""
    def __init__(self, tab_dim, img_shape, out_dim):
        super().__init__()
        self.img = nn.Sequential(nn.Conv2d(img_shape[0], 2, kernel_size=2), nn.Tanh(), nn.Flatten())
        n_img = 2 * (img_shape[1] - 1) * (img_shape[2] - 1)
        self.head = nn.Sequential(nn.Linear(tab_dim + n_img, 8), nn.Tanh(), nn.Linear(8, out_dim))

    def forward(self, x_tab, x_img):
        return self.head(torch.cat([x_tab, self.img(x_img)], dim=1))


class ImageTabNet(TabImageNet):
    """Same net with the image input first, as multi-modal CoxTime models often take it."""
    def forward(self, x_img, x_tab):
        return super().forward(x_tab, x_img)


class ModelWrapper:
    """Mimics model wrappers that expose their network through torch_module()."""
    def __init__(self, net):
        self.net = net

    def torch_module(self):
        return self.net


def base_hazard(n_time, rate=0.05):
    return np.column_stack([np.linspace(0.5, 10.0, n_time), np.full(n_time, rate)])


def time_on_second_input(time_covariate):
    """CoxTime preprocessing for (image, tabular) inputs: time goes onto the tabular one."""
    t = torch.tensor(np.asarray(time_covariate)).reshape(-1, 1)

    def preprocess(inputs):
        img, tab = inputs
        n_t = len(t)
        t_col = t.to(tab).repeat(tab.shape[0], 1)
        return [img.repeat_interleave(n_t, dim=0),
                torch.cat([tab.repeat_interleave(n_t, dim=0), t_col], dim=1)]
    return preprocess


@pytest.fixture
def rng():
    return np.random.default_rng(0)


@pytest.fixture
def deepsurv_explainer(rng):
    torch.manual_seed(0)
    X = rng.normal(size=(10, 5))
    return Explainer(MLP(5, 1), [X], "DeepSurv", base_hazard=base_hazard(20))


@pytest.fixture
def deephit_explainer(rng):
    torch.manual_seed(1)
    X = rng.normal(size=(8, 4))
    return Explainer(MLP(4, 10), [X], "DeepHit", time_bins=np.arange(1, 11) * 2.0)


@pytest.fixture
def coxtime_explainer(rng):
    torch.manual_seed(2)
    X = rng.normal(size=(6, 4))
    return Explainer(MLP(5, 1), [X], "CoxTime", base_hazard=base_hazard(15),
                     time_standardize=(1.2, 0.8), log_duration=True)


@pytest.fixture
def multimodal_explainer(rng):
    torch.manual_seed(3)
    X_tab = rng.normal(size=(5, 3))
    X_img = rng.normal(size=(5, 2, 3, 3))
    return Explainer(TabImageNet(3, (2, 3, 3), 1), [X_tab, X_img], "DeepSurv",
                     base_hazard=base_hazard(12))


@pytest.fixture
def coxtime_multimodal_explainer(rng):
    torch.manual_seed(4)
    X_img = rng.normal(size=(4, 2, 3, 3))
    X_tab = rng.normal(size=(4, 4))
    bh = base_hazard(12)
    return Explainer(ImageTabNet(5, (2, 3, 3), 1), [X_img, X_tab], "CoxTime", base_hazard=bh,
                     preprocess_fun=time_on_second_input(bh[:, 0]))
