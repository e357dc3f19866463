from __future__ import annotations
import math
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, eq=False)
class IntegrationGrid:
    """
    Interpolation fractions between reference and instance, one per grid point.

    fractions: (n_grid,) scale applied to (x - x_ref)
    weights:   (n_grid,) quadrature weight of each grid point
    normalization: divisor applied once to the accumulated sum
    """
    fractions: np.ndarray
    weights: np.ndarray
    normalization: float

    @property
    def n_grid(self) -> int:
        return len(self.fractions)


def gradient_grid() -> IntegrationGrid:
    """The single point alpha = 1, i.e. the instance itself."""
    one = np.ones(1)
    return IntegrationGrid(fractions=one, weights=one.copy(), normalization=1.0)


def hessian_grid(n_cells: int) -> IntegrationGrid:
    """
    Bilinear grid alpha_i * beta_j on the unit square for the integrated Hessian.

    `n_cells` is the total number of grid points and must be a perfect square
    k * k; alpha runs over the outer and beta over the inner loop with steps
    1/k, 2/k, ..., 1. Each point is weighted by alpha_i * beta_j and the sum is
    normalised by `n_cells`.
    """
    k = math.isqrt(int(n_cells)) if n_cells >= 1 else 0
    if n_cells < 1 or k * k != n_cells:
        raise ValueError(f"the integrated Hessian grid needs a perfect-square number of cells, got {n_cells}")
    steps = np.arange(1, k + 1, dtype=np.float64) / k
    alpha = np.repeat(steps, k)
    beta = np.tile(steps, k)
    scale = alpha * beta
    return IntegrationGrid(fractions=scale, weights=scale.copy(), normalization=float(n_cells))
