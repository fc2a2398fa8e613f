"""
Tests for the linear-algebra helpers and the real-domain lifting.
"""

import pytest
import torch

from mimodet.core.constellation import Constellation
from mimodet.core.linalg import (
    cholesky_factor,
    cholesky_solve,
    gram,
    hard_sign,
    lift_to_real,
    project_box,
    quadratic_cost,
    unlift
)
from mimodet.core.randomness import RandomSource

@pytest.mark.parametrize("name", ["BPSK", "QPSK"])
def test_lifted_cost_equals_residual_energy(name):
    rng = RandomSource(1)
    c = Constellation(name)
    H = rng.crandn(5, 3)
    y = rng.crandn(5)
    s = c.symbols[rng.randint(c.size, (3,))]
    T, N = lift_to_real(H, y, c.modulation)

    if name == "QPSK":
        assert N == 7
        x = torch.cat([s.real, s.imag, torch.ones(1, dtype=torch.float64)])
    else:
        assert N == 4
        x = torch.cat([s.real, torch.ones(1, dtype=torch.float64)])

    residual = torch.sum(torch.abs(y - H @ s) ** 2)
    assert quadratic_cost(T, x.unsqueeze(-1))[0].item() == pytest.approx(residual.item())
    assert torch.allclose(T, T.T)
    assert torch.allclose(unlift(x, 3, c.modulation), s)

def test_lifting_rejects_qam():
    H = torch.ones((2, 2), dtype=torch.complex128)
    y = torch.ones(2, dtype=torch.complex128)
    with pytest.raises(ValueError):
        lift_to_real(H, y, "16QAM")

def test_cholesky_solve_matches_solve():
    rng = RandomSource(3)
    H = rng.crandn(6, 4)
    G = gram(H) + 0.1 * torch.eye(4, dtype=H.dtype)
    b = rng.crandn(4)
    x = cholesky_solve(cholesky_factor(G), b)
    assert torch.allclose(x, torch.linalg.solve(G, b))

def test_project_box():
    s = torch.tensor([2.5 - 0.5j, -4 + 4j, 0.1 + 0.2j], dtype=torch.complex128)
    p = project_box(s, 1.0)
    assert p.tolist() == [1 - 0.5j, -1 + 1j, 0.1 + 0.2j]

def test_hard_sign_maps_zero_to_plus_one():
    x = torch.tensor([-0.3, 0.0, 2.0], dtype=torch.float64)
    assert hard_sign(x).tolist() == [-1.0, 1.0, 1.0]
