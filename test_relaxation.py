"""
Tests for TASER, TASER-R, RBR and the exact-SDR post-processing.
"""

import pytest
import torch

from mimodet.core.constellation import Constellation
from mimodet.core.randomness import RandomSource
from mimodet.detectors import (
    DetectionContext,
    DetectorKind,
    RbrConfig,
    TaserRConfig,
    apply_detector,
    rbr_barrier,
    rbr_lifted,
    sdr_r1_detection,
    sdr_rand_detection,
    taser_lifted,
    taser_r_lifted,
    validate_detectors
)

def _trial(seed, name, num_rx, num_tx, noise_std):
    rng = RandomSource(seed)
    c = Constellation(name)
    idx = rng.randint(c.size, (num_tx,))
    s = c.symbols[idx]
    H = rng.crandn(num_rx, num_tx)
    y = H @ s + noise_std * rng.crandn(num_rx)
    return c, idx, s, H, y

def _lifted_truth(s, name):
    if name == "QPSK":
        return torch.cat([s.real, s.imag, torch.ones(1, dtype=torch.float64)])
    return torch.cat([s.real, torch.ones(1, dtype=torch.float64)])

def _rank_one_solver(x):
    """Stands in for the external SDP solver: returns the PSD matrix x x^T"""
    def solve(T):
        assert T.shape == (x.shape[0], x.shape[0])
        return torch.outer(x, x)
    return solve

@pytest.mark.parametrize("name", ["BPSK", "QPSK"])
def test_lifted_outputs_are_signs(name):
    c, _, _, H, y = _trial(10, name, 8, 4, 0.6)
    N = 9 if name == "QPSK" else 5
    taser = taser_lifted(H, y, c)
    taser_r = taser_r_lifted(H, y, c, RandomSource(1))
    rbr = rbr_lifted(H, y, c)
    assert taser.shape == (N,) and taser_r.shape == (N,) and rbr.shape == (N - 1,)
    for x in (taser, taser_r, rbr):
        assert torch.all(torch.abs(x) == 1)
    # randomized rounding fixes the last coordinate
    assert taser_r[-1] == 1

def test_taser_zero_norm_column_is_guarded():
    c, _, _, H, y = _trial(12, "QPSK", 6, 3, 0.3)
    H[:, 1] = 0
    taser = taser_lifted(H, y, c)
    taser_r = taser_r_lifted(H, y, c, RandomSource(2))
    for x in (taser, taser_r):
        assert torch.all(torch.abs(x) == 1)
        # real and imaginary coordinates of the silent user
        assert x[1] == 1 and x[4] == 1
    ctx = DetectionContext(rng=RandomSource(3))
    for kind in (DetectorKind.TASER, DetectorKind.TASER_R):
        det = apply_detector(kind, H, y, c, 0.09, None, ctx)
        assert det.indices[1] == 3  # 1+1j

def test_taser_r_reproducible_after_restore():
    c, _, _, H, y = _trial(11, "QPSK", 8, 4, 0.8)
    rng = RandomSource(42)
    state = rng.snapshot()
    first = taser_r_lifted(H, y, c, rng, TaserRConfig(num_randomizations=20))
    rng.restore(state)
    second = taser_r_lifted(H, y, c, rng, TaserRConfig(num_randomizations=20))
    assert torch.equal(first, second)

def test_randomized_detector_leaves_rng_untouched():
    c, _, s, H, y = _trial(12, "QPSK", 8, 4, 0.8)
    rng = RandomSource(5)
    before = rng.snapshot()
    first = apply_detector(DetectorKind.TASER_R, H, y, c, context=DetectionContext(rng=rng))
    assert torch.equal(rng.snapshot(), before)
    second = apply_detector(DetectorKind.TASER_R, H, y, c, context=DetectionContext(rng=rng))
    assert torch.equal(first.indices, second.indices)

@pytest.mark.parametrize("name", ["BPSK", "QPSK"])
def test_sdr_rand_with_rank_one_solution(name):
    c, idx, s, H, y = _trial(13, name, 8, 3, 0.0)
    solver = _rank_one_solver(_lifted_truth(s, name))
    det = sdr_rand_detection(H, y, c, RandomSource(0), solver)
    assert det.indices.tolist() == idx.tolist()

def test_sdr_r1_with_rank_one_solution():
    c, idx, s, H, y = _trial(14, "BPSK", 8, 3, 0.0)
    solver = _rank_one_solver(_lifted_truth(s, "BPSK"))
    det = sdr_r1_detection(H, y, c, solver)
    # the principal eigenvector is only defined up to its sign
    assert det.indices.tolist() in (idx.tolist(), (1 - idx).tolist())

def test_sdr_requires_solver():
    c, _, _, H, y = _trial(15, "QPSK", 4, 2, 0.1)
    with pytest.raises(ValueError):
        sdr_r1_detection(H, y, c, None)
    with pytest.raises(ValueError):
        validate_detectors(["SDR_RAND"], "QPSK")
    validate_detectors(["SDR_RAND", "SDR_R1"], "QPSK", sdp_solver=lambda T: T)

def test_relaxation_rejects_qam():
    with pytest.raises(ValueError):
        validate_detectors(["TASER"], "16QAM")
    with pytest.raises(ValueError):
        validate_detectors(["RBR"], "64QAM")

def test_rbr_barrier_choices():
    assert rbr_barrier(9) == pytest.approx(1e-2 / 9)
    assert rbr_barrier(9, num_tx=4, per_user=True) == pytest.approx(1e-2 / 17)
    c, _, _, H, y = _trial(16, "BPSK", 6, 3, 0.5)
    x = rbr_lifted(H, y, c, RbrConfig(iters=5, barrier=1e-2 / 13))
    assert torch.all(torch.abs(x) == 1)
