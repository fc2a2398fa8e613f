"""
Tests for the sphere decoder and the K-Best detector.
"""

from itertools import product

import pytest
import torch

from mimodet.core.constellation import Constellation
from mimodet.core.randomness import RandomSource
from mimodet.detectors import KBestConfig, kbest_detection, ml_detection

def brute_force_ml(H, y, c):
    """Exhaustive minimizer of ||y - Hs||^2"""
    num_tx = H.shape[1]
    candidates = torch.tensor(list(product(range(c.size), repeat=num_tx)))
    S = c.symbols[candidates]                       # [A^MT, MT]
    metrics = torch.sum(torch.abs(y.unsqueeze(0) - S @ H.T) ** 2, dim=1)
    return candidates[torch.argmin(metrics)]

def _noisy_trial(rng, c, num_rx, num_tx, noise_std):
    idx = rng.randint(c.size, (num_tx,))
    H = rng.crandn(num_rx, num_tx)
    y = H @ c.symbols[idx] + noise_std * rng.crandn(num_rx)
    return idx, H, y

@pytest.mark.parametrize("name, num_rx, num_tx, noise_std", [
    ("QPSK", 4, 2, 0.8),
    ("QPSK", 2, 2, 1.0),
    ("16QAM", 3, 2, 1.0),
    ("BPSK", 3, 3, 0.7),
])
def test_sphere_decoder_matches_brute_force(name, num_rx, num_tx, noise_std):
    c = Constellation(name)
    rng = RandomSource(2024)
    for _ in range(20):
        _, H, y = _noisy_trial(rng, c, num_rx, num_tx, noise_std)
        det = ml_detection(H, y, c)
        assert det.indices.tolist() == brute_force_ml(H, y, c).tolist()
        assert torch.equal(det.bits, c.bits[det.indices])

@pytest.mark.parametrize("name, num_tx", [("QPSK", 2), ("QPSK", 3), ("16QAM", 2)])
def test_exhaustive_kbest_equals_ml(name, num_tx):
    c = Constellation(name)
    rng = RandomSource(99)
    config = KBestConfig(k=c.size ** num_tx)
    for _ in range(15):
        _, H, y = _noisy_trial(rng, c, num_tx + 2, num_tx, 1.0)
        assert kbest_detection(H, y, c, config).indices.tolist() == ml_detection(H, y, c).indices.tolist()

def test_noiseless_tree_search_recovers_transmit_vector():
    c = Constellation("16QAM")
    rng = RandomSource(7)
    for _ in range(5):
        idx, H, y = _noisy_trial(rng, c, 6, 4, 0.0)
        assert ml_detection(H, y, c).indices.tolist() == idx.tolist()
        assert kbest_detection(H, y, c).indices.tolist() == idx.tolist()

def test_kbest_with_single_survivor():
    c = Constellation("QPSK")
    rng = RandomSource(3)
    _, H, y = _noisy_trial(rng, c, 6, 4, 0.5)
    det = kbest_detection(H, y, c, KBestConfig(k=1))
    assert det.indices.shape == (4,)
    assert int(det.indices.min()) >= 0 and int(det.indices.max()) < c.size
