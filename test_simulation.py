"""
Tests for the Monte-Carlo harness, channel models, channel estimation and result export.
"""

import csv
import math

import numpy as np
import pytest
import torch

from mimodet.__main__ import main
from mimodet.core.randomness import RandomSource
from mimodet.detectors import DetectorConfig, KBestConfig
from mimodet.simulation import (
    ChannelEstimator,
    SimulationParameters,
    beaches_denoiser,
    estimate_channel,
    los_channel,
    noise_variance,
    rayleigh_channel,
    simulate_error_rates
)
from mimodet.utils.results import save_results_to_csv, save_simulation_parameters

def _params(**kwargs):
    defaults = dict(MR=4, MT=2, modulation='QPSK', trials=4, snr_db_list=(0, 10),
                    detectors=('SIMO', 'MMSE', 'ML', 'KBEST', 'TASER_R', 'LAMA'),
                    config=DetectorConfig(kbest=KBestConfig(k=16)))
    defaults.update(kwargs)
    return SimulationParameters(**defaults)

def test_simulation_shapes_and_ranges():
    params = _params()
    results = simulate_error_rates(params, device='cpu')
    assert results.detectors == ['SIMO', 'MMSE', 'ML', 'KBEST', 'TASER_R', 'LAMA']
    for rates in (results.VER, results.SER, results.BER):
        assert rates.shape == (6, 2)
        assert np.all(rates >= 0) and np.all(rates <= 1)
    # every vector error contains at least one symbol error
    assert np.all(results.SER <= results.VER + 1e-12)
    # exhaustive K-Best is ML
    assert np.array_equal(results.VER[2], results.VER[3])
    assert set(results.as_dict()['MMSE']) == {'VER', 'SER', 'BER'}

def test_simulation_is_reproducible():
    first = simulate_error_rates(_params(run_id=3), device='cpu')
    second = simulate_error_rates(_params(run_id=3), device='cpu')
    assert np.array_equal(first.BER, second.BER)

def test_randomized_detector_does_not_perturb_others():
    without = simulate_error_rates(_params(detectors=('MMSE', 'ML'), run_id=1), device='cpu')
    with_rand = simulate_error_rates(_params(detectors=('MMSE', 'TASER_R', 'ML'), run_id=1), device='cpu')
    assert np.array_equal(without.BER[0], with_rand.BER[0])
    assert np.array_equal(without.BER[1], with_rand.BER[2])

@pytest.mark.parametrize("bad", [
    dict(detectors=('MMSE', 'ZF-SIC')),
    dict(chest='LMMSE'),
    dict(modulation='8PSK'),
    dict(modulation='16QAM', detectors=('TASER',)),
    dict(detectors=('SDR_R1',)),
])
def test_configuration_errors_are_raised_up_front(bad):
    with pytest.raises(ValueError):
        simulate_error_rates(_params(**bad), device='cpu')

def test_los_channel():
    H = los_channel(16, 4, RandomSource(0))
    assert H.shape == (16, 4)
    assert H.dtype == torch.complex128
    assert torch.all(torch.isfinite(torch.view_as_real(H)))
    # unit-gain planar wave at the reference distance
    assert torch.allclose(torch.abs(H), torch.ones(16, 4, dtype=torch.float64), atol=0.02)
    assert los_channel(8, 1, RandomSource(1)).shape == (8, 1)

def test_channel_estimators():
    rng = RandomSource(2)
    H = rayleigh_channel(16, 3, rng)
    n_H = rng.crandn(16, 3)
    assert estimate_channel('PERF', H, n_H, 0.1, 2.0, 3) is H
    H_ml = estimate_channel(ChannelEstimator.ML, H, n_H, 0.6, 2.0, 3)
    assert torch.allclose(H_ml, H + math.sqrt(0.1) * n_H)
    H_b = estimate_channel('beaches', H, n_H, 0.6, 2.0, 3)
    assert H_b.shape == H.shape
    assert torch.all(torch.isfinite(torch.view_as_real(H_b)))
    with pytest.raises(ValueError):
        ChannelEstimator.from_name('LS')

def test_beaches_keeps_sparse_beamspace_channel():
    """A single strong beam survives the shrinkage almost unchanged"""
    num_rx = 32
    beam = torch.zeros(num_rx, 1, dtype=torch.complex128)
    beam[5, 0] = 10 * num_rx ** 0.5
    H = torch.fft.ifft(beam, dim=0) * num_rx ** 0.5
    noise = 0.01 * RandomSource(4).crandn(num_rx, 1)
    H_b = beaches_denoiser(H + noise, 1e-4)
    assert torch.linalg.norm(H_b - H) < torch.linalg.norm(noise)

def test_noise_variance():
    H = torch.ones((4, 2), dtype=torch.complex128)
    # Es * ||H||_F^2 / MR at 0 dB
    assert noise_variance(H, 0, 2.0) == pytest.approx(4.0)
    assert noise_variance(H, 10, 2.0) == pytest.approx(0.4)

def test_results_export(tmp_path):
    params = _params(trials=2, detectors=('MMSE', 'ZF'))
    results = simulate_error_rates(params, device='cpu')
    files = save_results_to_csv(tmp_path, results)
    assert [f.name for f in files] == ['ver_vs_snr.csv', 'ser_vs_snr.csv', 'ber_vs_snr.csv']
    with open(files[2], newline='') as f:
        rows = list(csv.reader(f))
    assert rows[0] == ['SNR (dB)', 'MMSE', 'ZF']
    assert [int(r[0]) for r in rows[1:]] == [0, 10]
    assert save_simulation_parameters(tmp_path, params, results).exists()

def test_cli_dry_run():
    assert main(['--dry-run', '--mr', '4', '--mt', '2', '--detectors', 'MMSE,KBEST']) is None
    with pytest.raises(ValueError):
        main(['--dry-run', '--detectors', 'SDR_RAND'])
