"""
Monte-Carlo simulation of vector/symbol/bit error rates for MIMO detectors.
"""

import time
from dataclasses import dataclass, field

import numpy as np
import torch

from ..core.constellation import Constellation, Modulation
from ..core.randomness import RandomSource
from ..detectors.config import DetectorConfig
from ..detectors.dispatch import DetectionContext, apply_detector, validate_detectors
from ..utils.device_utils import select_device
from .channels import rayleigh_channel, los_channel
from .estimation import ChannelEstimator, estimate_channel

DEFAULT_DETECTORS = ('SIMO', 'MMSE', 'TASER_R', 'LAMA', 'ADMIN', 'OCD_BOX', 'KBEST')

@dataclass
class SimulationParameters:
    run_id: int = 0                 # seed of the randomness source
    MR: int = 32                    # receive antennas
    MT: int = 16                    # transmit antennas (not larger than MR)
    modulation: str = 'QPSK'
    trials: int = 10000
    snr_db_list: tuple = tuple(range(0, 13, 2))
    los: bool = False
    chest: str = 'PERF'
    detectors: tuple = DEFAULT_DETECTORS
    config: DetectorConfig = field(default_factory=DetectorConfig)

    @property
    def sim_name(self):
        return f"ERR_{self.MR}x{self.MT}_{self.modulation}_{self.trials}Trials"

@dataclass
class SimulationResults:
    detectors: list
    snr_db_list: list
    VER: np.ndarray   # [detectors, SNR points]
    SER: np.ndarray
    BER: np.ndarray
    time_elapsed: float = 0.0

    def as_dict(self):
        """{detector: {'VER': [...], 'SER': [...], 'BER': [...]}}"""
        return {
            det: {metric: getattr(self, metric)[d].tolist() for metric in ('VER', 'SER', 'BER')}
            for d, det in enumerate(self.detectors)
        }

def noise_variance(H, snr_db, Es):
    """N0 such that the average SNR per receive antenna is Es*||H||_F^2/MR/N0"""
    num_rx = H.shape[0]
    return Es * torch.linalg.matrix_norm(H).item() ** 2 * 10 ** (-snr_db / 10) / num_rx

def simulate_error_rates(params, sdp_solver=None, device=None, dtype=torch.complex128):
    """
    Simulate VER/SER/BER of all configured detectors over the SNR list.

    Every detector sees the same channel, noise and transmit vector in each
    trial. Configuration errors are raised before the first trial.

    Args:
        params: SimulationParameters
        sdp_solver: Callable T -> S for the exact SDR detectors
        device: Device to run on
        dtype: Complex dtype for channels and observations

    Returns:
        SimulationResults: Error rates per detector and SNR point
    """
    device = select_device(device)
    modulation = Modulation.from_name(params.modulation)
    kinds = validate_detectors(params.detectors, modulation, sdp_solver)
    chest = ChannelEstimator.from_name(params.chest)

    rng = RandomSource(params.run_id, device)
    constellation = Constellation(modulation, device=device, dtype=dtype)
    Q = constellation.num_bits_per_symbol
    num_det = len(kinds)
    num_snr = len(params.snr_db_list)

    VER = np.zeros((num_det, num_snr))
    SER = np.zeros((num_det, num_snr))
    BER = np.zeros((num_det, num_snr))

    print(f"Simulating {params.sim_name}: {', '.join(k.value for k in kinds)}")

    # random bit stream (trial x antenna x bit)
    bits = rng.randint(2, (params.trials, params.MT, Q)).to(torch.int8)

    time_elapsed = 0.0
    tic = time.time()
    for t in range(params.trials):
        idx = constellation.indices_from_bits(bits[t])
        s = constellation.symbol(idx)

        n = rng.crandn(params.MR, dtype=dtype)
        n_H = rng.crandn(params.MR, params.MT, dtype=dtype)
        if params.los:
            H = los_channel(params.MR, params.MT, rng, dtype=dtype)
        else:
            H = rayleigh_channel(params.MR, params.MT, rng, dtype=dtype)
        x = torch.matmul(H, s)

        for k, snr_db in enumerate(params.snr_db_list):
            N0 = noise_variance(H, snr_db, constellation.Es)
            y = x + N0 ** 0.5 * n
            H_est = estimate_channel(chest, H, n_H, N0, constellation.Es, params.MT)
            context = DetectionContext(s=s, rng=rng, sdp_solver=sdp_solver)

            for d, kind in enumerate(kinds):
                detection = apply_detector(kind, H_est, y, constellation, N0, params.config, context)
                err = idx != detection.indices
                VER[d, k] += err.any().item()
                SER[d, k] += err.sum().item() / params.MT
                BER[d, k] += (bits[t] != detection.bits).sum().item() / (params.MT * Q)

        # progress report
        if time.time() - tic > 10:
            time_elapsed += time.time() - tic
            remaining = time_elapsed * (params.trials / (t + 1) - 1) / 60
            print(f"estimated remaining simulation time: {remaining:3.0f} min.")
            tic = time.time()

    time_elapsed += time.time() - tic
    results = SimulationResults(
        detectors=[k.value for k in kinds],
        snr_db_list=list(params.snr_db_list),
        VER=VER / params.trials,
        SER=SER / params.trials,
        BER=BER / params.trials,
        time_elapsed=time_elapsed
    )

    for d, det in enumerate(results.detectors):
        rates = ", ".join(f"{snr} dB: {v:.6f}" for snr, v in zip(results.snr_db_list, results.VER[d]))
        print(f"  {det}: VER = [{rates}]")
    print(f"Total simulation time: {time_elapsed:.2f}s")
    return results
