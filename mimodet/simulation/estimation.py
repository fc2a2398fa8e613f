"""
Channel estimation stage: perfect CSI, noisy ML estimate and BEACHES denoising.
"""

import math
from enum import Enum

import torch

class ChannelEstimator(Enum):
    PERF = 'PERF'
    ML = 'ML'
    BEACHES = 'BEACHES'

    @classmethod
    def from_name(cls, name):
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().upper())
        except ValueError:
            raise ValueError(f"Unknown channel estimator: {name}") from None

def beaches_denoiser(Hn, noise_var):
    """
    Beamspace channel estimation (BEACHES): soft-threshold every user column in
    the DFT domain with the threshold minimizing Stein's unbiased risk estimate.

    Args:
        Hn: Noisy channel estimate [MR, MT]
        noise_var: Per-entry noise variance of Hn

    Returns:
        torch.Tensor: Denoised channel estimate [MR, MT]
    """
    num_rx, num_tx = Hn.shape
    N0 = float(noise_var)
    h_noisy = torch.fft.fft(Hn, dim=0) / math.sqrt(num_rx)
    h_denoised = torch.zeros_like(h_noisy)

    for uu in range(num_tx):
        magnitudes = torch.abs(h_noisy[:, uu])
        sorted_mag = torch.sort(magnitudes).values.tolist()
        N = len(sorted_mag)
        cumsum = 0.0
        cumsuminv = sum(1.0 / m for m in sorted_mag)
        tau_opt = math.inf
        sure_min = math.inf
        tau_low = 0.0

        for bb, tau_high in enumerate(sorted_mag):
            tau = max(tau_low, min(tau_high, N0 / (2 * (N - bb)) * cumsuminv))
            tau_low = tau_high
            sure = (cumsum + (N - bb) * tau ** 2 + N * N0
                    - 2 * N0 * bb - tau * N0 * cumsuminv)
            cumsum += tau_high ** 2
            cumsuminv -= 1.0 / tau_high
            if sure < sure_min:
                sure_min = sure
                tau_opt = tau

        h_denoised[:, uu] = torch.sgn(h_noisy[:, uu]) * torch.clamp(magnitudes - tau_opt, min=0)

    return torch.fft.ifft(h_denoised, dim=0) * math.sqrt(num_rx)

def estimate_channel(estimator, H, pilot_noise, noise_var, Es, num_tx):
    """
    Return the channel matrix seen by the detectors.

    Args:
        estimator: ChannelEstimator or its name
        H: True channel [MR, MT]
        pilot_noise: Unit-variance CN noise realization [MR, MT]
        noise_var: Data noise variance N0
        Es: Average symbol energy
        num_tx: Number of users MT

    Returns:
        torch.Tensor: Channel estimate [MR, MT]
    """
    estimator = ChannelEstimator.from_name(estimator)
    if estimator is ChannelEstimator.PERF:
        return H
    noise_var_chest = float(noise_var) / Es / num_tx
    Hn = H + math.sqrt(noise_var_chest) * pilot_noise
    if estimator is ChannelEstimator.ML:
        return Hn
    return beaches_denoiser(Hn, noise_var_chest)
