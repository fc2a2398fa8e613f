"""
LAMA: large MIMO approximate message passing in the Gram domain.
"""

import torch

from ..core.constellation import Modulation
from ..core.linalg import hermitian, gram, safe_reciprocal
from .config import LamaConfig

def lama_denoiser(z, tau, constellation):
    """
    Posterior mean and variance of s given z = s + CN(0, tau) and a uniform
    prior over the constellation.

    Args:
        z: Noisy estimates [MT]
        tau: Per-entry noise variances [MT]
        constellation: Constellation instance

    Returns:
        tuple: (mean [MT], variance [MT])
    """
    if constellation.modulation is Modulation.BPSK:
        F = torch.tanh(2 * z.real / tau)
        # 0/0 means no information: uniform weights, zero mean
        F = torch.nan_to_num(F, nan=0.0)
        G = 1 - torch.abs(F) ** 2
        return F.to(z.dtype), G

    points = constellation.points_like(z)
    distances = torch.abs(z.unsqueeze(-1) - points.unsqueeze(0)) ** 2
    # subtract the per-row minimum before exponentiating
    exponents = -(distances - torch.min(distances, dim=-1, keepdim=True).values)
    logits = exponents / tau.unsqueeze(-1)
    # 0/0 (zero variance at the nearest point) counts as weight exp(0); a row of
    # equal distances with zero variance therefore becomes uniform
    logits = torch.nan_to_num(logits, nan=0.0)
    w = torch.softmax(logits, dim=-1)

    F = torch.matmul(w.to(points.dtype), points)
    G = torch.sum(w * torch.abs(points.unsqueeze(0) - F.unsqueeze(-1)) ** 2, dim=-1)
    return F, G

def lama_estimate(H, y, constellation, noise_var, config=LamaConfig()):
    """
    Run LAMA on the MT x MT Gram system.

    Args:
        H: Channel matrix [MR, MT]
        y: Received vector [MR]
        constellation: Constellation instance
        noise_var: Noise variance N0
        config: LamaConfig

    Returns:
        torch.Tensor: Final signal estimate z [MT] (before the denoiser)
    """
    num_rx, num_tx = H.shape
    N0 = float(noise_var)
    G = gram(H)
    diag_g = torch.diagonal(G).real
    g_tilde = safe_reciprocal(diag_g)
    G_tilde = torch.eye(num_tx, dtype=H.dtype, device=H.device) - g_tilde.to(H.dtype).unsqueeze(-1) * G
    g = diag_g / num_rx
    z_mf = g_tilde.to(H.dtype) * torch.matmul(hermitian(H), y)

    # prior: signal variance Es, first estimate is the matched filter
    tau_s = torch.full((num_tx,), constellation.Es, dtype=diag_g.dtype, device=H.device)
    tau_p = torch.dot(g, tau_s)
    shat = torch.zeros_like(z_mf)
    z = z_mf
    tau_z = (tau_p + N0) * g_tilde

    for _ in range(config.iters):
        shat_new, tau_s = lama_denoiser(z, tau_z, constellation)
        tau_p_new = config.theta_tau_s * torch.dot(g, tau_s) + (1 - config.theta_tau_s) * tau_p
        # Onsager correction
        v = tau_p_new / (tau_p + N0) * (z - shat)
        tau_z = config.theta_tau_z * (tau_p_new + N0) * g_tilde + (1 - config.theta_tau_z) * tau_z
        z = z_mf + torch.matmul(G_tilde, shat_new) + v
        shat, tau_p = shat_new, tau_p_new

    return z

def lama_detection(H, y, constellation, noise_var, config=LamaConfig()):
    # Output uses the refreshed estimate, not the denoised mean
    return constellation.decide(lama_estimate(H, y, constellation, noise_var, config))
