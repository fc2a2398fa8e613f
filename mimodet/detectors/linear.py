"""
Linear detection algorithms: SIMO bound, MRC, ZF and MMSE.
"""

import torch

from ..core.linalg import hermitian, gram, safe_reciprocal

def _equalizer(H, reg=0.0):
    """W = (H^H H + reg*I)^(-1) H^H, pseudo-inverse if the Gram matrix is singular"""
    H_h = hermitian(H)
    G = gram(H)
    if reg:
        G = G + reg * torch.eye(G.shape[-1], dtype=G.dtype, device=G.device)
    try:
        return torch.linalg.solve(G, H_h)
    except torch.linalg.LinAlgError:
        return torch.linalg.pinv(G) @ H_h

def simo_detection(H, y, constellation, s):
    """
    SIMO lower bound: cancel the interference of the known transmit symbols
    and apply single-antenna MRC to each stream.

    Args:
        H: Channel matrix [MR, MT]
        y: Received vector [MR]
        constellation: Constellation instance
        s: Ground-truth transmit symbols [MT]

    Returns:
        Detection: Symbol indices and bits
    """
    s = s.to(H.dtype)
    z = y - torch.matmul(H, s)
    col_norms = torch.sum(torch.abs(H) ** 2, dim=0)
    inv_norms = safe_reciprocal(col_norms)
    # yhat_m = z + h_m s_m, shat_m = h_m^H yhat_m / ||h_m||^2
    matched = torch.matmul(hermitian(H), z) + col_norms.to(H.dtype) * s
    shat = matched * inv_norms.to(H.dtype)
    return constellation.decide(shat)

def mrc_detection(H, y, constellation):
    """Unbiased MRC detection"""
    shat = torch.matmul(hermitian(H), y)
    gain = torch.diagonal(gram(H)).real
    return constellation.decide(shat, gain)

def zf_detection(H, y, constellation):
    """Unbiased Zero-Forcing detection"""
    W = _equalizer(H)
    shat = torch.matmul(W, y)
    gain = torch.diagonal(torch.matmul(W, H)).real
    return constellation.decide(shat, gain)

def mmse_detection(H, y, constellation, noise_var):
    """Unbiased MMSE detection, regularization N0/Es"""
    W = _equalizer(H, float(noise_var) / constellation.Es)
    shat = torch.matmul(W, y)
    gain = torch.diagonal(torch.matmul(W, H)).real
    return constellation.decide(shat, gain)
