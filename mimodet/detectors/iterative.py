"""
Iterative box-constrained detectors: ADMIN, BOX and optimized coordinate descent.
"""

import torch

from ..core.linalg import (
    hermitian,
    gram,
    cholesky_factor,
    cholesky_solve,
    project_box,
    safe_reciprocal
)
from .config import AdminConfig, BoxConfig, OcdConfig

def admin_estimate(H, y, constellation, noise_var, config=AdminConfig()):
    """
    ADMM-based infinity-norm detection (ADMIN).

    The regularized Gram matrix is factored once; every iteration reuses the
    triangular solves. A singular Gram matrix (N0 = 0 with a rank-deficient
    channel) falls back to its pseudo-inverse.

    Args:
        H: Channel matrix [MR, MT]
        y: Received vector [MR]
        constellation: Constellation instance
        noise_var: Noise variance N0
        config: AdminConfig

    Returns:
        torch.Tensor: Unprojected continuous estimate [MT]
    """
    num_tx = H.shape[-1]
    beta = float(noise_var) / constellation.Es * config.beta_scale
    G = gram(H) + beta * torch.eye(num_tx, dtype=H.dtype, device=H.device)
    try:
        L = cholesky_factor(G)
        solve = lambda b: cholesky_solve(L, b)
    except torch.linalg.LinAlgError:
        G_pinv = torch.linalg.pinv(G)
        solve = lambda b: torch.matmul(G_pinv, b)
    y_mf = torch.matmul(hermitian(H), y)
    zhat = torch.zeros(num_tx, dtype=H.dtype, device=H.device)
    lam = torch.zeros_like(zhat)
    shat = zhat

    for _ in range(config.iters):
        shat = solve(y_mf + beta * (zhat - lam))
        zhat = project_box(shat + lam, constellation.alpha)
        lam = lam - config.gamma * (zhat - shat)

    return shat

def admin_detection(H, y, constellation, noise_var, config=AdminConfig()):
    # Output uses the unprojected estimate
    return constellation.decide(admin_estimate(H, y, constellation, noise_var, config))

def box_estimate(H, y, constellation, config=BoxConfig()):
    """Projected gradient descent on ||y - Hs||^2 starting from the matched filter"""
    H_h = hermitian(H)
    shat = torch.matmul(H_h, y)
    for _ in range(config.iters):
        shat = shat - config.tau * torch.matmul(H_h, torch.matmul(H, shat) - y)
        shat = project_box(shat, constellation.alpha)
    return shat

def box_detection(H, y, constellation, config=BoxConfig()):
    return constellation.decide(box_estimate(H, y, constellation, config))

def _ocd_sweeps(H, y, dinv, p, iters, alpha=None):
    """
    Gauss-Seidel sweeps with an incrementally updated residual r = y - H z.

    Args:
        H: Channel matrix [MR, MT]
        y: Received vector [MR]
        dinv: Per-user inverse gains [MT]
        p: Per-user self-gains dinv*||h||^2 [MT]
        iters: Number of full sweeps
        alpha: Box half-width; None disables the projection

    Returns:
        torch.Tensor: Final per-user estimates [MT]
    """
    num_tx = H.shape[-1]
    r = y.clone()
    z = torch.zeros(num_tx, dtype=H.dtype, device=H.device)
    for _ in range(iters):
        for uu in range(num_tx):
            h = H[:, uu]
            znew = dinv[uu] * torch.vdot(h, r) + p[uu] * z[uu]
            if alpha is not None:
                znew = project_box(znew, alpha)
            r = r - h * (znew - z[uu])
            z[uu] = znew
    return z

def _column_norms(H):
    return torch.sum(torch.abs(H) ** 2, dim=0)

def ocd_mmse_estimate(H, y, constellation, noise_var, config=OcdConfig()):
    """Optimized coordinate descent for the MMSE problem"""
    reg = float(noise_var) / constellation.Es
    norms = _column_norms(H)
    # zero-norm columns with zero regularization keep a zero estimate
    dinv = safe_reciprocal(norms + reg)
    p = dinv * norms
    return _ocd_sweeps(H, y, dinv.to(H.dtype), p.to(H.dtype), config.iters)

def ocd_mmse_detection(H, y, constellation, noise_var, config=OcdConfig()):
    return constellation.decide(ocd_mmse_estimate(H, y, constellation, noise_var, config))

def ocd_box_estimate(H, y, constellation, config=OcdConfig()):
    """Optimized coordinate descent with box projection after every update"""
    norms = _column_norms(H)
    dinv = safe_reciprocal(norms)
    p = dinv * norms
    return _ocd_sweeps(H, y, dinv.to(H.dtype), p.to(H.dtype), config.iters,
                       alpha=constellation.alpha)

def ocd_box_detection(H, y, constellation, config=OcdConfig()):
    # Output uses the projected estimate
    return constellation.decide(ocd_box_estimate(H, y, constellation, config))
