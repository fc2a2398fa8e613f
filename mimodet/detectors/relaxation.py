"""
Semidefinite-relaxation detectors: TASER, TASER-R, RBR and exact SDR
(with an externally supplied SDP solver).

All of them work on the lifted real problem
    minimize x^T T x  subject to  x in {-1, +1}^N, x[N-1] = 1
and are therefore limited to BPSK and QPSK.
"""

import torch

from ..core.linalg import hard_sign, lift_to_real, unlift, quadratic_cost, safe_reciprocal
from .config import TaserConfig, TaserRConfig, SdrRandConfig, RbrConfig, rbr_barrier

def _taser_factor(T, iters, alpha_scale):
    """
    Triangular approximate SDR: projected gradient on a lower-triangular
    factor L of the normalized cost, columns rescaled after every step.

    A zero diagonal entry of T (zero-norm channel column) keeps its column
    of the factor at zero, so that lifted coordinate rounds to +1.

    Returns:
        torch.Tensor: Converged factor [N, N]
    """
    d = torch.diagonal(T)
    d_inv = safe_reciprocal(d) ** 0.5
    T_tilde = d_inv.unsqueeze(-1) * T * d_inv.unsqueeze(0)
    step = alpha_scale / torch.linalg.matrix_norm(T_tilde, ord=2)
    scale = d ** 0.5

    L = torch.diag(scale)
    for _ in range(iters):
        L = L - step * 2 * torch.tril(torch.matmul(L, T_tilde))
        # column j gets norm scale[j]
        L = L * (scale * safe_reciprocal(torch.linalg.vector_norm(L, dim=0))).unsqueeze(0)
    return L

def randomized_rounding(T, factor, num_samples, rng):
    """
    Draw Gaussian vectors through `factor`, fix the last coordinate to +1,
    round to signs and keep the candidate with the lowest cost under T.

    Args:
        T: Cost matrix [N, N]
        factor: Square-root factor [N, N]; samples are factor @ randn(N, L)
        num_samples: Number of randomizations L
        rng: RandomSource

    Returns:
        torch.Tensor: Best lifted sign vector [N]
    """
    N = T.shape[0]
    z = torch.matmul(factor, rng.randn(N, num_samples, dtype=factor.dtype).to(factor.device))
    z = z * hard_sign(z[-1:, :])
    z = hard_sign(z)
    costs = quadratic_cost(T, z)
    return z[:, int(torch.argmin(costs))]

def _decide(x, H, constellation):
    shat = unlift(x, H.shape[-1], constellation.modulation)
    return constellation.decide(shat.to(H.dtype))

def taser_lifted(H, y, constellation, config=TaserConfig()):
    """Lifted TASER solution: sign of the last row of the factor"""
    T, _ = lift_to_real(H, y, constellation.modulation)
    L = _taser_factor(T, config.iters, config.alpha_scale)
    return hard_sign(L[-1, :])

def taser_detection(H, y, constellation, config=TaserConfig()):
    return _decide(taser_lifted(H, y, constellation, config), H, constellation)

def taser_r_lifted(H, y, constellation, rng, config=TaserRConfig()):
    """TASER followed by randomized rounding through the factor"""
    T, _ = lift_to_real(H, y, constellation.modulation)
    L = _taser_factor(T, config.iters, config.alpha_scale)
    return randomized_rounding(T, L.T, config.num_randomizations, rng)

def taser_r_detection(H, y, constellation, rng, config=TaserRConfig()):
    return _decide(taser_r_lifted(H, y, constellation, rng, config), H, constellation)

def rbr_lifted(H, y, constellation, config=RbrConfig()):
    """
    Row-by-row block coordinate descent on the relaxed N x N variable.

    The diagonal is fixed to one; the log-barrier keeps every row update
    well defined. The estimate is the sign of the last column without its
    diagonal entry.
    """
    C, N = lift_to_real(H, y, constellation.modulation)
    if config.barrier is None:
        sigma = rbr_barrier(N)
    else:
        sigma = config.barrier

    X = torch.eye(N, dtype=C.dtype, device=C.device)
    for _ in range(config.iters):
        for k in range(N):
            others = torch.cat([torch.arange(k, device=C.device),
                                torch.arange(k + 1, N, device=C.device)])
            c = C[others, k]
            z = torch.matmul(X[others][:, others], c)
            gamma = torch.dot(z, c).item()
            if gamma > 0:
                column = -1 / (2 * gamma) * ((sigma ** 2 + 4 * gamma) ** 0.5 - sigma) * z
            else:
                column = torch.zeros_like(z)
            X[others, k] = column
            X[k, others] = column
            X[k, k] = 1
    return hard_sign(X[:N - 1, N - 1])

def rbr_detection(H, y, constellation, config=RbrConfig()):
    return _decide(rbr_lifted(H, y, constellation, config), H, constellation)

def _solve_sdp(T, sdp_solver):
    if sdp_solver is None:
        raise ValueError("Exact SDR requires an SDP solver")
    S = torch.as_tensor(sdp_solver(T), dtype=T.dtype, device=T.device)
    # symmetric square root, small negative eigenvalues are clipped
    eigvals, eigvecs = torch.linalg.eigh(S)
    return eigvecs * torch.sqrt(torch.clamp(eigvals, min=0)).unsqueeze(0)

def sdr_rand_lifted(H, y, constellation, rng, sdp_solver, config=SdrRandConfig()):
    """Exact SDR followed by Gaussian randomization with covariance S"""
    T, _ = lift_to_real(H, y, constellation.modulation)
    root = _solve_sdp(T, sdp_solver)
    return randomized_rounding(T, root, config.num_randomizations, rng)

def sdr_rand_detection(H, y, constellation, rng, sdp_solver, config=SdrRandConfig()):
    return _decide(sdr_rand_lifted(H, y, constellation, rng, sdp_solver, config), H, constellation)

def sdr_r1_lifted(H, y, constellation, sdp_solver):
    """Exact SDR with rank-one approximation: sign of the principal eigenvector"""
    T, _ = lift_to_real(H, y, constellation.modulation)
    root = _solve_sdp(T, sdp_solver)
    return hard_sign(root[:, -1])

def sdr_r1_detection(H, y, constellation, sdp_solver):
    return _decide(sdr_r1_lifted(H, y, constellation, sdp_solver), H, constellation)
