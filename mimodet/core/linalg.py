"""
Linear-algebra helpers shared by the detectors.
"""

import torch

from .constellation import Modulation

def hermitian(A):
    return A.transpose(-2, -1).conj()

def gram(H):
    """H^H H"""
    return torch.matmul(hermitian(H), H)

def qr_decompose(H):
    """Economy QR factorization, R is MT x MT upper triangular"""
    return torch.linalg.qr(H, mode='reduced')

def cholesky_factor(G):
    return torch.linalg.cholesky(G)

def cholesky_solve(L, b):
    """Solve (L L^H) x = b with two triangular solves"""
    squeeze = b.dim() == 1
    if squeeze:
        b = b.unsqueeze(-1)
    z = torch.linalg.solve_triangular(L, b, upper=False)
    x = torch.linalg.solve_triangular(hermitian(L), z, upper=True)
    return x.squeeze(-1) if squeeze else x

def project_box(s, alpha):
    """Clip real and imaginary parts into [-alpha, alpha]"""
    if not s.is_complex():
        return torch.clamp(s, -alpha, alpha)
    return torch.complex(torch.clamp(s.real, -alpha, alpha),
                         torch.clamp(s.imag, -alpha, alpha))

def hard_sign(x):
    """Elementwise sign with zero mapped to +1"""
    return torch.where(x < 0, -torch.ones_like(x), torch.ones_like(x))

def lift_to_real(H, y, modulation):
    """
    Build the augmented real cost matrix of the relaxation problem.

    For a lifted sign vector x whose last entry is 1, x^T T x equals
    ||y - H s||^2 where s is the un-lifted complex vector.

    Args:
        H: Channel matrix [MR, MT]
        y: Received vector [MR]
        modulation: BPSK or QPSK

    Returns:
        tuple: (T, N) - cost matrix [N, N] and lifted dimension
    """
    modulation = Modulation.from_name(modulation)
    num_tx = H.shape[-1]
    yR = torch.cat([y.real, y.imag])
    if modulation is Modulation.QPSK:
        HR = torch.cat([torch.cat([H.real, -H.imag], dim=1),
                        torch.cat([H.imag, H.real], dim=1)], dim=0)
        N = 2 * num_tx + 1
    elif modulation is Modulation.BPSK:
        HR = torch.cat([H.real, H.imag], dim=0)
        N = num_tx + 1
    else:
        raise ValueError(f"Modulation {modulation.value} not supported by relaxation detectors")

    HRy = torch.matmul(HR.T, yR)
    T = torch.empty((N, N), dtype=HR.dtype, device=HR.device)
    T[:-1, :-1] = torch.matmul(HR.T, HR)
    T[:-1, -1] = -HRy
    T[-1, :-1] = -HRy
    T[-1, -1] = torch.dot(yR, yR)
    return T, N

def unlift(x, num_tx, modulation):
    """Map a lifted real vector back to MT complex entries (last entry ignored)"""
    modulation = Modulation.from_name(modulation)
    if not x.is_floating_point():
        x = x.double()
    if modulation is Modulation.QPSK:
        return torch.complex(x[:num_tx], x[num_tx:2 * num_tx])
    if modulation is Modulation.BPSK:
        return torch.complex(x[:num_tx], torch.zeros_like(x[:num_tx]))
    raise ValueError(f"Modulation {modulation.value} not supported by relaxation detectors")

def quadratic_cost(T, Z):
    """Cost z^T T z for every column z of Z [N, L]"""
    return torch.sum(Z * torch.matmul(T, Z), dim=0)

def safe_reciprocal(values):
    """1/values for positive entries; zero-norm entries map to 0 instead of inf"""
    inverse = torch.zeros_like(values)
    mask = values > 0
    inverse[mask] = 1.0 / values[mask]
    return inverse
