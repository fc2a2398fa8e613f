"""
Tree-search detectors: ML sphere decoding and K-Best.
"""

import math

import torch

from ..core.linalg import hermitian, qr_decompose
from .config import KBestConfig

def ml_detection(H, y, constellation):
    """
    Maximum-likelihood detection via depth-first sphere decoding.

    After H = QR the tree is searched from level MT-1 (root) down to level 0.
    Each level keeps the partial Euclidean distances (PEDs) of its untested
    children; a node is tested at most once, so the search always ends.
    The radius shrinks to the PED of every new leaf (branch and bound).

    Args:
        H: Channel matrix [MR, MT]
        y: Received vector [MR]
        constellation: Constellation instance

    Returns:
        Detection: Symbol indices and bits of the minimum-distance vector
    """
    symbols = constellation.points_like(H)
    num_tx = H.shape[-1]
    num_symbols = symbols.shape[0]

    Q, R = qr_decompose(H)
    y_hat = torch.matmul(hermitian(Q), y)

    radius = math.inf
    path = torch.zeros(num_tx, dtype=torch.long, device=H.device)
    stack = torch.full((num_tx, num_symbols), math.inf, dtype=torch.float64, device=H.device)
    best = path.clone()

    # root node
    level = num_tx - 1
    stack[level] = (torch.abs(y_hat[level] - R[level, level] * symbols) ** 2).to(torch.float64)

    while level < num_tx:
        idx = int(torch.argmin(stack[level]))
        min_ped = stack[level, idx].item()
        if min_ped == math.inf:
            # no more children at this level, backtrack
            level += 1
            continue

        stack[level, idx] = math.inf  # mark as tested
        if min_ped >= radius:
            continue

        if level > 0:
            path[level] = idx
            level -= 1
            interference = torch.matmul(R[level, level + 1:], symbols[path[level + 1:]])
            residual = y_hat[level] - R[level, level] * symbols - interference
            stack[level] = min_ped + (torch.abs(residual) ** 2).to(torch.float64)
        else:
            # valid leaf, shrink the radius
            best = path.clone()
            best[0] = idx
            radius = min_ped

    return constellation.detection(best)

def kbest_detection(H, y, constellation, config=KBestConfig()):
    """
    K-Best breadth-first tree search.

    Each level keeps the K survivors with the smallest cumulative PED; the
    candidate buffers are sized K * |alphabet| before the search starts.

    Args:
        H: Channel matrix [MR, MT]
        y: Received vector [MR]
        constellation: Constellation instance
        config: KBestConfig

    Returns:
        Detection: Symbol indices and bits of the best surviving path
    """
    symbols = constellation.points_like(H)
    num_tx = H.shape[-1]
    num_symbols = symbols.shape[0]
    K = config.k

    Q, R = qr_decompose(H)
    y_hat = torch.matmul(hermitian(Q), y)

    capacity = K * num_symbols
    cand_peds = torch.empty(capacity, dtype=torch.float64, device=H.device)
    cand_paths = torch.zeros((capacity, num_tx), dtype=torch.long, device=H.device)
    surv_paths = torch.zeros((K, num_tx), dtype=torch.long, device=H.device)
    surv_peds = torch.empty(K, dtype=torch.float64, device=H.device)

    # last transmit symbol
    level = num_tx - 1
    peds = (torch.abs(symbols * R[level, level] - y_hat[level]) ** 2).to(torch.float64)
    peds, order = torch.sort(peds, stable=True)
    num_surv = min(K, num_symbols)
    surv_peds[:num_surv] = peds[:num_surv]
    surv_paths[:num_surv, level] = order[:num_surv]

    for level in range(num_tx - 2, -1, -1):
        paths = surv_paths[:num_surv]
        interference = torch.matmul(symbols[paths[:, level + 1:]], R[level, level + 1:])
        # children of survivor k occupy rows k*|A| .. (k+1)*|A|-1
        increments = torch.abs(symbols.unsqueeze(0) * R[level, level] - y_hat[level]
                               + interference.unsqueeze(-1)) ** 2
        num_cand = num_surv * num_symbols
        cand_peds[:num_cand] = (surv_peds[:num_surv].unsqueeze(-1) + increments.to(torch.float64)).reshape(-1)
        cand_paths[:num_cand] = paths.repeat_interleave(num_symbols, dim=0)
        cand_paths[:num_cand, level] = torch.arange(num_symbols, device=H.device).repeat(num_surv)

        peds, order = torch.sort(cand_peds[:num_cand], stable=True)
        num_surv = min(K, num_cand)
        surv_peds[:num_surv] = peds[:num_surv]
        surv_paths[:num_surv] = cand_paths[order[:num_surv]]

    return constellation.detection(surv_paths[0])
