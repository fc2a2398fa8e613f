"""
Channel models: i.i.d. Rayleigh fading and planar-wave line-of-sight.
"""

import math

import torch

SPEED_OF_LIGHT = 3e8      # [m/s]
CARRIER_FREQUENCY = 2e9   # [Hz]
ANTENNA_SPACING = 0.5     # [wavelengths]
SECTOR_DEG = 120.0        # users are placed in [-60, 60] degrees
MIN_SEPARATION_DEG = 1.0
USER_DISTANCE = 150.0     # [m]

def rayleigh_channel(num_rx, num_tx, rng, dtype=torch.complex128):
    """i.i.d. CN(0,1) channel matrix [MR, MT]"""
    return rng.crandn(num_rx, num_tx, dtype=dtype)

def los_channel(num_rx, num_tx, rng, dtype=torch.complex128):
    """
    Line-of-sight channel of a uniform linear array under the planar-wave model.

    Users are spread randomly over the sector with a minimum angular
    separation and all sit at the same distance from the base station.

    Args:
        num_rx: Number of base-station antennas MR
        num_tx: Number of users MT
        rng: RandomSource
        dtype: Complex dtype of the result

    Returns:
        torch.Tensor: Channel matrix [MR, MT]
    """
    wavelength = SPEED_OF_LIGHT / CARRIER_FREQUENCY

    # angular separations of at least MIN_SEPARATION_DEG, randomly permuted
    separations = torch.zeros(max(num_tx - 1, 0), dtype=torch.float64)
    sector_avail = SECTOR_DEG
    for uu in range(num_tx - 1):
        separations[uu] = rng.uniform(MIN_SEPARATION_DEG, sector_avail / (num_tx - 1 - uu))
        sector_avail -= separations[uu].item()
    separations = separations[rng.randperm(num_tx - 1).cpu()]

    angles = torch.cat([torch.zeros(1, dtype=torch.float64), torch.cumsum(separations, dim=0)])
    span = (angles.max() - angles.min()).item()
    angles = angles - span / 2
    angle_left = SECTOR_DEG - span
    angles = angles + rng.uniform(-angle_left / 2, angle_left / 2)

    aod = torch.deg2rad(angles)
    x_ue = USER_DISTANCE * torch.cos(aod)
    y_ue = USER_DISTANCE * torch.sin(aod)

    # base station array along the y-axis, broadside at 0 degrees
    d_ant = ANTENNA_SPACING * wavelength
    omega = math.pi / 2
    offsets = d_ant * (torch.arange(1, num_rx + 1, dtype=torch.float64) - (num_rx + 1) / 2)
    x_bs = offsets * math.cos(math.pi - omega)
    y_bs = offsets * math.sin(math.pi - omega)

    dx = x_ue.unsqueeze(-1) - x_bs.unsqueeze(0)
    dy = y_ue.unsqueeze(-1) - y_bs.unsqueeze(0)
    d_ref = torch.sqrt(dx ** 2 + dy ** 2)
    theta = omega - math.pi / 2 + torch.atan2(dy, dx)

    element_shift = d_ant * torch.arange(num_rx, dtype=torch.float64).unsqueeze(0)
    d_pwm = d_ref[:, :1] - element_shift * torch.sin(theta[:, :1])

    H = (USER_DISTANCE / d_pwm) * torch.exp(-1j * 2 * math.pi * d_pwm / wavelength)
    return H.T.to(dtype=dtype, device=rng.device)
