"""
Detector hyperparameters with the default simulation settings.
"""

from dataclasses import dataclass, field
from typing import Optional

# Barrier numerator for RBR: 1e-2/N by default, 1e-2/(4*MT+1) per user
RBR_BARRIER_NUMERATOR = 1e-2

@dataclass(frozen=True)
class TaserConfig:
    iters: int = 100
    alpha_scale: float = 0.99

@dataclass(frozen=True)
class TaserRConfig:
    iters: int = 100
    alpha_scale: float = 0.99
    num_randomizations: int = 50

@dataclass(frozen=True)
class SdrRandConfig:
    num_randomizations: int = 50

@dataclass(frozen=True)
class RbrConfig:
    iters: int = 20
    barrier: Optional[float] = None  # None -> rbr_barrier(N)

@dataclass(frozen=True)
class LamaConfig:
    iters: int = 30
    theta_tau_s: float = 0.5  # damping of the moment variance, (0,1)
    theta_tau_z: float = 0.5  # damping of the signal variance, (0,1)

@dataclass(frozen=True)
class AdminConfig:
    beta_scale: float = 3.0  # 1 gives a biased MMSE on the first iteration
    iters: int = 5
    gamma: float = 2.0       # dual step size, <1 guarantees ADMM convergence

@dataclass(frozen=True)
class BoxConfig:
    iters: int = 10
    tau: float = 2 ** -7

@dataclass(frozen=True)
class OcdConfig:
    iters: int = 10

@dataclass(frozen=True)
class KBestConfig:
    k: int = 5

@dataclass(frozen=True)
class DetectorConfig:
    """Hyperparameters for every detector, immutable for a run"""
    taser: TaserConfig = field(default_factory=TaserConfig)
    taser_r: TaserRConfig = field(default_factory=TaserRConfig)
    sdr_rand: SdrRandConfig = field(default_factory=SdrRandConfig)
    rbr: RbrConfig = field(default_factory=RbrConfig)
    lama: LamaConfig = field(default_factory=LamaConfig)
    admin: AdminConfig = field(default_factory=AdminConfig)
    box: BoxConfig = field(default_factory=BoxConfig)
    ocd_mmse: OcdConfig = field(default_factory=OcdConfig)
    ocd_box: OcdConfig = field(default_factory=OcdConfig)
    kbest: KBestConfig = field(default_factory=KBestConfig)

def rbr_barrier(N, num_tx=None, per_user=False):
    """Barrier constant for RBR: 1e-2/N, or 1e-2/(4*MT+1) with per_user=True"""
    if per_user:
        return RBR_BARRIER_NUMERATOR / (4 * num_tx + 1)
    return RBR_BARRIER_NUMERATOR / N
