"""
Uniform detector dispatch over a closed set of detector kinds.
"""

from enum import Enum
from typing import Callable, NamedTuple, Optional

import torch

from ..core.constellation import Modulation
from ..core.randomness import RandomSource
from .config import DetectorConfig
from .linear import simo_detection, mrc_detection, zf_detection, mmse_detection
from .iterative import admin_detection, box_detection, ocd_mmse_detection, ocd_box_detection
from .tree_search import ml_detection, kbest_detection
from .relaxation import (
    taser_detection,
    taser_r_detection,
    rbr_detection,
    sdr_rand_detection,
    sdr_r1_detection
)
from .message_passing import lama_detection

class DetectorKind(Enum):
    SIMO = 'SIMO'
    ML = 'ML'
    MRC = 'MRC'
    ZF = 'ZF'
    MMSE = 'MMSE'
    SDR_RAND = 'SDR_RAND'
    SDR_R1 = 'SDR_R1'
    TASER = 'TASER'
    TASER_R = 'TASER_R'
    RBR = 'RBR'
    LAMA = 'LAMA'
    ADMIN = 'ADMIN'
    BOX = 'BOX'
    OCD_MMSE = 'OCD_MMSE'
    OCD_BOX = 'OCD_BOX'
    KBEST = 'KBEST'

    @classmethod
    def from_name(cls, name):
        if isinstance(name, cls):
            return name
        key = str(name).strip().upper().replace('-', '_')
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown detector: {name}") from None

    @property
    def randomized(self):
        """Consumes the shared randomness source (state is restored afterwards)"""
        return self in (DetectorKind.SDR_RAND, DetectorKind.SDR_R1, DetectorKind.TASER_R)

    @property
    def requires_relaxation(self):
        """Works on the lifted real problem, BPSK/QPSK only"""
        return self in (DetectorKind.SDR_RAND, DetectorKind.SDR_R1, DetectorKind.TASER,
                        DetectorKind.TASER_R, DetectorKind.RBR)

    @property
    def requires_solver(self):
        return self in (DetectorKind.SDR_RAND, DetectorKind.SDR_R1)

class DetectionContext(NamedTuple):
    """Per-call extras: SIMO ground truth, randomness source, SDP solver"""
    s: Optional[torch.Tensor] = None
    rng: Optional[RandomSource] = None
    sdp_solver: Optional[Callable] = None

# (H, y, constellation, noise_var, config, context) -> Detection
_DISPATCH = {
    DetectorKind.SIMO: lambda H, y, c, n0, cfg, ctx: simo_detection(H, y, c, ctx.s),
    DetectorKind.ML: lambda H, y, c, n0, cfg, ctx: ml_detection(H, y, c),
    DetectorKind.MRC: lambda H, y, c, n0, cfg, ctx: mrc_detection(H, y, c),
    DetectorKind.ZF: lambda H, y, c, n0, cfg, ctx: zf_detection(H, y, c),
    DetectorKind.MMSE: lambda H, y, c, n0, cfg, ctx: mmse_detection(H, y, c, n0),
    DetectorKind.SDR_RAND: lambda H, y, c, n0, cfg, ctx: sdr_rand_detection(
        H, y, c, ctx.rng, ctx.sdp_solver, cfg.sdr_rand),
    DetectorKind.SDR_R1: lambda H, y, c, n0, cfg, ctx: sdr_r1_detection(H, y, c, ctx.sdp_solver),
    DetectorKind.TASER: lambda H, y, c, n0, cfg, ctx: taser_detection(H, y, c, cfg.taser),
    DetectorKind.TASER_R: lambda H, y, c, n0, cfg, ctx: taser_r_detection(H, y, c, ctx.rng, cfg.taser_r),
    DetectorKind.RBR: lambda H, y, c, n0, cfg, ctx: rbr_detection(H, y, c, cfg.rbr),
    DetectorKind.LAMA: lambda H, y, c, n0, cfg, ctx: lama_detection(H, y, c, n0, cfg.lama),
    DetectorKind.ADMIN: lambda H, y, c, n0, cfg, ctx: admin_detection(H, y, c, n0, cfg.admin),
    DetectorKind.BOX: lambda H, y, c, n0, cfg, ctx: box_detection(H, y, c, cfg.box),
    DetectorKind.OCD_MMSE: lambda H, y, c, n0, cfg, ctx: ocd_mmse_detection(H, y, c, n0, cfg.ocd_mmse),
    DetectorKind.OCD_BOX: lambda H, y, c, n0, cfg, ctx: ocd_box_detection(H, y, c, cfg.ocd_box),
    DetectorKind.KBEST: lambda H, y, c, n0, cfg, ctx: kbest_detection(H, y, c, cfg.kbest),
}

def validate_detectors(detectors, modulation, sdp_solver=None):
    """
    Resolve detector names and check them against the modulation.

    Raises:
        ValueError: Unknown detector, relaxation detector with a modulation
            other than BPSK/QPSK, or exact SDR without a solver

    Returns:
        list: DetectorKind values in the given order
    """
    modulation = Modulation.from_name(modulation)
    kinds = [DetectorKind.from_name(d) for d in detectors]
    for kind in kinds:
        if kind.requires_relaxation and modulation not in (Modulation.BPSK, Modulation.QPSK):
            raise ValueError(f"{kind.value} does not support {modulation.value}")
        if kind.requires_solver and sdp_solver is None:
            raise ValueError(f"{kind.value} requires an SDP solver")
    return kinds

def apply_detector(detector, H, y, constellation, noise_var=0.0, config=None, context=None):
    """
    Apply the specified detector to one received vector.

    Args:
        detector: DetectorKind or detector name
        H: Channel matrix [MR, MT]
        y: Received vector [MR]
        constellation: Constellation instance
        noise_var: Noise variance (used by MMSE, ADMIN, LAMA, OCD-MMSE)
        config: DetectorConfig (defaults if None)
        context: DetectionContext with ground truth / rng / SDP solver

    Returns:
        Detection: Symbol indices and bits
    """
    kind = DetectorKind.from_name(detector)
    config = config if config is not None else DetectorConfig()
    context = context if context is not None else DetectionContext()
    if kind is DetectorKind.SIMO and context.s is None:
        raise ValueError("SIMO requires the transmitted symbols")
    run = _DISPATCH[kind]

    if kind.randomized:
        if context.rng is None:
            raise ValueError(f"{kind.value} requires a RandomSource")
        with context.rng.preserved():
            return run(H, y, constellation, noise_var, config, context)
    return run(H, y, constellation, noise_var, config, context)
