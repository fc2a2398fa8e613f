# MIMO detection algorithms

from .config import (
    DetectorConfig,
    TaserConfig,
    TaserRConfig,
    SdrRandConfig,
    RbrConfig,
    LamaConfig,
    AdminConfig,
    BoxConfig,
    OcdConfig,
    KBestConfig,
    rbr_barrier
)
from .linear import simo_detection, mrc_detection, zf_detection, mmse_detection
from .iterative import (
    admin_estimate,
    admin_detection,
    box_estimate,
    box_detection,
    ocd_mmse_estimate,
    ocd_mmse_detection,
    ocd_box_estimate,
    ocd_box_detection
)
from .tree_search import ml_detection, kbest_detection
from .relaxation import (
    randomized_rounding,
    taser_lifted,
    taser_detection,
    taser_r_lifted,
    taser_r_detection,
    rbr_lifted,
    rbr_detection,
    sdr_rand_lifted,
    sdr_rand_detection,
    sdr_r1_lifted,
    sdr_r1_detection
)
from .message_passing import lama_denoiser, lama_estimate, lama_detection
from .dispatch import DetectorKind, DetectionContext, validate_detectors, apply_detector

__all__ = [
    'DetectorConfig',
    'TaserConfig',
    'TaserRConfig',
    'SdrRandConfig',
    'RbrConfig',
    'LamaConfig',
    'AdminConfig',
    'BoxConfig',
    'OcdConfig',
    'KBestConfig',
    'rbr_barrier',
    'simo_detection',
    'mrc_detection',
    'zf_detection',
    'mmse_detection',
    'admin_estimate',
    'admin_detection',
    'box_estimate',
    'box_detection',
    'ocd_mmse_estimate',
    'ocd_mmse_detection',
    'ocd_box_estimate',
    'ocd_box_detection',
    'ml_detection',
    'kbest_detection',
    'randomized_rounding',
    'taser_lifted',
    'taser_detection',
    'taser_r_lifted',
    'taser_r_detection',
    'rbr_lifted',
    'rbr_detection',
    'sdr_rand_lifted',
    'sdr_rand_detection',
    'sdr_r1_lifted',
    'sdr_r1_detection',
    'lama_denoiser',
    'lama_estimate',
    'lama_detection',
    'DetectorKind',
    'DetectionContext',
    'validate_detectors',
    'apply_detector'
]
