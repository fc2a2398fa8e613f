# mimodet package
"""
Data detection for massive multi-user MIMO: linear, iterative, tree-search,
relaxation and message-passing detectors plus a Monte-Carlo error-rate simulator.
"""

__version__ = '1.0.0'

# Core components
from .core import (
    Modulation,
    Constellation,
    Detection,
    RandomSource,
    lift_to_real,
    unlift
)

# Detectors
from .detectors import (
    DetectorConfig,
    DetectorKind,
    DetectionContext,
    apply_detector,
    validate_detectors,
    simo_detection,
    mrc_detection,
    zf_detection,
    mmse_detection,
    ml_detection,
    kbest_detection,
    admin_detection,
    box_detection,
    ocd_mmse_detection,
    ocd_box_detection,
    taser_detection,
    taser_r_detection,
    rbr_detection,
    sdr_rand_detection,
    sdr_r1_detection,
    lama_detection
)

# Simulation
from .simulation import (
    ChannelEstimator,
    SimulationParameters,
    SimulationResults,
    simulate_error_rates
)

# Utils
from .utils import (
    select_device,
    create_results_directory,
    save_results_to_csv,
    save_simulation_parameters
)

__all__ = [
    # Core
    'Modulation',
    'Constellation',
    'Detection',
    'RandomSource',
    'lift_to_real',
    'unlift',
    # Detectors
    'DetectorConfig',
    'DetectorKind',
    'DetectionContext',
    'apply_detector',
    'validate_detectors',
    'simo_detection',
    'mrc_detection',
    'zf_detection',
    'mmse_detection',
    'ml_detection',
    'kbest_detection',
    'admin_detection',
    'box_detection',
    'ocd_mmse_detection',
    'ocd_box_detection',
    'taser_detection',
    'taser_r_detection',
    'rbr_detection',
    'sdr_rand_detection',
    'sdr_r1_detection',
    'lama_detection',
    # Simulation
    'ChannelEstimator',
    'SimulationParameters',
    'SimulationResults',
    'simulate_error_rates',
    # Utils
    'select_device',
    'create_results_directory',
    'save_results_to_csv',
    'save_simulation_parameters'
]
