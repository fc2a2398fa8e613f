# Monte-Carlo simulation harness

from .channels import rayleigh_channel, los_channel
from .estimation import ChannelEstimator, beaches_denoiser, estimate_channel
from .simulator import (
    SimulationParameters,
    SimulationResults,
    noise_variance,
    simulate_error_rates
)

__all__ = [
    'rayleigh_channel',
    'los_channel',
    'ChannelEstimator',
    'beaches_denoiser',
    'estimate_channel',
    'SimulationParameters',
    'SimulationResults',
    'noise_variance',
    'simulate_error_rates'
]
