# Utility functions

from .device_utils import select_device
from .results import create_results_directory, save_results_to_csv, save_simulation_parameters

__all__ = [
    'select_device',
    'create_results_directory',
    'save_results_to_csv',
    'save_simulation_parameters'
]
