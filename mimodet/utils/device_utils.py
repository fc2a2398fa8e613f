"""
Device utility functions for MIMO detection simulations.
"""

import torch

def select_device(device: torch.device | None = None) -> torch.device:
    """
    Select the appropriate device for computations.

    MPS is skipped because it has no float64/complex128 support.

    Args:
        device: Optional device specification. If None, auto-select.

    Returns:
        torch.device: The selected device.
    """
    if device is not None:
        return torch.device(device)
    return torch.device("cuda" if torch.cuda.is_available() else "cpu")
