"""
Constellation alphabets and Gray bit labeling for MIMO detection.
"""

from enum import Enum
from typing import NamedTuple

import torch

class Modulation(Enum):
    """Supported modulation schemes"""
    BPSK = 'BPSK'
    QPSK = 'QPSK'
    QAM16 = '16QAM'
    QAM64 = '64QAM'

    @classmethod
    def from_name(cls, name):
        if isinstance(name, cls):
            return name
        for mod in cls:
            if mod.value == str(name).upper() or mod.name == str(name).upper():
                return mod
        raise ValueError(f"Unknown modulation: {name}")

# Gray-mapped alphabets according to IEEE 802.11, index i carries the bits of i
_ALPHABETS = {
    Modulation.BPSK: [-1, 1],
    Modulation.QPSK: [-1-1j, -1+1j,
                      +1-1j, +1+1j],
    Modulation.QAM16: [-3-3j, -3-1j, -3+3j, -3+1j,
                       -1-3j, -1-1j, -1+3j, -1+1j,
                       +3-3j, +3-1j, +3+3j, +3+1j,
                       +1-3j, +1-1j, +1+3j, +1+1j],
    Modulation.QAM64: [-7-7j, -7-5j, -7-1j, -7-3j, -7+7j, -7+5j, -7+1j, -7+3j,
                       -5-7j, -5-5j, -5-1j, -5-3j, -5+7j, -5+5j, -5+1j, -5+3j,
                       -1-7j, -1-5j, -1-1j, -1-3j, -1+7j, -1+5j, -1+1j, -1+3j,
                       -3-7j, -3-5j, -3-1j, -3-3j, -3+7j, -3+5j, -3+1j, -3+3j,
                       +7-7j, +7-5j, +7-1j, +7-3j, +7+7j, +7+5j, +7+1j, +7+3j,
                       +5-7j, +5-5j, +5-1j, +5-3j, +5+7j, +5+5j, +5+1j, +5+3j,
                       +1-7j, +1-5j, +1-1j, +1-3j, +1+7j, +1+5j, +1+1j, +1+3j,
                       +3-7j, +3-5j, +3-1j, +3-3j, +3+7j, +3+5j, +3+1j, +3+3j],
}

class Detection(NamedTuple):
    """Symbol indices [MT] and their bit labels [MT, Q]"""
    indices: torch.Tensor
    bits: torch.Tensor

class Constellation:
    """Symbol alphabet with Gray labeling, shared read-only by all detectors"""

    def __init__(self, modulation, device=None, dtype=torch.complex128):
        self.modulation = Modulation.from_name(modulation)
        self.device = device if device is not None else torch.device('cpu')
        self.symbols = torch.tensor(_ALPHABETS[self.modulation], dtype=dtype, device=self.device)
        self.size = self.symbols.shape[0]
        self.num_bits_per_symbol = self.size.bit_length() - 1

        # Row i holds the binary expansion of i, most significant bit first
        shifts = torch.arange(self.num_bits_per_symbol - 1, -1, -1, device=self.device)
        indices = torch.arange(self.size, device=self.device)
        self.bits = ((indices.unsqueeze(-1) >> shifts) & 1).to(torch.int8)
        self._weights = (1 << shifts)

        self.Es = torch.mean(torch.abs(self.symbols) ** 2).item()
        self.alpha = torch.max(self.symbols.real).item()

    def __repr__(self):
        return f"Constellation({self.modulation.value}, Es={self.Es:g})"

    def points_like(self, tensor):
        """Alphabet on the device and with the complex dtype matching `tensor`"""
        dtype = tensor.dtype if tensor.is_complex() else torch.complex128
        return self.symbols.to(device=tensor.device, dtype=dtype)

    def symbol(self, indices):
        return self.symbols[torch.as_tensor(indices, device=self.device)]

    def bits_of(self, indices):
        return self.bits[torch.as_tensor(indices, device=self.device)]

    def indices_from_bits(self, bits):
        """Inverse labeling: [..., Q] bit rows to symbol indices"""
        bits = torch.as_tensor(bits, device=self.device).long()
        return torch.sum(bits * self._weights, dim=-1)

    def nearest(self, values, gain=None):
        """
        Nearest-symbol decision for each entry of `values`.

        Args:
            values: Complex estimates [MT]
            gain: Optional real per-entry gain [MT]; the alphabet is scaled by it

        Returns:
            torch.Tensor: Index minimizing |value - gain*symbol|^2, ties to the lowest index
        """
        points = self.points_like(values)
        if gain is None:
            candidates = points.unsqueeze(0)
        else:
            candidates = gain.unsqueeze(-1).to(points.dtype) * points.unsqueeze(0)
        distances = torch.abs(values.unsqueeze(-1) - candidates) ** 2
        # argmin returns the first minimal index
        return torch.argmin(distances, dim=-1).to(self.device)

    def detection(self, indices):
        indices = indices.to(self.device).long()
        return Detection(indices, self.bits[indices])

    def decide(self, values, gain=None):
        return self.detection(self.nearest(values, gain))
