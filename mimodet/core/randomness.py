"""
Explicit randomness source with snapshot/restore.
"""

from contextlib import contextmanager

import torch

class RandomSource:
    """Owns a torch.Generator; never touches the global RNG"""

    def __init__(self, seed=0, device=None):
        self.seed = seed
        self.device = device if device is not None else torch.device('cpu')
        self.generator = torch.Generator(device=self.device)
        self.generator.manual_seed(seed)

    def snapshot(self):
        return self.generator.get_state().clone()

    def restore(self, state):
        self.generator.set_state(state)

    @contextmanager
    def preserved(self):
        """Run a block and roll the generator back to its state on entry"""
        state = self.snapshot()
        try:
            yield self
        finally:
            self.restore(state)

    def randn(self, *shape, dtype=torch.float64):
        return torch.randn(*shape, generator=self.generator, dtype=dtype, device=self.device)

    def crandn(self, *shape, dtype=torch.complex128):
        """Circularly-symmetric complex Gaussian with unit variance"""
        real_dtype = torch.float32 if dtype == torch.complex64 else torch.float64
        re = self.randn(*shape, dtype=real_dtype)
        im = self.randn(*shape, dtype=real_dtype)
        return torch.complex(re, im) * (0.5 ** 0.5)

    def rand(self, *shape, dtype=torch.float64):
        return torch.rand(*shape, generator=self.generator, dtype=dtype, device=self.device)

    def uniform(self, low, high):
        return low + (high - low) * self.rand(1).item()

    def randint(self, high, shape):
        return torch.randint(0, high, shape, generator=self.generator, device=self.device)

    def randperm(self, n):
        return torch.randperm(n, generator=self.generator, device=self.device)
