# Core components: constellations, linear algebra and randomness

from .constellation import Modulation, Constellation, Detection
from .linalg import (
    hermitian,
    gram,
    qr_decompose,
    cholesky_factor,
    cholesky_solve,
    project_box,
    hard_sign,
    lift_to_real,
    unlift,
    quadratic_cost,
    safe_reciprocal
)
from .randomness import RandomSource

__all__ = [
    'Modulation',
    'Constellation',
    'Detection',
    'hermitian',
    'gram',
    'qr_decompose',
    'cholesky_factor',
    'cholesky_solve',
    'project_box',
    'hard_sign',
    'lift_to_real',
    'unlift',
    'quadratic_cost',
    'safe_reciprocal',
    'RandomSource'
]
