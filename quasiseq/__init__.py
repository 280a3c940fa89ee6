"""
Quasi-random sequences in python.

"""

__version__ = '0.1'

from quasiseq.halton import Halton, first_primes, halton, radical_inverse
from quasiseq.samplers import Interleave, PseudoRandom, UniformSampler
