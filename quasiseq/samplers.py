# -*- coding: utf-8 -*-

"""
Uniform samplers: the generation capability shared by all generators.

Overview
========

Every generator of this package exposes the same four primitive methods::

    next_u32()  # int in [0, 2^32 - 1]
    next_u64()  # int in [0, 2^64 - 1]
    next_f32()  # numpy.float32 in [0, 1)
    next_f64()  # float in [0, 1)

Abstract class `UniformSampler` declares these primitives, and builds a few
conveniences on top of them (`gen`, `uniform`, `random`, iteration). Since
the conveniences only call the primitives, a new generator needs only
implement the four methods above.

This module also defines:

* `Interleave`: draws from several generators in round-robin order; e.g.
  mixing Halton sequences of different bases::

      from quasiseq import Halton, Interleave
      gen = Interleave([Halton(1, 13), Halton(1, 17)])
      gen.next_f64()  # 1/13
      gen.next_f64()  # 1/17

* `PseudoRandom`: wraps a numpy pseudo-random `Generator`, so that
  pseudo-random and quasi-random streams may be compared, or mixed.

.. warning ::
    None of these objects is thread-safe; use one instance per stream.

"""

import copy
import math
import warnings

import numpy as np

MAX_UINT_32 = int(np.iinfo(np.uint32).max)
MAX_UINT_64 = int(np.iinfo(np.uint64).max)

# largest float32 strictly below one
ONE_MINUS_F32 = np.nextafter(np.float32(1.), np.float32(0.))

gcd_warning = """
Interleave: generators %i and %i are Halton sequences with bases %i and %i,
which are not coprime; the interleaved streams are correlated.
"""


class UniformSampler(object):
    """Abstract base class for uniform samplers.

    Sub-classes must define methods `next_u32`, `next_u64`, `next_f32`
    and `next_f64`. Objects of this class are (endless) iterators over
    successive float64 values::

        from itertools import islice
        first_ten = list(islice(sampler, 10))

    """

    def _error_msg(self, method):
        return ('method ' + method + ' not implemented in class '
                + self.__class__.__name__)

    def next_u32(self):
        raise NotImplementedError(self._error_msg('next_u32'))

    def next_u64(self):
        raise NotImplementedError(self._error_msg('next_u64'))

    def next_f32(self):
        raise NotImplementedError(self._error_msg('next_f32'))

    def next_f64(self):
        raise NotImplementedError(self._error_msg('next_f64'))

    def gen(self, dtype=np.float64):
        """Next value, of the given numpy type.

        Parameters
        ----------
        dtype: numpy type
            one of np.uint32, np.uint64, np.float32, np.float64

        """
        methods = {np.dtype(np.uint32): self.next_u32,
                   np.dtype(np.uint64): self.next_u64,
                   np.dtype(np.float32): self.next_f32,
                   np.dtype(np.float64): self.next_f64}
        try:
            method = methods[np.dtype(dtype)]
        except (KeyError, TypeError):
            raise TypeError('%s.gen: unsupported dtype %r' %
                            (self.__class__.__name__, dtype))
        return method()

    def uniform(self, low=0., high=1.):
        """Next value, rescaled to interval [low, high)."""
        if not low < high:
            raise ValueError('uniform: low (%s) must be < high (%s)' %
                             (low, high))
        return low + (high - low) * self.next_f64()

    def random(self, size=1):
        """Array of `size` successive float64 values."""
        return np.fromiter((self.next_f64() for _ in range(size)),
                           dtype=np.float64, count=size)

    def __next__(self):
        return self.next_f64()

    def __iter__(self):
        return self


class Interleave(UniformSampler):
    """Round-robin combination of several uniform samplers.

    Parameters
    ----------
    generators: sequence
        non-empty sequence of objects that implement the four primitives of
        `UniformSampler` (typically, `Halton` objects); each one is copied,
        so the original objects are left untouched

    Note
    ----
    The k-th output is produced by generator number ``k % len(generators)``,
    and is the ``k // len(generators)``-th value of that generator.

    A `UserWarning` is issued when two Halton generators have bases with a
    common factor (their streams are then correlated). The warning is
    advisory only; the object is constructed all the same.

    """

    def __init__(self, generators):
        if len(generators) == 0:
            raise ValueError('Interleave: at least one generator is required')
        self.generators = [copy.deepcopy(g) for g in generators]
        self.current = 0
        self._check_bases()

    def _check_bases(self):
        bases = [(n, getattr(g, 'base', None))
                 for n, g in enumerate(self.generators)]
        bases = [(n, b) for n, b in bases if isinstance(b, int)]
        for i, (m, bm) in enumerate(bases):
            for n, bn in bases[i + 1:]:
                if math.gcd(bm, bn) > 1:
                    warnings.warn(gcd_warning % (m, n, bm, bn))

    def __len__(self):
        return len(self.generators)

    def _delegate(self, method):
        out = getattr(self.generators[self.current], method)()
        self.current = (self.current + 1) % len(self.generators)
        return out

    def next_u32(self):
        return self._delegate('next_u32')

    def next_u64(self):
        return self._delegate('next_u64')

    def next_f32(self):
        return self._delegate('next_f32')

    def next_f64(self):
        return self._delegate('next_f64')


class PseudoRandom(UniformSampler):
    """Uniform sampler based on numpy's (pseudo-random) `Generator`.

    Parameters
    ----------
    seed: None, int, or anything accepted by `numpy.random.default_rng`

    """

    def __init__(self, seed=None):
        self.rng = np.random.default_rng(seed)

    def next_u32(self):
        return int(self.rng.integers(MAX_UINT_32, endpoint=True,
                                     dtype=np.uint32))

    def next_u64(self):
        return int(self.rng.integers(MAX_UINT_64, endpoint=True,
                                     dtype=np.uint64))

    def next_f32(self):
        return np.float32(self.rng.random(dtype=np.float32))

    def next_f64(self):
        return float(self.rng.random())
