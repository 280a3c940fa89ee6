# -*- coding: utf-8 -*-

"""
Halton sequences, computed incrementally.

Overview
========

The base-b Halton sequence (also known as the van der Corput sequence in
base b) maps index i = d_0 + d_1 b + d_2 b^2 + ... to the radical inverse::

    phi_b(i) = d_0 / b + d_1 / b^2 + d_2 / b^3 + ...

Computing each term from scratch costs O(log i) operations and accumulates
rounding errors. Class `Halton` implements instead the algorithm of Kolar
and O'Shea, which updates the base-b digits of i like a counter, and keeps a
cache of partial sums (the remainders) so that only the digits touched by a
carry are recomputed. The cost per value is amortised constant, and the
error stays within two machine epsilons of `radical_inverse`, however far
the sequence goes.

Since the base of a Halton sequence is trivial to recover, these sequences
are **not** cryptographically secure; use them for sampling only.

Examples
========

Quasi-Monte Carlo estimate of pi::

    from quasiseq import Halton

    def estimate_pi(N, s1, s2):
        u = s1.random(N) * 2. - 1.
        v = s2.random(N) * 2. - 1.
        return 4. * np.mean(u**2 + v**2 <= 1.)

    estimate_pi(10_000, Halton(1, 17), Halton(1, 19))

A `Halton` object is an endless iterator; use `itertools.islice` to take a
finite number of values::

    from itertools import islice
    seq = list(islice(Halton(1, 17), 10))

Function `halton` returns the first N points of the dim-dimensional Halton
sequence (component j uses the j-th prime as its base), as a numpy array.

References
==========

Kolar, M. and O'Shea, S. F. (1993). Fast, portable, and reliable algorithm
for the calculation of Halton numbers. Computers & Mathematics with
Applications, 25(7), 3-13.

"""

import copy
import math

import numba as nb
import numpy as np

from quasiseq.samplers import (MAX_UINT_32, MAX_UINT_64, ONE_MINUS_F32,
                               UniformSampler)

# digit buffers are sized at construction so as to reach this index without
# re-allocation
RESERVE_INDEX = 1_000_000

# start indices and bases are clamped to this value
MAX_INDEX = MAX_UINT_32

# largest float64 strictly below one
ONE_MINUS_F64 = np.nextafter(1., 0.)


@nb.njit
def _is_prime(m):
    if m <= 1:
        return False
    if m == 2:
        return True
    if m % 2 == 0:
        return False
    i = 3
    while i * i <= m:
        if m % i == 0:
            return False
        i += 2

    return True


@nb.njit
def _get_first_n_primes(n):
    res = np.zeros((n,), dtype=np.int64)
    i = 0
    k = 2
    while i < n:
        if _is_prime(k):
            res[i] = k
            i += 1
        k += 1
    return res


def first_primes(n):
    """First n prime numbers.

    Examples
    --------
    >>> first_primes(10).tolist()
    [2, 3, 5, 7, 11, 13, 17, 19, 23, 29]

    >>> first_primes(1).tolist()
    [2]
    """
    return _get_first_n_primes(max(n, 0))


@nb.njit
def radical_inverse(i, base):
    """Radical inverse of integer i in the given base (direct formula).

    This is the i-th element of the base-b Halton sequence.
    """
    f = 1.
    r = 0.
    while i > 0:
        f /= base
        r += f * (i % base)
        i //= base
    return r


def _digits(i, base):
    """Base-b digits of i >= 0, least significant first (at least one)."""
    digits = []
    while i >= base:
        digits.append(i % base)
        i //= base
    digits.append(i)
    return digits


def _num_digits(i, base):
    return len(_digits(i, base))


@nb.njit
def _advance(dig, rem, n, base):
    """One step of Kolar and O'Shea's algorithm.

    Parameters
    ----------
    dig: (capacity,) int numpy.ndarray
        base-b digits of the current index, least significant first
    rem: (capacity,) float numpy.ndarray
        remainders; rem[k] depends on the k most significant digits
    n: int
        number of digits currently in use (n < capacity)
    base: int

    Returns
    -------
    (n, state): new number of digits, new value of the sequence
    """
    if dig[0] == base - 1:
        # carry
        i = 0
        while i < n and dig[i] == base - 1:
            dig[i] = 0
            i += 1
        if i < n:
            dig[i] += 1
        else:
            dig[n] = 1
            rem[n] = 0.
            n += 1
        rem[n - i] = (dig[i] + rem[n - i - 1]) / base
        for k in range(n - i, n - 1):
            rem[k + 1] = rem[k] / base
        state = rem[n - 1] / base
    else:
        dig[0] += 1
        state = (dig[0] + rem[n - 1]) / base
    # values within 2^-54 of one round up to one
    if state >= 1.:
        state = ONE_MINUS_F64
    return n, state


@nb.njit
def _skip(dig, rem, n, base, count):
    state = 0.
    for _ in range(count):
        n, state = _advance(dig, rem, n, base)
    return n, state


@nb.njit
def _fill(dig, rem, n, base, out):
    for j in range(out.shape[0]):
        n, x = _advance(dig, rem, n, base)
        out[j] = x
    return n


class Halton(UniformSampler):
    """Incremental Halton sequence in a given base.

    Parameters
    ----------
    start: int (default=1)
        index of the first value to generate; clipped to [1, MAX_INDEX]
    base: int (default=2)
        base of the sequence; clipped to [2, MAX_INDEX]. Use prime bases
        (and distinct ones) when several sequences are combined

    Attributes
    ----------
    state: float
        last generated value (0. until the first value is generated)
    index: int
        index of `state` in the sequence (start - 1 before the first value)

    Note
    ----
    Memory usage grows like log(index) / log(base): larger bases need fewer
    digits.

    Examples
    --------
    >>> h = Halton(1, 2)
    >>> [h.next_f64() for _ in range(4)]
    [0.5, 0.25, 0.75, 0.125]

    """

    def __init__(self, start=1, base=2):
        i = min(max(int(start), 1), MAX_INDEX) - 1
        self.base = min(max(int(base), 2), MAX_INDEX)
        digits = _digits(i, self.base)
        n = len(digits)
        capacity = max(_num_digits(RESERVE_INDEX, self.base), n)
        self._dig = np.zeros(capacity, dtype=np.int64)
        self._rem = np.zeros(capacity, dtype=np.float64)
        self._dig[:n] = digits
        # remainders are filled from the most significant digit downwards
        for k in range(1, n):
            self._rem[k] = (digits[n - k] + self._rem[k - 1]) / self.base
        self.ndigits = n
        self.index = i
        self.state = 0.

    def __repr__(self):
        return 'Halton(base=%i, index=%i, state=%r)' % (self.base, self.index,
                                                        self.state)

    @property
    def digits(self):
        return self._dig[:self.ndigits]

    @property
    def remainders(self):
        return self._rem[:self.ndigits]

    @property
    def capacity(self):
        return self._dig.shape[0]

    def _reserve(self, ndigits):
        capacity = self.capacity
        if ndigits > capacity:
            extra = max(ndigits, 2 * capacity) - capacity
            self._dig = np.concatenate((self._dig, np.zeros(extra, np.int64)))
            self._rem = np.concatenate((self._rem,
                                        np.zeros(extra, np.float64)))
        err_msg = 'Halton: digits and remainders of different sizes'
        assert self._dig.shape == self._rem.shape, err_msg

    def advance(self):
        """Move to the next element of the sequence."""
        assert self.ndigits > 0, 'Halton: empty digit buffer in %r' % self
        # a carry may add one digit
        self._reserve(self.ndigits + 1)
        self.ndigits, self.state = _advance(self._dig, self._rem,
                                            self.ndigits, self.base)
        self.index += 1

    def skip(self, n):
        """Skip n elements of the sequence.

        Note
        ----
        `state` is then the value at index ``index + n``, i.e. the last
        skipped element.
        """
        if n <= 0:
            return
        self._reserve(_num_digits(self.index + n, self.base))
        self.ndigits, self.state = _skip(self._dig, self._rem, self.ndigits,
                                         self.base, n)
        self.index += n

    def random(self, size=1):
        """Array of the next `size` values of the sequence."""
        out = np.empty(size, dtype=np.float64)
        if size > 0:
            self._reserve(_num_digits(self.index + size, self.base))
            self.ndigits = _fill(self._dig, self._rem, self.ndigits,
                                 self.base, out)
            self.index += size
            self.state = float(out[-1])
        return out

    def copy(self):
        return copy.deepcopy(self)

    def next_f64(self):
        self.advance()
        return self.state

    def next_f32(self):
        self.advance()
        x = np.float32(self.state)
        # narrowing may round up to 1
        return x if x < 1. else ONE_MINUS_F32

    def next_u64(self):
        self.advance()
        return min(math.floor(self.state * MAX_UINT_64), MAX_UINT_64)

    def next_u32(self):
        self.advance()
        return min(math.floor(self.state * MAX_UINT_32), MAX_UINT_32)


def halton(N, dim, start=1):
    """Halton sequence.

    Component j of the sequence consists of a van der Corput sequence in
    base b_j, where b_j is the j-th prime number.

    Parameters
    ----------
    N : int
        length of sequence
    dim: int
        dimension
    start: int (default=1)
        index of the first point

    Returns
    -------
    (N, dim) numpy array.

    Examples
    --------
    >>> halton(4, 2)
    array([[0.5       , 0.33333333],
           [0.25      , 0.66666667],
           [0.75      , 0.11111111],
           [0.125     , 0.44444444]])
    """
    if N < 0 or dim < 1:
        raise ValueError('halton: invalid size (N=%s, dim=%s)' % (N, dim))
    primes = first_primes(dim)
    res = np.empty((N, dim), dtype=np.float64)
    for j, b in enumerate(primes):
        res[:, j] = Halton(start, int(b)).random(N)
    return res
