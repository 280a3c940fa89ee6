"""Tests for the generation capability, Interleave and PseudoRandom."""

import warnings
from itertools import islice

import numpy as np
import pytest

from quasiseq import Halton, Interleave, PseudoRandom, UniformSampler
from quasiseq.samplers import MAX_UINT_32, MAX_UINT_64

EPS = np.finfo(np.float64).eps


class Counter:
    """Minimal generator, not derived from UniformSampler."""

    def __init__(self, offset):
        self.offset = offset
        self.calls = 0

    def _next(self):
        self.calls += 1
        return self.offset + self.calls

    next_u32 = next_u64 = next_f32 = next_f64 = _next


def test_interleave_wrap():
    gen = Interleave([Halton(1, 2), Halton(1, 3)])
    expected = [1 / 2, 1 / 3,
                1 / 4, 2 / 3,
                3 / 4, 1 / 9,
                1 / 8, 4 / 9,
                5 / 8, 7 / 9,
                3 / 8, 2 / 9,
                7 / 8, 5 / 9,
                1 / 16, 8 / 9,
                9 / 16, 1 / 27]
    for x in expected:
        assert abs(gen.next_f64() - x) < EPS


def test_interleave_first_values():
    gen = Interleave([Halton(1, 13), Halton(1, 17)])
    assert gen.next_f64() == 1. / 13.
    assert gen.next_f64() == 1. / 17.


@pytest.mark.parametrize("method", ["next_u32", "next_u64", "next_f32",
                                    "next_f64"])
def test_interleave_position(method):
    bases = [2, 3, 5]
    gen = Interleave([Halton(1, b) for b in bases])
    refs = [Halton(1, b) for b in bases]
    expected = [[getattr(r, method)() for _ in range(20)] for r in refs]
    for k in range(60):
        assert getattr(gen, method)() == expected[k % 3][k // 3]
        assert 0 <= gen.current < len(gen)


def test_interleave_cursor_shared_across_types():
    gen = Interleave([Counter(0), Counter(100)])
    assert gen.next_u32() == 1
    assert gen.next_f64() == 101
    assert gen.next_u64() == 2
    assert gen.next_f32() == 102
    assert gen.current == 0


def test_interleave_single():
    gen = Interleave([Halton(1, 2)])
    assert [gen.next_f64() for _ in range(3)] == [0.5, 0.25, 0.75]
    assert gen.current == 0


def test_interleave_empty():
    with pytest.raises(ValueError):
        Interleave([])


def test_interleave_copies_generators():
    h = Halton(1, 2)
    with pytest.warns(UserWarning):
        gen = Interleave([h, h])
    assert gen.next_f64() == gen.next_f64() == 0.5
    assert h.index == 0
    assert gen.generators[0] is not gen.generators[1]


def test_interleave_duck_typing():
    gen = Interleave([Counter(0), Counter(10), Counter(20)])
    assert [gen.next_u64() for _ in range(6)] == [1, 11, 21, 2, 12, 22]


def test_interleave_mixed_with_pseudo_random():
    gen = Interleave([Halton(1, 2), PseudoRandom(42)])
    ref = PseudoRandom(42)
    out = [gen.next_f64() for _ in range(10)]
    assert out[::2] == pytest.approx([0.5, 0.25, 0.75, 0.125, 0.625],
                                     abs=EPS)
    assert out[1::2] == [ref.next_f64() for _ in range(5)]


def test_interleave_correlated_bases_warn():
    with pytest.warns(UserWarning):
        Interleave([Halton(1, 2), Halton(1, 3), Halton(1, 4)])


def test_interleave_coprime_bases_no_warning():
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        Interleave([Halton(1, 2), Halton(1, 3), PseudoRandom(0)])


def test_interleave_iterator():
    gen = Interleave([Halton(1, 2), Halton(1, 3)])
    assert list(islice(gen, 4)) == pytest.approx([1 / 2, 1 / 3, 1 / 4, 2 / 3],
                                                  abs=EPS)


@pytest.mark.parametrize("method", ["next_u32", "next_u64", "next_f32",
                                    "next_f64"])
def test_abstract_sampler(method):
    with pytest.raises(NotImplementedError):
        getattr(UniformSampler(), method)()


@pytest.mark.parametrize("dtype,method", [(np.uint32, "next_u32"),
                                          (np.uint64, "next_u64"),
                                          (np.float32, "next_f32"),
                                          (np.float64, "next_f64"),
                                          (float, "next_f64")])
def test_gen(dtype, method):
    assert Halton(1, 3).gen(dtype) == getattr(Halton(1, 3), method)()


@pytest.mark.parametrize("dtype", [np.int8, "foo", complex])
def test_gen_unsupported(dtype):
    with pytest.raises(TypeError):
        Halton(1, 3).gen(dtype)


def test_uniform():
    sampler = Halton(1, 2)
    assert sampler.uniform(2., 4.) == 3.
    assert sampler.uniform() == 0.25
    for _ in range(100):
        assert -1. <= sampler.uniform(-1., 1.) < 1.


@pytest.mark.parametrize("low,high", [(1., 1.), (2., 0.)])
def test_uniform_invalid(low, high):
    with pytest.raises(ValueError):
        Halton(1, 2).uniform(low, high)


def test_random():
    u = Halton(1, 2).random(4)
    assert u.dtype == np.float64
    np.testing.assert_array_equal(u, [0.5, 0.25, 0.75, 0.125])
    assert Halton(1, 2).random(0).shape == (0,)


def test_pseudo_random_ranges():
    gen = PseudoRandom(0)
    for _ in range(1000):
        assert 0 <= gen.next_u32() <= MAX_UINT_32
        assert 0 <= gen.next_u64() <= MAX_UINT_64
        assert 0. <= gen.next_f32() < 1.
        assert 0. <= gen.next_f64() < 1.
    assert isinstance(gen.next_f32(), np.float32)


def test_pseudo_random_seeded():
    a, b = PseudoRandom(7), PseudoRandom(7)
    np.testing.assert_array_equal(a.random(10), b.random(10))


def test_monte_carlo_pi():
    # estimate pi from the area of the unit disc
    def estimate_pi(N, s1, s2):
        u = s1.random(N) * 2. - 1.
        v = s2.random(N) * 2. - 1.
        return 4. * np.mean(u**2 + v**2 <= 1.)

    err_qmc = abs(estimate_pi(10_000, Halton(1, 17), Halton(1, 19)) - np.pi)
    assert err_qmc < 1e-2
