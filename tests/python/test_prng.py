"""
Tests for the seeded pseudo-random source.
"""

import numpy as np
import pytest

from stochprox.exceptions import InvalidInputError
from stochprox.stochastic import BoundKind, Interval, MersenneTwister, PseudoRandom


class TestMersenneTwister:
    """MT19937 output."""

    def test_reference_output(self):
        """Seed 5489 produces the reference first output."""
        rng = MersenneTwister(5489)
        assert rng.next_uint32() == 3499211612

    def test_matches_numpy_legacy_stream(self):
        """Doubles match NumPy's legacy MT19937 (same seeding and 53-bit mapping)."""
        rng = PseudoRandom.create(12345)
        expected = np.random.RandomState(12345).random_sample(1000)
        actual = [rng.next_double() for _ in range(1000)]
        np.testing.assert_array_equal(actual, expected)

    @pytest.mark.parametrize("seed", [1, 123456, 2**31 - 1])
    def test_uint32_matches_numpy_legacy_stream(self, seed):
        """Raw words match RandomState.randint over the full 32-bit range."""
        rng = MersenneTwister(seed)
        expected = np.random.RandomState(seed).randint(0, 2**32, size=700, dtype=np.uint32)
        assert [rng.next_uint32() for _ in range(700)] == expected.tolist()

    def test_interleaved_draws_share_one_stream(self):
        """Words and doubles advance the same generator state."""
        rng = MersenneTwister(99)
        reference = np.random.RandomState(99)
        for _ in range(50):
            assert rng.next_uint32() == int(reference.randint(0, 2**32, dtype=np.uint32))
            assert rng.next_double() == reference.random_sample()

    def test_permutation(self):
        """Permutations match RandomState.permutation and cover range(n)."""
        rng = MersenneTwister(2024)
        perm = rng.permutation(30)
        assert perm == np.random.RandomState(2024).permutation(30).tolist()
        assert sorted(perm) == list(range(30))
        assert all(isinstance(k, int) for k in perm)

    def test_same_seed_same_stream(self):
        """Two instances with one seed are bit-identical."""
        a, b = PseudoRandom.create(7), PseudoRandom.create(7)
        assert [a.next_uint32() for _ in range(700)] == [b.next_uint32() for _ in range(700)]

    def test_default_seeds_differ(self):
        """Unseeded instances take successive seeds."""
        a, b = PseudoRandom.create(), PseudoRandom.create()
        assert a.seed != b.seed
        assert a.next_uint32() != b.next_uint32()

    def test_repr(self):
        """Repr shows the seed."""
        assert repr(MersenneTwister(3)) == "MersenneTwister(seed=3)"


class TestDraws:
    """Derived draws."""

    def test_next_double_range(self, rng):
        """Doubles lie in [0, 1)."""
        values = [rng.next_double() for _ in range(2000)]
        assert min(values) >= 0.0
        assert max(values) < 1.0

    def test_next_single(self, rng):
        """Singles lie in [0, 1) at float32 precision."""
        for _ in range(200):
            value = rng.next_single()
            assert 0.0 <= value < 1.0
            assert value == float(np.float32(value))

    def test_greater_than_zero(self, rng):
        """The open-below draw never returns zero."""
        assert all(rng.next_double_greater_than_0() > 0.0 for _ in range(200))

    def test_next_bytes(self):
        """Byte draws have the requested length and are reproducible."""
        a = PseudoRandom.create(11).next_bytes(10)
        b = PseudoRandom.create(11).next_bytes(10)
        assert len(a) == 10
        assert a == b

    def test_negative_byte_count(self, rng):
        """A negative byte count is rejected."""
        with pytest.raises(InvalidInputError):
            rng.next_bytes(-1)


class TestInterval:
    """Interval draws and validation."""

    def test_draw_in_half_open(self, rng):
        """Draws respect an open upper bound."""
        interval = Interval(2.0, 5.0, upper_kind=BoundKind.OPEN)
        for _ in range(500):
            value = rng.next_double(interval)
            assert 2.0 <= value < 5.0

    def test_draw_in_open(self, rng):
        """Draws respect an open lower bound."""
        interval = Interval(0.0, 1e-3, lower_kind=BoundKind.OPEN, upper_kind=BoundKind.OPEN)
        for _ in range(200):
            assert interval.contains(rng.next_double(interval))

    def test_single_in_interval(self, rng):
        """Single-precision interval draws stay inside."""
        interval = Interval(-1.0, 1.0)
        for _ in range(200):
            assert -1.0 <= rng.next_single(interval) <= 1.0

    def test_degenerate_closed(self, rng):
        """A closed point interval returns its bound."""
        assert rng.next_double(Interval(3.0, 3.0)) == 3.0

    def test_degenerate_open(self, rng):
        """An empty point interval is rejected."""
        with pytest.raises(InvalidInputError, match="empty"):
            rng.next_double(Interval(3.0, 3.0, upper_kind=BoundKind.OPEN))

    def test_invalid_bounds(self):
        """Reversed or infinite bounds are rejected."""
        with pytest.raises(InvalidInputError):
            Interval(2.0, 1.0)
        with pytest.raises(InvalidInputError):
            Interval(0.0, float("inf"))

    def test_contains_and_str(self):
        """Endpoint kinds drive membership and formatting."""
        interval = Interval(0.0, 1.0, upper_kind=BoundKind.OPEN)
        assert interval.contains(0.0)
        assert not interval.contains(1.0)
        assert str(interval) == "[0.0, 1.0)"
