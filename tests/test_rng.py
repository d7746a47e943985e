"""
Unit tests for the reproducible random source used by the daily challenge.
"""

import datetime

import pytest

from sudoku_rng import SeededRandom, date_seed, shuffled, today_date_string


class TestSeededRandom:
    """Test Mulberry32 determinism and ranges."""

    def test_same_seed_same_sequence(self):
        a, b = SeededRandom(12345), SeededRandom(12345)
        assert [a.next() for _ in range(20)] == [b.next() for _ in range(20)]

    def test_different_seeds_diverge(self):
        a, b = SeededRandom(1), SeededRandom(2)
        assert [a.next() for _ in range(5)] != [b.next() for _ in range(5)]

    @pytest.mark.parametrize("seed", [0, 1, 2**31 - 1, 2**32 + 7])
    def test_values_in_unit_interval(self, seed):
        rng = SeededRandom(seed)
        for _ in range(1000):
            x = rng.next()
            assert 0.0 <= x < 1.0

    def test_next_int_bounds(self):
        rng = SeededRandom(99)
        values = {rng.next_int(3, 5) for _ in range(500)}
        assert values == {3, 4, 5}

    def test_state_wraps_to_32_bits(self):
        a, b = SeededRandom(2**32 + 5), SeededRandom(5)
        assert [a.next_uint32() for _ in range(3)] == [b.next_uint32() for _ in range(3)]

    def test_reference_stream(self):
        rng = SeededRandom(2147483647)
        assert [rng.next(), rng.next()] == [0.4290980885270983, 0.12713524978607893]


class TestDateSeed:
    """Test the rolling string hash."""

    def test_known_values(self):
        assert date_seed("") == 0
        assert date_seed("a") == 97
        assert date_seed("ab") == 97 * 31 + 98
        assert date_seed("2025-06-01") == 274311004

    def test_is_non_negative_and_stable(self):
        seeds = {date_seed(f"2024-01-{d:02d}") for d in range(1, 32)}
        assert len(seeds) == 31
        assert all(s >= 0 for s in seeds)
        assert date_seed("2024-03-15") == date_seed("2024-03-15")

    def test_folds_to_32_bits(self):
        assert 0 <= date_seed("x" * 200) <= 2**31


class TestShuffled:
    """Test seeded Fisher-Yates."""

    def test_permutation(self):
        items = list(range(81))
        out = shuffled(items, SeededRandom(7))
        assert sorted(out) == items
        assert items == list(range(81))

    def test_seeded_is_reproducible(self):
        assert shuffled(range(1, 10), SeededRandom(42)) == shuffled(range(1, 10), SeededRandom(42))

    def test_consumes_n_minus_one_draws(self):
        rng, ref = SeededRandom(3), SeededRandom(3)
        shuffled(range(9), rng)
        for _ in range(8):
            ref.next()
        assert rng.next() == ref.next()

    def test_single_item(self):
        assert shuffled([4], SeededRandom(1)) == [4]

    def test_unseeded_is_permutation(self):
        assert sorted(shuffled(range(1, 10))) == list(range(1, 10))


def test_today_date_string():
    assert today_date_string(datetime.date(2024, 3, 5)) == "2024-03-05"
