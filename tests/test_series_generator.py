"""Tests for the synthetic earnings series generator."""

import os
import random
import sys
from datetime import date

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from calc.series_generator import SeriesGenerator, allocate_cents
from details.GenerationDetails import GenerationDetails
from model.EarningsData import Category, to_cents


@pytest.fixture(scope="module")
def details():
    return GenerationDetails()


@pytest.fixture
def generator(details):
    return SeriesGenerator(details, random.Random(1234))


def test_allocate_cents_sums_exactly():
    parts = allocate_cents(1001, [1.0, 1.0, 1.0])
    assert parts == [334, 334, 333]
    assert sum(parts) == 1001


def test_allocate_cents_zero_weights_spread_evenly():
    assert allocate_cents(10, [0.0, 0.0]) == [5, 5]
    assert allocate_cents(10, []) == []


def test_records_sum_to_total(generator):
    """Period nets add up to the requested total to the cent."""
    for seed in range(25):
        dataset = generator.generate(total_net=12345.67, period_count=18, end=date(2026, 5, 20), seed=seed)
        assert sum(to_cents(r.net) for r in dataset.records) == to_cents(12345.67)


def test_categories_sum_to_period_net(generator):
    for seed in range(25):
        dataset = generator.generate(total_net=9600, period_count=24, minimum=500,
                                     end=date(2026, 3, 1), seed=seed)
        for record in dataset.records:
            assert abs(to_cents(record.category_total()) - to_cents(record.net)) <= 1


def test_pinned_and_unused_categories_are_zero(generator):
    dataset = generator.generate(total_net=5000, period_count=12, end=date(2026, 6, 30), seed=7)
    for record in dataset.records:
        assert record.amount(Category.SUBSCRIPTIONS) == 0.0
        assert record.amount(Category.REFERRALS) == 0.0
        assert record.amount(Category.STREAMS) == 0.0
        if record.net > 0:
            assert record.amount(Category.MESSAGES) >= 0.69 * record.net


def test_most_recent_period_meets_minimum(generator):
    for minimum in (1, 250, 500, 5000, 20000):
        for seed in range(10):
            dataset = generator.generate(total_net=9600, period_count=24, minimum=minimum,
                                         end=date(2026, 3, 15), seed=seed)
            assert dataset.most_recent.net >= minimum


@pytest.mark.parametrize('day', [1, 15, 31])
@pytest.mark.parametrize('pattern', ['consistent', 'peakMiddle', 'rapidLate', 'plateau'])
def test_most_recent_period_stays_in_buffer_band(generator, day, pattern):
    """24 months, 9600 total, minimum 500, on any day of the month."""
    for seed in range(20):
        dataset = generator.generate(total_net=9600, period_count=24, minimum=500,
                                     end=date(2026, 3, day), seed=seed, pattern=pattern)
        assert len(dataset.records) == 24
        assert 550 <= dataset.most_recent.net <= 750
        assert abs(dataset.net - 9600) <= 0.24


def test_large_total_still_caps_most_recent_period(generator):
    dataset = generator.generate(total_net=50000, period_count=12, minimum=500,
                                 end=date(2026, 3, 31), seed=8, pattern='rapidLate')
    assert 550 <= dataset.most_recent.net < 750
    assert dataset.net == 50000


def test_minimum_larger_than_total_wins(generator):
    dataset = generator.generate(total_net=100, period_count=6, minimum=500, end=date(2026, 3, 1), seed=3)
    assert dataset.most_recent.net >= 550
    assert all(r.net == 0 for r in dataset.records[:-1])


def test_zero_total_and_zero_minimum_is_all_zero(generator):
    dataset = generator.generate(total_net=0, period_count=12, end=date(2026, 3, 1), seed=5)
    assert all(r.net == 0 for r in dataset.records)
    assert all(r.transaction_count == 0 for r in dataset.records)


def test_same_seed_same_dataset(details):
    first = SeriesGenerator(details).generate(total_net=4000, period_count=10, end=date(2026, 4, 10), seed=42)
    second = SeriesGenerator(details).generate(total_net=4000, period_count=10, end=date(2026, 4, 10), seed=42)
    assert first == second


def test_pattern_and_seed_recorded(generator):
    dataset = generator.generate(total_net=4000, period_count=10, end=date(2026, 4, 10), seed=99,
                                 pattern='plateau')
    assert dataset.pattern == 'plateau'
    assert dataset.seed == 99


def test_single_period_uses_consistent_pattern(generator):
    dataset = generator.generate(total_net=100, period_count=1, end=date(2026, 4, 10), seed=1,
                                 pattern='rapidLate')
    assert dataset.pattern == 'consistent'
    assert dataset.net == 100


def test_records_are_consecutive_months_oldest_first(generator):
    dataset = generator.generate(total_net=1000, period_count=3, end=date(2026, 1, 20), seed=2)
    assert [r.start for r in dataset.records] == [date(2025, 11, 1), date(2025, 12, 1), date(2026, 1, 1)]
    assert [r.index for r in dataset.records] == [0, 1, 2]
    assert [r.start for r in dataset.newest_first()][0] == date(2026, 1, 1)
    assert dataset.newest_first()[0] is dataset.most_recent


def test_oldest_anchor_fixes_period_count(generator):
    dataset = generator.generate(total_net=1000, period_count=3, end=date(2026, 3, 10),
                                 oldest_anchor=date(2024, 3, 15), seed=4)
    assert len(dataset.records) == 25
    assert dataset.oldest.start == date(2024, 3, 1)


def test_gross_follows_net_margin(generator):
    dataset = generator.generate(total_net=8000, period_count=8, end=date(2026, 3, 10), seed=8)
    for record in dataset.records:
        assert record.gross == pytest.approx(record.net / 0.80, abs=0.01)


def test_periods_with_net_have_transactions(generator):
    dataset = generator.generate(total_net=8000, period_count=8, end=date(2026, 3, 10), seed=8)
    for record in dataset.records:
        if record.net > 0:
            assert record.transaction_count >= 1


def test_invalid_arguments_raise(generator):
    with pytest.raises(ValueError):
        generator.generate(total_net=-1, period_count=3)
    with pytest.raises(ValueError):
        generator.generate(total_net=10, period_count=0)
    with pytest.raises(ValueError):
        generator.generate(total_net=10, period_count=3, minimum=-5)
    with pytest.raises(ValueError):
        generator.generate(total_net=10, period_count=3, granularity='week')


def test_daily_granularity(generator):
    dataset = generator.generate(total_net=300, period_count=30, granularity='day', end=date(2026, 3, 10), seed=6)
    assert len(dataset.records) == 30
    assert dataset.most_recent.start == date(2026, 3, 10)
    assert dataset.granularity == 'day'
