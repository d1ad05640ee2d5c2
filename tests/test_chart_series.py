"""Tests for the chart series derived from a monthly Dataset."""

import os
import random
import sys
from datetime import date

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from calc.chart_series import (
    ChartSeriesBuilder,
    cumulative,
    elapsed_days,
    spread_cents,
)
from calc.series_generator import SeriesGenerator
from details.GenerationDetails import GenerationDetails
from model.EarningsData import CATEGORY_ORDER, Category, to_cents


TODAY = date(2026, 3, 10)


@pytest.fixture(scope="module")
def details():
    return GenerationDetails()


@pytest.fixture(scope="module")
def dataset(details):
    generator = SeriesGenerator(details, random.Random(8))
    return generator.generate(total_net=24000.0, period_count=12, minimum=400.0, end=TODAY, seed=77)


@pytest.fixture
def builder(dataset, details):
    return ChartSeriesBuilder(dataset, details, TODAY)


def test_spread_cents_sums_exactly():
    rng = random.Random(1)
    for total in (0, 1, 31, 12345):
        parts = spread_cents(total, 31, rng)
        assert len(parts) == 31
        assert sum(parts) == total
        assert all(p >= 0 for p in parts)
    assert spread_cents(100, 0, rng) == []


def test_cumulative():
    assert cumulative([0.1, 0.2, 0.3]) == [0.1, 0.3, 0.6]


def test_elapsed_days(dataset):
    assert elapsed_days(dataset.most_recent, TODAY) == 10
    # Oldest month is April 2025
    assert elapsed_days(dataset.records[0], TODAY) == 30


def test_all_time_ends_at_category_totals(builder, dataset):
    series = builder.all_time()
    assert len(series.labels) == 12
    assert series.labels[-1] == 'Mar 2026'
    totals = dataset.category_totals()
    for category in CATEGORY_ORDER:
        assert series.values[category][-1] == pytest.approx(totals[category], abs=0.001)


def test_month_spans_whole_month_but_stops_today(builder, dataset):
    series = builder.month()
    assert series.label_count == 31
    assert len(series.labels) == 31
    assert series.labels[0] == '01 Mar 26'
    messages = series.values[Category.MESSAGES]
    assert len(messages) == 10
    assert messages[-1] == pytest.approx(dataset.most_recent.amount(Category.MESSAGES), abs=0.001)


def test_month_outside_dataset_is_empty(builder):
    series = builder.month(2020, 1)
    assert series.is_empty()
    assert series.label_count == 31


def test_daily_split_is_stable(dataset, details):
    first = ChartSeriesBuilder(dataset, details, TODAY).daily_for_month(2026, 1)
    second = ChartSeriesBuilder(dataset, details, TODAY).daily_for_month(2026, 1)
    assert first == second
    record = dataset.find_period(2026, 1)
    for category in CATEGORY_ORDER:
        assert sum(to_cents(v) for v in first[category]) == to_cents(record.amount(category))


def test_last_days_window(builder):
    series = builder.last_days()
    assert len(series.labels) == 30
    assert series.labels[-1] == 'Mar 10, 2026'
    assert series.dates[0] == date(2026, 2, 9)
    values = series.values[Category.MESSAGES]
    assert all(b >= a for a, b in zip(values, values[1:]))


def test_statistics_matches_daily_nets(builder):
    stats = builder.statistics()
    assert len(stats.earnings) == 30
    assert len(stats.counts) == 30
    amounts = builder.day_amounts(TODAY)
    assert stats.earnings[-1] == pytest.approx(sum(amounts.values()), abs=0.001)
    assert all(c >= 0 for c in stats.counts)


def test_build_rejects_unknown_window(builder):
    with pytest.raises(ValueError):
        builder.build('weekly')
