"""Tests for the synthetic transaction list."""

import logging
import os
import random
import sys
from datetime import date, datetime, timedelta

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from calc.transaction_generator import (
    STATUS_COMPLETE,
    STATUS_PENDING,
    STATUS_REVERSED,
    Transaction,
    TransactionGenerator,
)
from details.GenerationDetails import GenerationDetails
from store.key_value_store import InMemoryStore


TODAY = date(2026, 3, 15)


@pytest.fixture
def generator():
    return TransactionGenerator(GenerationDetails(), InMemoryStore(), random.Random(99))


def test_pending_spread_over_eight_days(generator):
    counts = generator.pending_per_day(19)
    assert len(counts) == 8
    assert sum(counts) == 19
    assert counts[:3] == [3, 3, 3]
    assert counts[3:] == [2, 2, 2, 2, 2]


def test_complete_spread(generator):
    counts = generator.complete_per_day(150)
    assert len(counts) == 15
    assert sum(counts) == 150
    assert generator.complete_per_day(0) == []
    assert len(generator.complete_per_day(12)) == 7


def test_generate_counts_and_days(generator):
    transactions = generator.generate(20, 100, TODAY)
    pending = [t for t in transactions if t.status == STATUS_PENDING]
    settled = [t for t in transactions if t.status in (STATUS_COMPLETE, STATUS_REVERSED)]
    assert len(pending) == 20
    assert len(settled) == 100
    oldest_pending = TODAY - timedelta(days=7)
    assert all(oldest_pending <= t.timestamp.date() <= TODAY for t in pending)
    assert all(t.timestamp.date() < oldest_pending for t in settled)


def test_newest_first(generator):
    transactions = generator.generate(10, 40, TODAY)
    stamps = [t.timestamp for t in transactions]
    assert stamps == sorted(stamps, reverse=True)


def test_amounts_and_fees(generator):
    for t in generator.generate(0, 200, TODAY):
        assert 5 <= t.amount <= 150
        assert t.fee == round(t.amount * 0.20, 2)
        assert t.net == round(t.amount * 0.80, 2)
        assert t.type in ('payment', 'tip')


def test_negative_counts_raise(generator):
    with pytest.raises(ValueError):
        generator.generate(-1, 0, TODAY)


def test_days_remaining():
    t = Transaction(timestamp=datetime(2026, 3, 13, 12, 0, 0), amount=10.0, fee=2.0, net=8.0,
                    type='tip', user_id='u1', status=STATUS_PENDING)
    assert t.days_remaining(TODAY) == 4
    assert t.days_remaining(TODAY + timedelta(days=30)) == 1


def test_cached_per_counts_and_day(generator):
    first = generator.get_or_generate(5, 20, TODAY)
    assert generator.get_or_generate(5, 20, TODAY) == first
    other = generator.get_or_generate(5, 21, TODAY)
    assert len(other) == 26


def test_corrupt_cache_regenerates(generator, caplog):
    generator.store.set(generator.storage_key, '{"key": "x", "transactions": 5')
    with caplog.at_level(logging.ERROR):
        transactions = generator.get_or_generate(2, 0, TODAY)
    assert len(transactions) == 2
    assert any('corrupt' in record.getMessage() for record in caplog.records)


def test_to_dict_round_trip():
    t = Transaction(timestamp=datetime(2026, 3, 13, 12, 30, 5), amount=25.0, fee=5.0, net=20.0,
                    type='payment', user_id='u123456789', status=STATUS_COMPLETE)
    assert Transaction.from_dict(t.to_dict()) == t
