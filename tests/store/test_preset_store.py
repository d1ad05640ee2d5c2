"""Tests for the key-value stores and named presets."""

import json
import os
import random
import shutil
import sys
import tempfile
from datetime import date

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from calc.series_generator import SeriesGenerator
from details.GenerationDetails import GenerationDetails
from model.EarningsConfig import EarningsConfig, PeriodCounts
from store.key_value_store import InMemoryStore, JsonFileStore
from store.preset_store import ACTIVE_PRESET_KEY, PRESETS_KEY, PresetStore


@pytest.fixture
def temp_dir():
    path = tempfile.mkdtemp()
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def config():
    return EarningsConfig(period_counts=PeriodCounts(months=6, pending=4, complete=30), min_balance=150.0)


@pytest.fixture
def dataset():
    generator = SeriesGenerator(GenerationDetails(), random.Random(3))
    return generator.generate(total_net=1800.0, period_count=6, minimum=150.0, end=date(2026, 3, 10), seed=21)


class TestJsonFileStore:
    def test_set_get_remove(self, temp_dir):
        store = JsonFileStore(os.path.join(temp_dir, 'nested', 'state.json'))
        assert store.get('a') is None
        store.set('a', 'one')
        store.set('b', 'two')
        assert store.get('a') == 'one'
        assert sorted(store.keys()) == ['a', 'b']
        store.remove('a')
        store.remove('missing')
        assert store.get('a') is None

    def test_shared_between_instances(self, temp_dir):
        path = os.path.join(temp_dir, 'state.json')
        JsonFileStore(path).set('key', 'value')
        assert JsonFileStore(path).get('key') == 'value'

    def test_unreadable_file_is_empty(self, temp_dir):
        path = os.path.join(temp_dir, 'state.json')
        with open(path, 'w') as f:
            f.write('not json')
        store = JsonFileStore(path)
        assert store.get('key') is None
        store.set('key', 'value')
        assert store.get('key') == 'value'


class TestPresetStore:
    def test_save_and_load(self, config, dataset):
        presets = PresetStore(InMemoryStore())
        presets.save('  Launch  ', config, dataset)
        loaded = presets.load('Launch')
        assert loaded.name == 'Launch'
        assert loaded.config == config
        assert loaded.dataset == dataset
        assert presets.active() == 'Launch'

    def test_list_is_case_insensitive(self, config):
        presets = PresetStore(InMemoryStore())
        for name in ('beta', 'Alpha', 'gamma'):
            presets.save(name, config, None)
        assert presets.list() == ['Alpha', 'beta', 'gamma']

    def test_empty_name_rejected(self, config):
        with pytest.raises(ValueError):
            PresetStore(InMemoryStore()).save('   ', config, None)

    def test_missing_preset(self):
        assert PresetStore(InMemoryStore()).load('nope') is None

    def test_delete_clears_active(self, config):
        store = InMemoryStore()
        presets = PresetStore(store)
        presets.save('one', config, None)
        assert presets.delete('one') is True
        assert presets.delete('one') is False
        assert presets.active() is None
        assert store.get(ACTIVE_PRESET_KEY) is None

    def test_unreadable_dataset_loads_config_only(self, config, dataset):
        store = InMemoryStore()
        presets = PresetStore(store)
        presets.save('broken', config, dataset)
        data = json.loads(store.get(PRESETS_KEY))
        data['broken']['dataset'] = {'records': 'garbage'}
        store.set(PRESETS_KEY, json.dumps(data))
        loaded = presets.load('broken')
        assert loaded.config == config
        assert loaded.dataset is None
