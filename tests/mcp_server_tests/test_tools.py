"""Tests for the MCP server tools module."""

import os
import sys
import json
import pytest

# Add src and mcp-server to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../src')))
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../mcp-server')))

from tools import CONFIG_KEY, EarningsTools


CONFIG = {
    'periodCounts': {'months': 12, 'pending': 6, 'complete': 40},
    'minBalance': 250,
    'minPending': 50,
    'calendarDay': '2026-03-15',
}


@pytest.fixture
def tools(state_dir):
    tools = EarningsTools(state_dir)
    tools.apply_config(CONFIG)
    return tools


class TestConfiguration:
    """Tests for applying and restoring configuration."""

    def test_apply_config_returns_summary(self, tools):
        summary = tools.get_dataset_summary()
        assert summary['enabled'] is True
        assert summary['periods'] == 12
        assert summary['net'] == pytest.approx(3600.0, abs=0.01)
        assert summary['config']['minBalance'] == 250.0
        assert summary['activeCategory'] == 'subscriptions'

    def test_config_is_persisted(self, tools, state_dir):
        with open(os.path.join(state_dir, 'state.json')) as f:
            state = json.load(f)
        assert CONFIG_KEY in state
        assert 'ofStats.earnings.snapshot' in state

    def test_restart_restores_dataset(self, tools, state_dir):
        first = tools.get_dataset_summary()
        restarted = EarningsTools(state_dir)
        assert restarted.get_dataset_summary()['key'] == first['key']
        assert restarted.get_dataset_summary()['seed'] == first['seed']

    def test_disabled_config(self, tools):
        summary = tools.apply_config(dict(CONFIG, enabled=False))
        assert summary['enabled'] is False
        assert tools.get_period(2026, 3) == {"error": "Generation is disabled"}


class TestDataTools:
    """Tests for the dataset inspection tools."""

    def test_get_period(self, tools):
        period = tools.get_period(2026, 3)
        assert period['year'] == 2026
        assert period['month'] == 3
        assert period['net'] >= 300
        assert period['net_formatted'].startswith('$')
        assert round(sum(period['categories'].values()), 2) == period['net']

    def test_get_period_outside_dataset(self, tools):
        assert 'error' in tools.get_period(2019, 1)

    def test_regenerate_keeps_totals(self, tools):
        before = tools.get_dataset_summary()
        after = tools.regenerate()
        assert after['periods'] == before['periods']
        assert after['net'] == pytest.approx(before['net'], abs=0.01)

    def test_override_gross(self, tools):
        summary = tools.override_gross(10000)
        assert summary['net'] == pytest.approx(8000.0, abs=0.01)
        assert summary['gross'] == pytest.approx(10000.0, abs=0.5)

    def test_get_transactions(self, tools):
        result = tools.get_transactions(limit=5)
        assert result['total'] == 46
        assert result['pending'] == 6
        assert len(result['transactions']) == 5


class TestChartTools:
    """Tests for rendering and interaction tools."""

    def test_render_chart_writes_png(self, tools, state_dir):
        result = tools.render_chart('allTime', 320, 160)
        assert os.path.exists(result['path'])
        assert result['path'].startswith(state_dir)
        assert 'messages' in result['paint_order']
        assert len(result['labels']) == 5

    def test_render_unknown_kind(self, tools):
        with pytest.raises(ValueError):
            tools.render_chart('pie')

    def test_select_category_reorders_lines(self, tools):
        tools.render_chart('daily')
        result = tools.select_category('messages')
        assert result['changed'] is True
        assert result['active_category'] == 'messages'
        assert result['paint_order']['daily'][-1] == 'messages'

    def test_pointer_move_misses_far_away(self, tools):
        tooltip = tools.pointer_move('daily', 10, -400)
        assert tooltip['visible'] is False


class TestPresetTools:
    """Tests for preset tools."""

    def test_save_list_load_delete(self, tools):
        saved = tools.save_preset('Demo')
        assert saved['saved'] == 'Demo'
        assert tools.list_presets() == {'presets': ['Demo'], 'active': 'Demo'}

        tools.apply_config(dict(CONFIG, minBalance=900))
        summary = tools.load_preset('Demo')
        assert summary['fromPreset'] is True
        assert summary['config']['minBalance'] == 250.0

        assert tools.delete_preset('Demo') == {'deleted': True, 'name': 'Demo'}
        assert tools.list_presets()['presets'] == []

    def test_load_missing_preset(self, tools):
        with pytest.raises(KeyError):
            tools.load_preset('nope')
