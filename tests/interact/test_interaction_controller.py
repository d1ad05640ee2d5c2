"""Tests for widget drawing, pointer interaction and category switching."""

import os
import random
import sys
from datetime import date

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from earnings_engine import EarningsEngine
from interact.events import Signal
from interact.interaction_controller import ChartWidget
from model.EarningsConfig import EarningsConfig, PeriodCounts
from model.EarningsData import Category
from render.animation import AnimationStatus
from render.surface import PillowSurface


TODAY = date(2026, 3, 15)
LINE_KINDS = ('allTime', 'month', 'daily')


@pytest.fixture
def engine():
    engine = EarningsEngine(rng=random.Random(31))
    engine.apply(EarningsConfig(period_counts=PeriodCounts(months=12), min_balance=400.0, calendar_day=TODAY))
    for kind in LINE_KINDS + ('statisticsEarnings', 'statisticsTransactions'):
        engine.surfaces.register(f"{kind}-surface", PillowSurface(600, 240))
        engine.mount(f"{kind}-widget", f"{kind}-surface", kind)
    return engine


def test_unknown_widget_kind():
    with pytest.raises(ValueError):
        ChartWidget(widget_id='w', surface_id='s', kind='pie')


def test_mount_starts_reveal_animation(engine):
    for kind in LINE_KINDS:
        scheduler = engine.animations.find(f"{kind}-surface")
        assert scheduler.status == AnimationStatus.RUNNING
    engine.frames.run_until_idle()
    for kind in LINE_KINDS:
        widget = engine.controller.widgets[f"{kind}-widget"]
        assert widget.last_result is not None
        assert widget.last_result.progress == 1.0
        assert engine.animations.find(f"{kind}-surface").status == AnimationStatus.DONE


def test_category_switch_redraws_without_restarting_animation(engine):
    """Switching tips -> messages repaints every line chart at the current progress."""
    engine.frames.pump(0)
    engine.frames.pump(200)
    engine.controller.select_category(Category.TIPS)

    before = {}
    for kind in LINE_KINDS:
        scheduler = engine.animations.find(f"{kind}-surface")
        before[kind] = (engine.controller.widgets[f"{kind}-widget"].last_result,
                        scheduler.status, scheduler.start_ms, scheduler.eased)
    pending = engine.frames.pending_count

    assert engine.controller.select_category(Category.MESSAGES) is True

    for kind in LINE_KINDS:
        widget = engine.controller.widgets[f"{kind}-widget"]
        scheduler = engine.animations.find(f"{kind}-surface")
        old_result, status, start_ms, eased = before[kind]
        assert widget.last_result is not old_result
        assert widget.last_result.paint_order[-1] == 'messages'
        assert widget.last_result.progress == eased
        assert scheduler.status == status == AnimationStatus.RUNNING
        assert scheduler.start_ms == start_ms
    assert engine.frames.pending_count == pending


def test_selecting_the_active_category_is_a_no_op(engine):
    engine.frames.run_until_idle()
    engine.controller.select_category(Category.MESSAGES)
    result = engine.controller.widgets['daily-widget'].last_result
    assert engine.controller.select_category(Category.MESSAGES) is False
    assert engine.controller.widgets['daily-widget'].last_result is result


def test_pointer_on_line_shows_tooltip(engine):
    engine.frames.run_until_idle()
    result = engine.controller.widgets['daily-widget'].last_result
    x, y = result.lines['messages'][5]
    tooltip = engine.controller.pointer_move('daily-widget', x, y)
    assert tooltip.visible
    assert tooltip.anchor_index == 5
    assert set(tooltip.values) == {c.value for c in Category}


def test_pointer_far_away_hides_tooltip(engine):
    engine.frames.run_until_idle()
    tooltip = engine.controller.pointer_move('daily-widget', 300, -500)
    assert not tooltip.visible


def test_statistics_hover_is_shared(engine):
    engine.frames.run_until_idle()
    earnings = engine.controller.widgets['statisticsEarnings-widget']
    transactions = engine.controller.widgets['statisticsTransactions-widget']
    previous = transactions.last_result
    x, y = earnings.last_result.lines['earnings'][10]
    tooltip = engine.controller.pointer_move(earnings.widget_id, x, y)
    assert tooltip.visible
    assert set(tooltip.values) == {'earnings', 'transactions'}
    assert engine.controller.last_hovered['statistics'] == 10
    assert transactions.last_result is not previous

    engine.controller.pointer_leave(earnings.widget_id)
    assert 'statistics' not in engine.controller.last_hovered


def test_missing_surface_skips_draw(engine):
    engine.frames.run_until_idle()
    engine.surfaces.unregister('daily-surface')
    assert engine.controller.draw('daily-widget', animate=False) is None


def test_unmount_stops_animation(engine):
    engine.controller.unmount('daily-widget')
    assert engine.animations.find('daily-surface') is None
    assert 'daily-widget' not in engine.controller.widgets
    assert not engine.controller.pointer_move('daily-widget', 10, 10).visible


def test_close_detaches_everything(engine):
    engine.controller.close()
    assert engine.controller.widgets == {}
    assert len(engine.animations) == 0


def test_signal_handlers_run_in_order():
    signal = Signal('test')
    calls = []
    first = lambda value: calls.append(('first', value))
    signal.connect(first)
    signal.connect(lambda value: calls.append(('second', value)))
    signal.connect(first)
    assert signal.emit(3) == 2
    assert calls == [('first', 3), ('second', 3)]
    signal.disconnect(first)
    assert len(signal) == 1
