"""Tests for pointer hit testing and tooltip placement."""

import os
import sys
from datetime import date, timedelta

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from interact.hit_testing import hit_test, line_distance, segment_distance
from interact.tooltip import category_tooltip, place_tooltip, statistics_tooltip
from model.ChartState import ChartSeries, DrawingArea, StatisticsSeries
from model.EarningsData import CATEGORY_ORDER, Category
from render.coordinate_mapper import map_values


AREA = DrawingArea(left=10, top=10, right=300, bottom=210)


@pytest.fixture
def lines():
    """Two straight lines over 30 slots: messages rising, tips flat near the baseline."""
    messages = map_values([5.0 * i for i in range(30)], 200.0, AREA, 30)
    tips = map_values([10.0] * 30, 200.0, AREA, 30)
    return {'tips': tips, 'messages': messages}


def test_segment_distance():
    assert segment_distance((5, 5), (0, 0), (10, 0)) == 5
    assert segment_distance((-3, 4), (0, 0), (10, 0)) == 5
    assert segment_distance((1, 1), (1, 1), (1, 1)) == 0
    assert line_distance((0, 0), []) == float('inf')


def test_pointer_on_line_returns_its_index(lines):
    x, y = lines['messages'][5]
    hit = hit_test((x, y), lines, AREA, 30)
    assert hit is not None
    assert hit.index == 5
    assert hit.series == 'messages'
    assert hit.point == lines['messages'][5]


def test_pointer_far_from_every_line_misses(lines):
    x, y = lines['messages'][5]
    # 20px above the messages line and well away from the flat tips line
    assert hit_test((x, y - 20), lines, AREA, 30) is None


def test_threshold_is_exclusive():
    flat = {'tips': [(10.0, 100.0), (300.0, 100.0)]}
    assert hit_test((50, 115), flat, AREA, 2) is None
    assert hit_test((50, 114), flat, AREA, 2) is not None


def test_index_clamped_to_drawn_points():
    partial = {'messages': map_values([1.0, 2.0, 3.0], 10.0, AREA, 31)}
    x, y = partial['messages'][2]
    hit = hit_test((x + 5, y), partial, AREA, 31)
    assert hit.index == 2


def test_place_tooltip_flips_near_right_edge():
    assert place_tooltip((100, 100), 600) == (115, 60)
    assert place_tooltip((500, 100), 600) == (325, 60)


def test_category_tooltip(lines):
    dates = [date(2026, 3, 1) + timedelta(days=i) for i in range(30)]
    values = {category: [0.0] * 30 for category in CATEGORY_ORDER}
    values[Category.MESSAGES] = [5.0 * i for i in range(30)]
    values[Category.TIPS] = [10.0] * 30
    series = ChartSeries(window='daily', labels=[d.isoformat() for d in dates], dates=dates, values=values)

    tooltip = category_tooltip(5, series, lines, 600, Category.MESSAGES)
    assert tooltip.visible
    assert tooltip.title == '2026-03-06'
    assert tooltip.values['messages'] == 25.0
    assert tooltip.values['tips'] == 10.0
    assert tooltip.values['streams'] == 0.0
    anchor_x, anchor_y = lines['messages'][5]
    assert tooltip.left == anchor_x + 15
    assert tooltip.top == anchor_y - 40


def test_statistics_tooltip():
    dates = [date(2026, 3, 1), date(2026, 3, 2)]
    series = StatisticsSeries(labels=['Mar 1, 2026', 'Mar 2, 2026'], dates=dates,
                              earnings=[12.5, 30.0], counts=[1, 4])
    tooltip = statistics_tooltip(1, series, (50, 100), 600)
    assert tooltip.title == 'Mar 2, 2026'
    assert tooltip.values == {'earnings': 30.0, 'transactions': 4.0}
    assert not statistics_tooltip(2, series, (50, 100), 600).visible
