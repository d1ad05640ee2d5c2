import os
import json
from typing import Optional, Tuple

from model.ChartState import Padding
from model.EarningsData import Category


DEFAULT_PATH = os.path.normpath(os.path.join(os.path.dirname(__file__), '..', '..', 'reference', 'chart-details.json'))


def hex_to_rgb(color: str) -> Tuple[int, int, int]:
    """Convert '#rrggbb' to an (r, g, b) tuple."""
    value = color.lstrip('#')
    if len(value) != 6:
        raise ValueError(f"Expected a #rrggbb color, got {color!r}")
    return (int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))


class ChartDetails:
    """Rendering and interaction constants read from reference/chart-details.json."""

    def __init__(self, data: Optional[dict] = None, path: Optional[str] = None):
        if data is None:
            with open(path or DEFAULT_PATH, 'r') as f:
                data = json.load(f)
        self.raw = data

        self.tension = float(data.get('tension', 0.35))
        self.headroom = float(data.get('headroom', 1.15))

        animation = data.get('animation', {})
        self.duration_ms = float(animation.get('durationMs', 800))
        self.easing = animation.get('easing', 'easeOutQuart')

        self.padding = Padding.from_dict(data.get('padding', {}))
        self.statistics_padding = Padding.from_dict(data.get('statisticsPadding', {}))

        lines = data.get('lines', {})
        self.active_width = float(lines.get('activeWidth', 2.2))
        self.active_alpha = float(lines.get('activeAlpha', 1.0))
        self.inactive_width = float(lines.get('inactiveWidth', 1.7))
        self.inactive_alpha = float(lines.get('inactiveAlpha', 0.6))

        self.colors = data.get('colors', {})

        labels = data.get('labels', {})
        self.label_offset = float(labels.get('offset', 5))
        self.label_min_gap = float(labels.get('minGap', 6))
        self.label_min_left = float(labels.get('minLeft', 4))

        interaction = data.get('interaction', {})
        self.hit_threshold = float(interaction.get('hitThreshold', 15))
        self.tooltip_offset = float(interaction.get('tooltipOffset', 15))
        self.tooltip_width = float(interaction.get('tooltipWidth', 160))
        self.tooltip_height = float(interaction.get('tooltipHeight', 80))
        self.hover_radius = float(interaction.get('hoverRadius', 4))

    def color(self, name: str, default: str = '#000000') -> Tuple[int, int, int]:
        """RGB color for a named chart element."""
        return hex_to_rgb(self.colors.get(name, default))

    def category_color(self, category: Category) -> Tuple[int, int, int]:
        return self.color(category.value)
