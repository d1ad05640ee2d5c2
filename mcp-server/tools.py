"""Earnings Chart Tools for MCP Server.

This module provides the tool implementations that wrap the earnings
engine and expose its data and charts through MCP. State (configuration,
cached Dataset, presets, transactions) lives in a JSON file so it survives
server restarts.
"""

import os
import sys
import json
from dataclasses import asdict
from typing import Any, Dict, List, Optional

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from earnings_engine import EarningsEngine
from interact.interaction_controller import WIDGET_KINDS
from model.EarningsConfig import EarningsConfig
from model.EarningsData import Category
from model.category_metadata import format_money, get_short_name
from render.surface import PillowSurface
from store.key_value_store import JsonFileStore


CONFIG_KEY = 'ofStats.config'

DEFAULT_WIDTH = 600
DEFAULT_HEIGHT = 240


class EarningsTools:
    """Tools that wrap the earnings engine for MCP access."""

    def __init__(self, state_dir: str, output_dir: Optional[str] = None):
        """Initialize the engine on a JSON state file.

        Args:
            state_dir: Directory holding state.json
            output_dir: Directory rendered PNG files are written to (state_dir if omitted)
        """
        self.state_dir = state_dir
        self.output_dir = output_dir or state_dir
        self.store = JsonFileStore(os.path.join(state_dir, 'state.json'))
        self.engine = EarningsEngine(store=self.store)
        self._restore_config()

    def _restore_config(self):
        """Re-apply the last configuration saved in the state file."""
        text = self.store.get(CONFIG_KEY)
        if not text:
            return
        try:
            self.engine.data_ready.emit(json.loads(text))
        except ValueError as e:
            print(f"Warning: Ignoring saved configuration: {e}", file=sys.stderr)

    def _ensure_config(self):
        if self.engine.config is None:
            self.engine.apply(EarningsConfig())

    def apply_config(self, config: Dict[str, Any]) -> dict:
        """Publish a new configuration on the data-ready signal."""
        self.engine.data_ready.emit(config)
        self.store.set(CONFIG_KEY, json.dumps(self.engine.config.to_dict()))
        return self.get_dataset_summary()

    def get_dataset_summary(self) -> dict:
        self._ensure_config()
        summary = self.engine.summary()
        summary['config'] = self.engine.config.to_dict()
        summary['activeCategory'] = self.engine.active.value.value
        return summary

    def get_period(self, year: int, month: int) -> dict:
        """Get one month of the current Dataset."""
        self._ensure_config()
        dataset = self.engine.dataset
        if dataset is None:
            return {"error": "Generation is disabled"}
        record = dataset.find_period(year, month)
        if record is None:
            return {"error": f"No data for {year}-{month:02d}"}
        return {
            "year": record.year,
            "month": record.month,
            "net": record.net,
            "gross": record.gross,
            "net_formatted": format_money(record.net),
            "transaction_count": record.transaction_count,
            "categories": {get_short_name(c): v for c, v in record.categories.items()},
        }

    def regenerate(self) -> dict:
        self._ensure_config()
        self.engine.regenerate()
        return self.get_dataset_summary()

    def override_gross(self, gross: float, pin_oldest: bool = True) -> dict:
        self._ensure_config()
        self.engine.override_gross(gross, pin_oldest)
        return self.get_dataset_summary()

    def _mount(self, kind: str, width: int, height: int) -> str:
        if kind not in WIDGET_KINDS:
            raise ValueError(f"Unknown chart kind '{kind}'. Available: {sorted(WIDGET_KINDS)}")
        widget_id = f"{kind}-widget"
        surface_id = f"{kind}-surface"
        surface = self.engine.surfaces.get(surface_id)
        if surface is None or (surface.width, surface.height) != (width, height):
            self.engine.surfaces.register(surface_id, PillowSurface(width, height))
            self.engine.mount(widget_id, surface_id, kind)
        elif widget_id not in self.engine.controller.widgets:
            self.engine.mount(widget_id, surface_id, kind)
        # Finish any running reveal animation
        self.engine.frames.run_until_idle()
        return widget_id

    def render_chart(self, kind: str, width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT,
                     output_path: Optional[str] = None) -> dict:
        """Render a chart to a PNG file."""
        self._ensure_config()
        widget_id = self._mount(kind, width, height)
        widget = self.engine.controller.widgets[widget_id]
        surface = self.engine.surfaces.get(widget.surface_id)
        path = output_path or os.path.join(self.output_dir, f"{kind}.png")
        os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
        surface.save_png(path)
        result = widget.last_result
        return {
            "path": path,
            "kind": kind,
            "width": width,
            "height": height,
            "paint_order": result.paint_order if result else [],
            "labels": [p.text for p in result.labels] if result else [],
        }

    def select_category(self, category: str) -> dict:
        changed = self.engine.controller.select_category(Category.parse(category))
        return {
            "active_category": self.engine.active.value.value,
            "changed": changed,
            "paint_order": {
                w.kind: w.last_result.paint_order
                for w in self.engine.controller.widgets.values() if w.last_result is not None
            },
        }

    def pointer_move(self, kind: str, x: float, y: float, width: int = DEFAULT_WIDTH,
                     height: int = DEFAULT_HEIGHT) -> dict:
        """Hit-test a pointer position on a chart and return the tooltip state."""
        self._ensure_config()
        widget_id = self._mount(kind, width, height)
        tooltip = self.engine.controller.pointer_move(widget_id, x, y)
        return asdict(tooltip)

    def list_presets(self) -> dict:
        return {
            "presets": self.engine.list_presets(),
            "active": self.engine.presets.active(),
        }

    def save_preset(self, name: str) -> dict:
        self._ensure_config()
        preset = self.engine.save_preset(name)
        return {"saved": preset.name, "saved_at": preset.saved_at}

    def load_preset(self, name: str) -> dict:
        self.engine.load_preset(name)
        self.store.set(CONFIG_KEY, json.dumps(self.engine.config.to_dict()))
        return self.get_dataset_summary()

    def delete_preset(self, name: str) -> dict:
        return {"deleted": self.engine.delete_preset(name), "name": name}

    def get_transactions(self, limit: Optional[int] = None) -> dict:
        """Get the generated transaction list, newest first."""
        self._ensure_config()
        transactions = self.engine.get_transactions()
        rows: List[dict] = [t.to_dict() for t in transactions]
        if limit is not None:
            rows = rows[:limit]
        return {
            "total": len(transactions),
            "pending": sum(1 for t in transactions if t.status == 'pending'),
            "transactions": rows,
        }
