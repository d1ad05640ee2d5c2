"""Top-level wiring of the earnings chart core.

The host creates one EarningsEngine, registers its drawing surfaces, mounts
widgets, and publishes configuration changes on `data_ready`. Everything
else (validation, regeneration, caching, redraws) follows from there.
"""

import logging
import random
from dataclasses import replace
from datetime import date
from typing import Callable, Dict, List, Optional

from calc.chart_series import WINDOW_STATISTICS, ChartSeriesBuilder
from calc.invariant_maintainer import InvariantMaintainer
from calc.series_generator import SeriesGenerator
from calc.transaction_generator import Transaction, TransactionGenerator
from details.ChartDetails import ChartDetails
from details.GenerationDetails import GenerationDetails
from interact.events import DataReadySignal
from interact.interaction_controller import ChartWidget, InteractionController
from model.CoreState import ActiveCategoryState, DatasetSlot
from model.EarningsConfig import EarningsConfig
from model.EarningsData import Dataset
from render.animation import AnimationRegistry, FrameScheduler, ManualFrameScheduler
from render.surface import SurfaceRegistry
from store.generation_cache import GenerationCache
from store.key_value_store import InMemoryStore, KeyValueStore
from store.preset_store import Preset, PresetStore


logger = logging.getLogger(__name__)


class EarningsEngine:
    """Generator, cache, renderers and interaction wired together."""

    def __init__(self,
                 store: Optional[KeyValueStore] = None,
                 frames: Optional[FrameScheduler] = None,
                 surfaces: Optional[SurfaceRegistry] = None,
                 generation_details: Optional[GenerationDetails] = None,
                 chart_details: Optional[ChartDetails] = None,
                 rng: Optional[random.Random] = None,
                 clock: Callable[[], date] = date.today):
        """Initialize the engine.

        Args:
            store: Persisted key-value store (in-memory if omitted)
            frames: Host frame scheduler (a manually pumped one if omitted)
            surfaces: Registry of host drawing surfaces
            generation_details: Generation tunables (reference JSON if omitted)
            chart_details: Chart tunables (reference JSON if omitted)
            rng: Random source for generation
            clock: Returns the current calendar day
        """
        self.store = store if store is not None else InMemoryStore()
        self.frames = frames if frames is not None else ManualFrameScheduler()
        self.surfaces = surfaces if surfaces is not None else SurfaceRegistry()
        self.generation_details = generation_details or GenerationDetails()
        self.chart_details = chart_details or ChartDetails()
        self.clock = clock
        rng = rng or random.Random()

        self.slot = DatasetSlot()
        self.active = ActiveCategoryState()
        self.cache = GenerationCache(self.store, 'earnings')
        self.generator = SeriesGenerator(self.generation_details, rng)
        self.maintainer = InvariantMaintainer(self.generator, self.cache, self.slot)
        self.transactions = TransactionGenerator(self.generation_details, self.store, rng)
        self.presets = PresetStore(self.store)

        self.animations = AnimationRegistry(self.frames, self.chart_details.duration_ms, self.chart_details.easing)
        self.controller = InteractionController(self.chart_details, self.surfaces, self.animations, self.active)

        self.config: Optional[EarningsConfig] = None
        self.builder: Optional[ChartSeriesBuilder] = None
        self._published = None

        self.data_ready = DataReadySignal()
        self.data_ready.connect(self.on_data_ready)

    @property
    def dataset(self) -> Optional[Dataset]:
        return self.slot.get(self.maintainer.family)

    def today(self, config: Optional[EarningsConfig] = None) -> date:
        config = config or self.config
        if config is not None and config.calendar_day is not None:
            return config.calendar_day
        return self.clock()

    def on_data_ready(self, settings: Optional[dict]) -> Optional[Dataset]:
        """Handler for the data-ready signal: parse the settings and apply them."""
        return self.apply(EarningsConfig.from_dict(settings))

    def apply(self, config: EarningsConfig) -> Optional[Dataset]:
        """Revalidate (and if needed regenerate) for a configuration, then redraw.

        Returns:
            The current Dataset, or None when generation is disabled
        """
        self.config = config
        if not config.enabled:
            logger.info("Generation disabled; clearing cached data")
            self.maintainer.clear()
            self.transactions.clear()
            self._publish(None, self.today(config))
            return None
        today = self.today(config)
        dataset = self.maintainer.ensure(config, today)
        self._publish(dataset, today)
        return dataset

    def regenerate(self) -> Optional[Dataset]:
        config = self._require_config()
        dataset = self.maintainer.regenerate(config, self.today(config))
        self._publish(dataset, self.today(config))
        return dataset

    def override_gross(self, gross: float, pin_oldest: bool = True) -> Dataset:
        """Regenerate every period from a manually entered all-time gross."""
        config = self._require_config()
        dataset = self.maintainer.override_gross(config, gross, self.today(config), pin_oldest)
        self._publish(dataset, self.today(config))
        return dataset

    def _require_config(self) -> EarningsConfig:
        if self.config is None:
            self.config = EarningsConfig()
        return self.config

    def _publish(self, dataset: Optional[Dataset], today: date) -> None:
        version = self.slot.version(self.maintainer.family)
        if self._published == (version, today):
            return
        self._published = (version, today)
        if dataset is None or dataset.is_empty():
            self.builder = None
            self.controller.update_series({}, version)
            return
        self.builder = ChartSeriesBuilder(dataset, self.generation_details, today)
        series = {window: self.builder.build(window) for window in ('allTime', 'month', 'daily')}
        series[WINDOW_STATISTICS] = self.builder.statistics()
        self.controller.update_series(series, version)

    def mount(self, widget_id: str, surface_id: str, kind: str) -> ChartWidget:
        return self.controller.mount(ChartWidget(widget_id=widget_id, surface_id=surface_id, kind=kind))

    def unmount(self, widget_id: str) -> None:
        self.controller.unmount(widget_id)

    def get_transactions(self) -> List[Transaction]:
        """Transaction list for the current configuration's pending/complete counts."""
        config = self._require_config()
        if not config.enabled:
            return []
        counts = config.period_counts
        return self.transactions.get_or_generate(counts.pending, counts.complete, self.today(config))

    def save_preset(self, name: str) -> Preset:
        return self.presets.save(name, self._require_config(), self.dataset)

    def load_preset(self, name: str) -> Optional[Dataset]:
        """Apply a saved preset.

        The preset's Dataset is stored in the generation cache under the
        preset configuration's key, keeping its oldest period as the anchor,
        and then the usual reuse-or-regenerate policy applies. A Dataset
        from an earlier month only contributes its anchor.
        """
        preset = self.presets.load(name)
        if preset is None:
            raise KeyError(f"No preset named {name!r}")
        self.maintainer.reset_overrides()
        config = preset.config
        dataset = preset.dataset
        today = self.today(config)
        if dataset is not None and not dataset.is_empty():
            config = replace(config, oldest_anchor=dataset.oldest.start)
            recent = dataset.most_recent.start
            if (recent.year, recent.month) == (today.year, today.month):
                key = self.maintainer.make_key(config, today)
                self.cache.put(key, dataset.with_key(key, from_preset=True))
            else:
                logger.info("Preset %r ends in %s; regenerating its range for %s", name, recent.isoformat(), today.isoformat())
        return self.apply(config)

    def delete_preset(self, name: str) -> bool:
        return self.presets.delete(name)

    def list_presets(self) -> List[str]:
        return self.presets.list()

    def summary(self) -> Dict[str, object]:
        """Aggregate numbers of the current Dataset for the host UI."""
        dataset = self.dataset
        if dataset is None:
            return {'enabled': bool(self.config and self.config.enabled), 'periods': 0}
        recent = dataset.most_recent
        return {
            'enabled': True,
            'periods': len(dataset.records),
            'net': dataset.net,
            'gross': dataset.gross,
            'pattern': dataset.pattern,
            'seed': dataset.seed,
            'fromPreset': dataset.from_preset,
            'mostRecentNet': recent.net if recent else 0.0,
            'key': dataset.key.as_string() if dataset.key else None,
            'categoryTotals': {c.value: v for c, v in dataset.category_totals().items()},
        }
