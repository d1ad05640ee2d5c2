"""Named presets: a saved configuration plus the Dataset it produced."""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from model.EarningsConfig import EarningsConfig
from model.EarningsData import Dataset
from store.dataset_codec import DatasetFormatError, decode_dataset, encode_dataset
from store.key_value_store import KeyValueStore


logger = logging.getLogger(__name__)

PRESETS_KEY = 'ofStats.presets'
ACTIVE_PRESET_KEY = 'ofStats.activePreset'


@dataclass(frozen=True)
class Preset:
    name: str
    config: EarningsConfig
    dataset: Optional[Dataset]
    saved_at: str


class PresetStore:
    """Presets persisted as one JSON object in a KeyValueStore."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def _read(self) -> Dict[str, dict]:
        text = self.store.get(PRESETS_KEY)
        if not text:
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            logger.error("Could not parse stored presets: %s", e)
            return {}
        if not isinstance(data, dict):
            logger.error("Stored presets are not a JSON object; ignoring them")
            return {}
        return data

    def _write(self, presets: Dict[str, dict]) -> None:
        self.store.set(PRESETS_KEY, json.dumps(presets))

    def list(self) -> List[str]:
        """Preset names sorted case-insensitively."""
        return sorted(self._read().keys(), key=lambda name: name.lower())

    def save(self, name: str, config: EarningsConfig, dataset: Optional[Dataset]) -> Preset:
        """Save (or overwrite) a preset.

        Args:
            name: Preset name; surrounding whitespace is ignored
            config: Configuration to store
            dataset: Dataset currently shown, stored alongside the configuration

        Returns:
            The saved Preset
        """
        name = name.strip()
        if not name:
            raise ValueError("Preset name must not be empty")
        saved_at = datetime.now().isoformat(timespec='seconds')
        presets = self._read()
        presets[name] = {
            'config': config.to_dict(),
            'dataset': encode_dataset(dataset) if dataset is not None else None,
            'savedAt': saved_at,
        }
        self._write(presets)
        self.set_active(name)
        logger.info("Saved preset %r", name)
        return Preset(name=name, config=config, dataset=dataset, saved_at=saved_at)

    def load(self, name: str) -> Optional[Preset]:
        """Load a preset by name, or None if there is no such preset.

        A preset whose Dataset cannot be decoded still loads its
        configuration; the Dataset is then regenerated by the caller.
        """
        entry = self._read().get(name)
        if entry is None:
            return None
        config = EarningsConfig.from_dict(entry.get('config'))
        dataset = None
        if entry.get('dataset') is not None:
            try:
                dataset = decode_dataset(entry['dataset'])
            except DatasetFormatError as e:
                logger.error("Preset %r has an unreadable dataset: %s", name, e)
        self.set_active(name)
        return Preset(name=name, config=config, dataset=dataset, saved_at=entry.get('savedAt', ''))

    def delete(self, name: str) -> bool:
        """Delete a preset; returns False if it did not exist."""
        presets = self._read()
        if name not in presets:
            return False
        del presets[name]
        self._write(presets)
        if self.active() == name:
            self.set_active(None)
        logger.info("Deleted preset %r", name)
        return True

    def active(self) -> Optional[str]:
        return self.store.get(ACTIVE_PRESET_KEY) or None

    def set_active(self, name: Optional[str]) -> None:
        if name:
            self.store.set(ACTIVE_PRESET_KEY, name)
        else:
            self.store.remove(ACTIVE_PRESET_KEY)
