"""Process-wide state shared between chart widgets.

There are exactly two pieces of shared mutable state: the active category
(written by the interaction controller) and the current Dataset (written by
the invariant maintainer). Both are swapped as whole values so readers never
observe a partial update. Instances are injected into the components that
need them rather than reached through module globals.
"""

import logging
from typing import Callable, Dict, List, Optional

from model.EarningsData import Category, Dataset


logger = logging.getLogger(__name__)


class ActiveCategoryState:
    """The currently highlighted category."""

    def __init__(self, initial: Category = Category.SUBSCRIPTIONS):
        self._value = initial
        self._listeners: List[Callable[[Category, Category], None]] = []

    @property
    def value(self) -> Category:
        return self._value

    def subscribe(self, listener: Callable[[Category, Category], None]) -> None:
        """Register a callback invoked as listener(previous, current)."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: Callable[[Category, Category], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def set(self, category: Category) -> bool:
        """Swap in a new active category.

        Returns:
            True if the value changed and listeners were notified
        """
        previous = self._value
        if category == previous:
            return False
        self._value = category
        logger.debug("Active category %s -> %s", previous.value, category.value)
        for listener in list(self._listeners):
            listener(previous, category)
        return True


class DatasetSlot:
    """Holds the current Dataset for each dataset family.

    A version counter increases on every replacement so derived state (label
    layouts, chart series) can tell when it is stale.
    """

    def __init__(self):
        self._datasets: Dict[str, Dataset] = {}
        self._versions: Dict[str, int] = {}

    def get(self, family: str = 'earnings') -> Optional[Dataset]:
        return self._datasets.get(family)

    def version(self, family: str = 'earnings') -> int:
        return self._versions.get(family, 0)

    def replace(self, dataset: Optional[Dataset], family: str = 'earnings') -> int:
        """Swap the Dataset for a family (None clears it).

        Returns:
            The new version number
        """
        if dataset is None:
            self._datasets.pop(family, None)
        else:
            self._datasets[family] = dataset
        self._versions[family] = self._versions.get(family, 0) + 1
        return self._versions[family]
