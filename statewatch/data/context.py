"""
DataContext — session-lifetime holder for the five datasets, the current
selection and the derived per-state chart series.

One context is constructed per viewing session (the API process owns one for
its lifetime) and passed explicitly to whatever reads from it. Datasets arrive
independently; each arrival recomputes only the series that read from it.
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Awaitable, Callable, Iterable, Optional

from statewatch.config import DEFAULT_STATE
from statewatch.data.normalize import normalize_state
from statewatch.data.reducers import filter_and_sort, latest_for
from statewatch.data.schemas import CATEGORY_CHART_KINDS, Category, ChartKind, Observation

logger = logging.getLogger(__name__)

Fetch = Callable[[Category], Awaitable[list[Observation]]]
Listener = Callable[[frozenset], None]


def _empty_series() -> dict[Category, list[Observation]]:
    return {category: [] for category in Category}


class DataContext:
    """Datasets, selection state and memoized chart series for one session."""

    def __init__(
        self,
        selected_state: Optional[str] = None,
        selected_category: Category | str = Category.INCOME_MEDIAN,
    ) -> None:
        self._datasets: dict[Category, list[Observation]] = _empty_series()
        self._loaded: set[Category] = set()
        self._selected_state: Optional[str] = normalize_state(selected_state) if selected_state else None
        self._selected_category = Category(selected_category)
        self._series: dict[Category, list[Observation]] = _empty_series()
        self._listeners: list[Listener] = []
        self._load_task: Optional[asyncio.Task] = None
        self._closed = False

    @classmethod
    def from_config(cls) -> "DataContext":
        """Context opened on the configured default state."""
        return cls(selected_state=DEFAULT_STATE)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    @property
    def selected_state(self) -> Optional[str]:
        return self._selected_state

    def select_state(self, state: Optional[str]) -> None:
        """Select a state (raw or canonical name) or clear the selection with None."""
        self._selected_state = normalize_state(state) if state else None
        self._recompute(Category)

    @property
    def selected_category(self) -> Category:
        return self._selected_category

    @property
    def selected_chart_kind(self) -> ChartKind:
        return CATEGORY_CHART_KINDS[self._selected_category]

    def select_category(self, category: Category | str) -> None:
        self._selected_category = Category(category)

    # ------------------------------------------------------------------
    # Datasets
    # ------------------------------------------------------------------

    def dataset(self, category: Category | str) -> list[Observation]:
        return list(self._datasets[Category(category)])

    @property
    def loaded_categories(self) -> frozenset:
        return frozenset(self._loaded)

    def set_dataset(self, category: Category | str, observations: Iterable[Observation]) -> None:
        """Install one dataset and refresh the series that depend on it."""
        if self._closed:
            return
        category = Category(category)
        self._datasets[category] = list(observations)
        self._loaded.add(category)
        self._recompute((category,))

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    @property
    def chart_series_by_category(self) -> dict[Category, list[Observation]]:
        """Series for the selected state; every category maps to a list."""
        return {category: list(series) for category, series in self._series.items()}

    @property
    def selected_series(self) -> list[Observation]:
        return list(self._series[self._selected_category])

    def series_for(self, state: Optional[str]) -> dict[Category, list[Observation]]:
        if not state:
            return _empty_series()
        return {category: filter_and_sort(self._datasets[category], state) for category in Category}

    def point_lookup(self, state: str, category: Category | str) -> Optional[Observation]:
        """Latest observation for any state, regardless of the current selection."""
        return latest_for(self._datasets[Category(category)], state)

    def _recompute(self, categories: Iterable[Category]) -> None:
        changed = frozenset(categories)
        for category in changed:
            if self._selected_state is None:
                self._series[category] = []
            else:
                self._series[category] = filter_and_sort(self._datasets[category], self._selected_state)
        self._notify(changed)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener(changed_categories)`` after each recompute."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, changed: frozenset) -> None:
        for listener in list(self._listeners):
            try:
                listener(changed)
            except Exception:
                logger.exception("DataContext listener failed")

    # ------------------------------------------------------------------
    # Loading & lifecycle
    # ------------------------------------------------------------------

    async def load(self, fetch: Fetch) -> None:
        """Fetch all five datasets concurrently.

        Each fetch feeds its own slot as soon as it finishes. A failed fetch is
        logged and leaves its dataset empty.
        """
        async def _load_one(category: Category) -> None:
            try:
                observations = await fetch(category)
            except Exception as exc:
                logger.error(f"Dataset {category.value} failed to load: {exc}")
                return
            self.set_dataset(category, observations)

        await asyncio.gather(*(_load_one(category) for category in Category))

    def start(self, fetch: Fetch) -> asyncio.Task:
        """Schedule ``load`` in the background and return the task."""
        self._load_task = asyncio.get_running_loop().create_task(self.load(fetch))
        return self._load_task

    @property
    def is_loading(self) -> bool:
        return self._load_task is not None and not self._load_task.done()

    async def close(self) -> None:
        """Tear down: cancel outstanding fetches and drop all state."""
        self._closed = True
        if self._load_task is not None and not self._load_task.done():
            self._load_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._load_task
        self._load_task = None
        self._listeners.clear()
        self._datasets = _empty_series()
        self._series = _empty_series()
        self._loaded.clear()

    async def __aenter__(self) -> "DataContext":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
