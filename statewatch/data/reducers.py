"""
Per-state reducers over an ingested dataset.
"""
from __future__ import annotations

import math
from typing import Iterable, Optional, Sequence

from statewatch.config import MAX_CHART_POINTS
from statewatch.data.normalize import normalize_state
from statewatch.data.schemas import Observation


def _matching(dataset: Iterable[Observation], state: str) -> list[Observation]:
    # Observations carry canonical state keys from ingestion; only the query is normalized.
    key = normalize_state(state)
    return [obs for obs in dataset if obs.state == key]


def latest_for(dataset: Iterable[Observation], state: str) -> Optional[Observation]:
    """Observation with the greatest ``date`` for a state, or None.

    Dates compare as strings. On equal dates the one seen last in ingestion
    order wins.
    """
    latest: Optional[Observation] = None
    for obs in _matching(dataset, state):
        if latest is None or obs.date >= latest.date:
            latest = obs
    return latest


def filter_and_sort(dataset: Iterable[Observation], state: str) -> list[Observation]:
    """All observations for a state, ascending by ``date`` (stable)."""
    return sorted(_matching(dataset, state), key=lambda obs: obs.date)


def limit_points(series: Sequence[Observation], max_points: int = MAX_CHART_POINTS) -> list[Observation]:
    """Thin a series for display: every n-th point, keeping at most ``max_points``."""
    if max_points <= 0 or len(series) <= max_points:
        return list(series)
    step = math.ceil(len(series) / max_points)
    return [obs for i, obs in enumerate(series) if i % step == 0][-max_points:]
