"""
State name normalization and metric parsing.
"""
from __future__ import annotations

import math
import re
import unicodedata

import numpy as np
import pandas as pd

from statewatch.config import CANONICAL_STATES, STATE_MAPPING


# ---------------------------------------------------------------------------
# State names
# ---------------------------------------------------------------------------

def fold_name(name: str) -> str:
    """Reduce a name to lowercase ASCII letters and digits only."""
    s = unicodedata.normalize("NFKD", str(name))
    s = "".join(ch for ch in s if not unicodedata.combining(ch))
    return re.sub(r"[^0-9a-z]", "", s.casefold())


def _build_lookup() -> dict[str, str]:
    lookup = {fold_name(raw): canonical for raw, canonical in STATE_MAPPING.items()}
    # Canonical keys always map to themselves
    for canonical in CANONICAL_STATES:
        lookup[fold_name(canonical)] = canonical
    return lookup


_STATE_LOOKUP = _build_lookup()


def normalize_state(raw_name: str | None) -> str:
    """Map a raw state name to its canonical key.

    Names with no mapping come back unchanged so lookups just miss.
    """
    if raw_name is None:
        return ""
    folded = fold_name(raw_name)
    if not folded:
        return str(raw_name)
    return _STATE_LOOKUP.get(folded, str(raw_name))


def normalize_state_column(states: pd.Series) -> pd.Series:
    """Vectorised ``normalize_state`` with one lookup per distinct name."""
    mapping = {name: normalize_state(name) for name in states.dropna().unique()}
    return states.map(mapping)


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------

def parse_metric(value) -> float:
    """Parse a loosely typed numeric field. Returns NaN when it does not parse."""
    if value is None or isinstance(value, bool):
        return math.nan
    if isinstance(value, str):
        value = value.replace(",", "").strip()
        if not value:
            return math.nan
    try:
        number = float(value)
    except (TypeError, ValueError):
        return math.nan
    return number if math.isfinite(number) else math.nan


def parse_metric_column(values: pd.Series) -> pd.Series:
    """Vectorised ``parse_metric``: strings with thousands separators allowed."""
    def _clean(v):
        if isinstance(v, str):
            return v.replace(",", "").strip()
        if isinstance(v, bool):
            return None
        return v

    cleaned = values.map(_clean)
    numbers = pd.to_numeric(cleaned, errors="coerce").astype("float64")
    return numbers.where(np.isfinite(numbers))
