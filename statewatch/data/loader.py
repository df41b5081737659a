"""
Dataset fetching and per-kind ingestion filters.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

import aiohttp
import pandas as pd

from statewatch.config import (
    DATASET_ENDPOINTS, POPULATION_MULTIPLIER, NATIONAL_ROW,
    CRIME_ALL_DISTRICTS, WATER_DOMESTIC_SECTOR,
)
from statewatch.data.normalize import fold_name, normalize_state_column, parse_metric_column
from statewatch.data.schemas import Category, ENDPOINT_KEYS, METRIC_FIELDS, Observation
from statewatch.errors import UpstreamFailure

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Per-kind filters (applied once, at ingestion)
# ---------------------------------------------------------------------------

def _column(df: pd.DataFrame, name: str) -> pd.Series:
    if name in df.columns:
        return df[name]
    return pd.Series(None, index=df.index, dtype=object)


def _not_national(df: pd.DataFrame) -> pd.Series:
    return df["state"].map(fold_name) != fold_name(NATIONAL_ROW)


def _crime_filter(df: pd.DataFrame) -> pd.DataFrame:
    """Statewide totals only: district == "All", national row excluded."""
    return df[(_column(df, "district") == CRIME_ALL_DISTRICTS) & _not_national(df)]


def _water_filter(df: pd.DataFrame) -> pd.DataFrame:
    """Domestic sector only, national row excluded."""
    return df[(_column(df, "sector") == WATER_DOMESTIC_SECTOR) & _not_national(df)]


_FILTERS: dict[Category, Callable[[pd.DataFrame], pd.DataFrame]] = {
    Category.CRIME: _crime_filter,
    Category.WATER_CONSUMPTION: _water_filter,
}


# ---------------------------------------------------------------------------
# Per-kind metric extraction
# ---------------------------------------------------------------------------

def _population_values(df: pd.DataFrame) -> pd.Series:
    """First of population / pop / total that parses, scaled to persons."""
    values = pd.Series(float("nan"), index=df.index)
    for col in ("population", "pop", "total"):
        if col in df.columns:
            values = values.combine_first(parse_metric_column(df[col]))
    return values * POPULATION_MULTIPLIER


_SOURCE_FIELDS: dict[Category, str] = {
    Category.INCOME_MEDIAN: "income_median",
    Category.CRIME: "crimes",
    Category.WATER_CONSUMPTION: "value",
    Category.EXPENDITURE: "expenditure_mean",
}


def _metric_values(category: Category, df: pd.DataFrame) -> pd.Series:
    if category == Category.POPULATION:
        return _population_values(df)
    return parse_metric_column(_column(df, _SOURCE_FIELDS[category]))


# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------

def ingest(category: Category | str, records: Iterable[Any]) -> list[Observation]:
    """Turn raw catalogue records into observations for one dataset kind.

    States are normalized, the kind's filter is applied and the metric parsed.
    Records whose metric does not parse are kept with a NaN value.
    """
    category = Category(category)
    metric = METRIC_FIELDS[category]
    rows = [r for r in records if isinstance(r, dict)]
    if not rows:
        return []

    # object dtype: a null in an integer date column must not make the dates floats
    df = pd.DataFrame(rows, dtype=object)
    if "state" not in df.columns or "date" not in df.columns:
        logger.warning(f"{category.value}: records have no state/date fields, skipping dataset")
        return []

    before = len(df)
    df = df.dropna(subset=["state", "date"]).copy()
    if len(df) < before:
        logger.info(f"{category.value}: dropped {before - len(df)} records without state/date")

    df["state"] = normalize_state_column(df["state"].astype(str))
    df["date"] = df["date"].astype(str)

    row_filter = _FILTERS.get(category)
    if row_filter is not None:
        df = row_filter(df)

    values = _metric_values(category, df)
    unparsed = int(values.isna().sum())
    if unparsed:
        logger.info(f"{category.value}: {unparsed} records with unparseable {metric}, kept as gaps")

    return [
        Observation(state=state, date=date, metric=metric, value=float(value))
        for state, date, value in zip(df["state"], df["date"], values)
    ]


# ---------------------------------------------------------------------------
# Fetching
# ---------------------------------------------------------------------------

class DatasetFetcher:
    """Fetches catalogue endpoints over one shared aiohttp session.

    Calling the fetcher with a category returns its ingested observations, or
    an empty list when the fetch fails.
    """

    def __init__(
        self,
        endpoints: dict[str, str] | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.endpoints = dict(endpoints or DATASET_ENDPOINTS)
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def fetch_raw(self, category: Category | str) -> list:
        """GET one endpoint and return its JSON array."""
        category = Category(category)
        url = self.endpoints[ENDPOINT_KEYS[category]]
        async with self._get_session().get(url) as resp:
            resp.raise_for_status()
            payload = await resp.json(content_type=None)
        if not isinstance(payload, list):
            raise UpstreamFailure(f"{url} returned {type(payload).__name__}, expected a JSON array")
        return payload

    async def __call__(self, category: Category | str) -> list[Observation]:
        category = Category(category)
        try:
            records = await self.fetch_raw(category)
            observations = ingest(category, records)
        except Exception as exc:
            logger.error(f"Error fetching {category.value} dataset: {exc}")
            return []
        logger.info(f"Fetched {category.value}: {len(records)} records → {len(observations)} observations")
        return observations

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
