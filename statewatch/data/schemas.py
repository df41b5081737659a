"""
Dataset schemas: categories, chart kinds, observations.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Category(str, Enum):
    INCOME_MEDIAN = "income_median"
    POPULATION = "population"
    CRIME = "crime"
    WATER_CONSUMPTION = "water_consumption"
    EXPENDITURE = "expenditure"


class ChartKind(str, Enum):
    INCOME = "income"
    POPULATION = "population"
    CRIME = "crime"
    WATER = "water"
    EXPENSE = "expense"


# Fixed 1:1 table: selecting a category always selects this chart.
CATEGORY_CHART_KINDS: dict[Category, ChartKind] = {
    Category.INCOME_MEDIAN: ChartKind.INCOME,
    Category.POPULATION: ChartKind.POPULATION,
    Category.CRIME: ChartKind.CRIME,
    Category.WATER_CONSUMPTION: ChartKind.WATER,
    Category.EXPENDITURE: ChartKind.EXPENSE,
}

# Name of the numeric field each dataset kind carries.
METRIC_FIELDS: dict[Category, str] = {
    Category.INCOME_MEDIAN: "income_median",
    Category.POPULATION: "population",
    Category.CRIME: "crime",
    Category.WATER_CONSUMPTION: "consumption",
    Category.EXPENDITURE: "expenditure_mean",
}

# Category → key in config.DATASET_ENDPOINTS
ENDPOINT_KEYS: dict[Category, str] = {
    Category.INCOME_MEDIAN: "INCOME",
    Category.POPULATION: "POPULATION",
    Category.CRIME: "CRIME",
    Category.WATER_CONSUMPTION: "WATER",
    Category.EXPENDITURE: "EXPENSE",
}


def chart_kind_for(category: Category | str) -> ChartKind:
    return CATEGORY_CHART_KINDS[Category(category)]


@dataclass(frozen=True)
class Observation:
    """One (state, date, metric) record from a single dataset.

    ``date`` is kept as the source string; it is only ever compared, never
    parsed. ``value`` is NaN when the source field did not parse.
    """
    state: str
    date: str
    metric: str
    value: float

    @property
    def has_value(self) -> bool:
        return not math.isnan(self.value)

    def as_dict(self) -> dict:
        value: Optional[float] = self.value if self.has_value else None
        return {"state": self.state, "date": self.date, self.metric: value}
