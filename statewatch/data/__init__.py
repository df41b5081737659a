"""Dataset ingestion, state-name normalization, reducers and the session context."""
from .schemas import Category, ChartKind, Observation, CATEGORY_CHART_KINDS, chart_kind_for
from .normalize import normalize_state, parse_metric
from .reducers import latest_for, filter_and_sort, limit_points
from .loader import ingest, DatasetFetcher
from .context import DataContext
