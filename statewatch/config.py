"""
Statewatch — Configuration: paths, endpoints, constants, state names.
"""
import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Paths: override with STATEWATCH_DATA_DIR env var for cloud deployment
# ---------------------------------------------------------------------------
_data_dir = Path(os.environ.get("STATEWATCH_DATA_DIR", str(Path.home() / "statewatch")))
BASE_FOLDER = _data_dir
EXPORTS_FOLDER = _data_dir / "exports"

DATABASE_URL = os.environ.get("DATABASE_URL", f"sqlite:///{_data_dir / 'statewatch.db'}")

API_PREFIX = os.environ.get("API_PREFIX", "/api")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# ---------------------------------------------------------------------------
# Identity & roles
# The identity provider sits in front of the API and forwards the signed-in
# user id in USER_ID_HEADER. Role claims are resolved per request.
# ---------------------------------------------------------------------------
USER_ID_HEADER = "X-User-Id"
ADMIN_ROLE = "admin"
ADMIN_USER_IDS = {
    uid.strip() for uid in os.environ.get("ADMIN_USER_IDS", "").split(",") if uid.strip()
}

# ---------------------------------------------------------------------------
# Scheduled spreadsheet sync
# ---------------------------------------------------------------------------
CRON_SECRET = os.environ.get("CRON_SECRET") or None
GOOGLE_SHEETS_SPREADSHEET_ID = os.environ.get("GOOGLE_SHEETS_SPREADSHEET_ID") or None
GOOGLE_SHEETS_SHEET_NAME = os.environ.get("GOOGLE_SHEETS_SHEET_NAME", "Sheet1")
SHEET_SYNC_URL = os.environ.get("SHEET_SYNC_URL") or None

# ---------------------------------------------------------------------------
# Public datasets (data.gov.my catalogue)
# ---------------------------------------------------------------------------
DATASET_ENDPOINTS = {
    "INCOME": "https://api.data.gov.my/data-catalogue?id=hh_income_state",
    "POPULATION": "https://api.data.gov.my/data-catalogue?id=population_state",
    "CRIME": "https://api.data.gov.my/data-catalogue?id=crime_district",
    "WATER": "https://api.data.gov.my/data-catalogue?id=water_consumption",
    "EXPENSE": "https://api.data.gov.my/data-catalogue?id=hies_state",
}

# Unit contract: the population catalogue publishes thousands of persons,
# stored observations are persons.
POPULATION_MULTIPLIER = 1000

NATIONAL_ROW = "Malaysia"
CRIME_ALL_DISTRICTS = "All"
WATER_DOMESTIC_SECTOR = "domestic"

MAX_CHART_POINTS = 20
DEFAULT_STATE = "selangor"

# ---------------------------------------------------------------------------
# News feeds (RSS 2.0 or Atom)
# ---------------------------------------------------------------------------
NEWS_FEEDS = {
    "malaysiakini": "https://www.malaysiakini.com/rss/en/news.rss",
    "thestar": "https://www.thestar.com.my/rss/news/nation/",
    "bernama": "https://www.bernama.com/en/rss/news_malaysia.php",
    "nst": "https://www.nst.com.my/rss",
    "malay_mail": "https://www.malaymail.com/feed/malaysia",
    # International
    "bbc": "https://feeds.bbci.co.uk/news/world/rss.xml",
    "reuters": "https://www.reutersagency.com/feed/",
    "aljazeera": "https://www.aljazeera.com/xml/rss/all.xml",
}
DEFAULT_NEWS_SOURCES = ["thestar", "bernama", "bbc"]
NEWS_TIMEOUT_SECONDS = 8
NEWS_ITEMS_PER_FEED = 10
NEWS_MAX_ITEMS = 50
NEWS_DESCRIPTION_CHARS = 200
NEWS_USER_AGENT = "Mozilla/5.0 (compatible; Statewatch/1.0)"

# ---------------------------------------------------------------------------
# State name mapping: raw spelling → canonical key.
# Canonical keys are the data.gov.my spellings. Matching is done on a folded
# form (no accents, case or punctuation), so only distinct spellings are listed.
# ---------------------------------------------------------------------------
CANONICAL_STATES = [
    "Johor", "Kedah", "Kelantan", "Melaka", "Negeri Sembilan", "Pahang",
    "Perak", "Perlis", "Pulau Pinang", "Sabah", "Sarawak", "Selangor",
    "Terengganu", "W.P. Kuala Lumpur", "W.P. Labuan", "W.P. Putrajaya",
]

STATE_MAPPING = {
    # Map ids used by the dashboard
    "penang": "Pulau Pinang",
    "negerisembilan": "Negeri Sembilan",
    "malacca": "Melaka",
    "putrajaya": "W.P. Putrajaya",
    "kualalumpur": "W.P. Kuala Lumpur",
    "labuan": "W.P. Labuan",
    # Common alternative spellings
    "P. Pinang": "Pulau Pinang",
    "N. Sembilan": "Negeri Sembilan",
    "Melaka Bandaraya Bersejarah": "Melaka",
    "Johore": "Johor",
    "KL": "W.P. Kuala Lumpur",
    "WP Kuala Lumpur": "W.P. Kuala Lumpur",
    "Wilayah Persekutuan Kuala Lumpur": "W.P. Kuala Lumpur",
    "Wilayah Persekutuan Putrajaya": "W.P. Putrajaya",
    "Wilayah Persekutuan Labuan": "W.P. Labuan",
    "Federal Territory of Kuala Lumpur": "W.P. Kuala Lumpur",
    "Federal Territory of Putrajaya": "W.P. Putrajaya",
    "Federal Territory of Labuan": "W.P. Labuan",
}

# ---------------------------------------------------------------------------
# Category display labels (en / ms)
# ---------------------------------------------------------------------------
CATEGORY_LABELS = {
    "income_median": {"en": "Median Household Income", "ms": "Pendapatan Isi Rumah Median"},
    "population": {"en": "Population", "ms": "Populasi"},
    "crime": {"en": "Crime Cases", "ms": "Kes Jenayah"},
    "water_consumption": {"en": "Water Consumption", "ms": "Penggunaan Air"},
    "expenditure": {"en": "Mean Household Expenditure", "ms": "Perbelanjaan Isi Rumah Purata"},
}
