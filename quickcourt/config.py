import logging
import os
from typing import Dict

logger = logging.getLogger(__name__)

# --- File Paths ---
DATA_DIR = os.environ.get("QUICKCOURT_DATA_DIR", "public/data")
REPORT_FILE = os.path.join(DATA_DIR, "quotes.json")

# --- QuickCourt API ---
API_BASE = os.environ.get("QUICKCOURT_API_URL", "http://localhost:5001/api").rstrip("/")
API_TOKEN = os.environ.get("QUICKCOURT_API_TOKEN")
REQUEST_TIMEOUT = 10

COMMON_HEADERS: Dict[str, str] = {
    "Accept": "application/json, text/plain, */*",
    "Content-Type": "application/json",
    "User-Agent": os.environ.get("QUICKCOURT_USER_AGENT", "quickcourt-engine/0.1"),
}

# --- Pricing ---
# Platform-wide add-on rates; per-court equipment and lighting costs live on the court.
COACHING_RATE_PER_HOUR = float(os.environ.get("QUICKCOURT_COACHING_RATE", "500"))
CLEANING_FLAT_FEE = float(os.environ.get("QUICKCOURT_CLEANING_FEE", "200"))

# Peak window is matched against the start hour, both ends inclusive.
PEAK_START_HOUR = int(os.environ.get("QUICKCOURT_PEAK_START_HOUR", "18"))
PEAK_END_HOUR = int(os.environ.get("QUICKCOURT_PEAK_END_HOUR", "22"))

DEFAULT_CURRENCY = "INR"

# --- Booking rules ---
MIN_BOOKING_HOURS = 0.5
CANCELLATION_CUTOFF_HOURS = float(os.environ.get("QUICKCOURT_CANCELLATION_CUTOFF_HOURS", "2"))

DEFAULT_OPEN_TIME = "06:00"
DEFAULT_CLOSE_TIME = "22:00"

if PEAK_START_HOUR > PEAK_END_HOUR:
    logger.warning(
        f"Peak window {PEAK_START_HOUR}-{PEAK_END_HOUR} is empty. Peak pricing will never apply."
    )
