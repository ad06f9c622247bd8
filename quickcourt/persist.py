import json
import logging
import os
from datetime import date, datetime, timezone
from typing import List, Optional

from pydantic import ValidationError

from quickcourt import config
from quickcourt.models import Court, Reservation

logger = logging.getLogger(__name__)


def ensure_data_dir():
    """Ensures the data directory exists."""
    if not os.path.exists(config.DATA_DIR):
        os.makedirs(config.DATA_DIR)


def _read_json(path: str):
    try:
        with open(path, "r") as f:
            return json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        logger.error(f"Failed to read {path}: {e}")
        return None


def load_court(path: str) -> Optional[Court]:
    """Loads a court document, either bare or wrapped as {"court": {...}}."""
    data = _read_json(path)
    if data is None:
        return None
    if isinstance(data, dict) and "court" in data:
        data = data["court"]

    try:
        return Court.model_validate(data)
    except ValidationError as e:
        logger.error(f"Invalid court data in {path}: {e}")
        return None


def load_reservations(path: str, day: Optional[date] = None) -> Optional[List[Reservation]]:
    """Loads reservations from a JSON list or an object with a bookings list.

    Entries without a date (as in availability responses) are assigned `day`.
    """
    data = _read_json(path)
    if data is None:
        return None
    if isinstance(data, dict):
        data = data.get("bookings", data.get("existingBookings"))
    if not isinstance(data, list):
        logger.error(f"Reservations file {path} has unexpected format.")
        return None

    try:
        return [
            Reservation.model_validate({"date": day, **item} if day is not None else item)
            for item in data
        ]
    except ValidationError as e:
        logger.error(f"Invalid reservation data in {path}: {e}")
        return None


def save_report(quotes: List):
    """Saves booking quotes to a JSON file with a timestamp."""
    ensure_data_dir()
    try:
        serialized = [
            q.model_dump(mode="json", by_alias=True) if hasattr(q, "model_dump") else q for q in quotes
        ]
        data = {"last_updated": datetime.now(timezone.utc).isoformat(), "quotes": serialized}
        with open(config.REPORT_FILE, "w") as f:
            json.dump(data, f, indent=2)
        logger.info(f"Saved report to {config.REPORT_FILE}")
    except IOError as e:
        logger.error(f"Failed to save report: {e}")
