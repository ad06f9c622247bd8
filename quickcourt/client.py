import logging
from typing import Dict, List, Optional
from urllib.parse import urlencode

import requests
from pydantic import ValidationError

from quickcourt import config
from quickcourt.models import Court, Reservation, ReservationStatus

logger = logging.getLogger(__name__)


def build_headers() -> Dict[str, str]:
    headers = dict(config.COMMON_HEADERS)
    if config.API_TOKEN:
        headers["Authorization"] = f"Bearer {config.API_TOKEN}"
    return headers


def build_url(path: str, **params) -> str:
    """Constructs an API URL below the configured base, dropping empty query params."""
    url = f"{config.API_BASE}/{path.lstrip('/')}"
    query = {k: v for k, v in params.items() if v is not None}
    if query:
        url = f"{url}?{urlencode(query)}"
    logger.debug(f"Built URL: {url}")
    return url


def fetch_json(url: str) -> Optional[Dict]:
    """GETs a QuickCourt endpoint and returns the decoded body, or None on failure."""
    try:
        response = requests.get(url, headers=build_headers(), timeout=config.REQUEST_TIMEOUT)
        logger.debug(f"Response status: {response.status_code}")
        response.raise_for_status()
        data: Dict = response.json()
    except requests.exceptions.RequestException as e:
        logger.error(f"Error fetching {url}: {e}")
        return None
    except ValueError as e:
        logger.error(f"Invalid JSON from {url}: {e}")
        return None

    if not isinstance(data, dict):
        logger.error(f"Unexpected JSON format from {url}.")
        return None
    if not data.get("success", True):
        logger.error(f"API reported failure for {url}: {data.get('error')}")
        return None
    return data


def fetch_court(court_id: str) -> Optional[Court]:
    """Fetches a court with its pricing and operating hours."""
    data = fetch_json(build_url(f"courts/{court_id}"))
    if data is None:
        return None

    if "court" not in data:
        logger.error("Unexpected JSON format. 'court' key missing.")
        logger.debug(f"Response data: {data}")
        return None

    try:
        return Court.model_validate(data["court"])
    except ValidationError as e:
        logger.error(f"Court {court_id} has invalid data: {e}")
        return None


def fetch_reservations(court_id: str, date_str: str) -> Optional[List[Reservation]]:
    """Fetches the occupying reservations of a court on a date.

    The availability endpoint only returns pending and confirmed bookings, and only
    their time ranges, so every returned reservation is treated as pending.
    """
    data = fetch_json(build_url("bookings/availability", courtId=court_id, date=date_str))
    if data is None:
        return None

    if "existingBookings" not in data:
        # Closed days come back without a booking list.
        logger.info(f"No bookings listed for {date_str}: {data.get('message', 'no message')}")
        return []

    try:
        return [
            Reservation(
                court_id=court_id,
                date=date_str,
                start_time=booking["startTime"],
                end_time=booking["endTime"],
                status=ReservationStatus(booking.get("status", ReservationStatus.PENDING.value)),
            )
            for booking in data["existingBookings"]
        ]
    except (KeyError, ValueError) as e:
        logger.error(f"Unexpected booking data for {date_str}: {e}")
        return None
