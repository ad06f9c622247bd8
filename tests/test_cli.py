from unittest.mock import MagicMock, patch

import pytest

from quickcourt import cli
from quickcourt.models import AddOns


@patch("quickcourt.cli.run.run_availability")
def test_main_availability(mock_run):
    cli.main(["availability", "--court-id", "c1", "--date", "2025-01-01"])

    mock_run.assert_called_once_with("2025-01-01", court_id="c1", court_file=None, bookings_file=None)


@patch("quickcourt.cli.run.run_quote")
def test_main_quote(mock_run):
    mock_run.return_value = MagicMock()

    cli.main(
        [
            "-v",
            "quote",
            "--court-file",
            "court.json",
            "--bookings-file",
            "bookings.json",
            "--date",
            "2025-01-01",
            "--start",
            "19:00",
            "--end",
            "21:00",
            "--cleaning",
        ]
    )

    mock_run.assert_called_once_with(
        "2025-01-01",
        "19:00",
        "21:00",
        add_ons=AddOns(cleaning=True),
        court_id=None,
        court_file="court.json",
        bookings_file="bookings.json",
    )


@patch("quickcourt.cli.run.run_quote")
def test_main_quote_rejected_exits(mock_run):
    mock_run.return_value = None
    with pytest.raises(SystemExit) as exc:
        cli.main(["quote", "--court-id", "c1", "--date", "2025-01-01", "--start", "19:00", "--end", "21:00"])
    assert exc.value.code == 1


@patch("quickcourt.cli.run.run_transition")
def test_main_transition_invalid_exits(mock_run):
    mock_run.return_value = False
    with pytest.raises(SystemExit):
        cli.main(["transition", "completed", "cancelled"])
    mock_run.assert_called_once_with("completed", "cancelled")


def test_court_source_is_required():
    with pytest.raises(SystemExit):
        cli.parse_arguments(["availability", "--date", "2025-01-01"])


@patch("quickcourt.cli.run.run_analytics")
def test_main_analytics(mock_run):
    cli.main(["analytics", "--bookings-file", "bookings.json", "--period", "7"])
    mock_run.assert_called_once_with("bookings.json", period_days=7)


@patch("quickcourt.cli.run.run_analytics")
def test_main_analytics_default_period(mock_run):
    cli.main(["analytics", "--bookings-file", "bookings.json"])
    mock_run.assert_called_once_with("bookings.json", period_days=30)
