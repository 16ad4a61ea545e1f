import logging
from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from inkstudio import cli
from inkstudio.core import Slot
from inkstudio.errors import AvailabilityUnavailableError


@pytest.fixture(autouse=True)
def quiet_logging():
    with patch("inkstudio.cli.setup_logging"):
        yield


def test_parse_slots_command():
    args = cli.parse_arguments(["-v", "slots", "3", "2024-01-01", "--duration", "90"])
    assert args.verbose
    assert args.command == "slots"
    assert args.artist_id == 3
    assert args.date == date(2024, 1, 1)
    assert args.duration == 90
    assert args.step is None


def test_bad_date_is_a_usage_error():
    with pytest.raises(SystemExit):
        cli.parse_arguments(["slots", "3", "01/01/2024", "--duration", "60"])


@patch("inkstudio.cli.slots.compute_available_slots", new_callable=AsyncMock)
def test_slots_prints_ranges(mock_compute, capsys):
    mock_compute.return_value = [Slot(540, 600), Slot(600, 660)]

    with pytest.raises(SystemExit) as exc:
        cli.main(["slots", "3", "2024-01-01", "--duration", "60"])

    assert exc.value.code == 0
    assert capsys.readouterr().out.splitlines() == ["09:00-10:00", "10:00-11:00"]
    assert mock_compute.call_args.args[1:] == (3, date(2024, 1, 1), 60, None)


@patch("inkstudio.cli.slots.compute_daily_slot_counts", new_callable=AsyncMock)
def test_reversed_range_exits_nonzero(mock_counts):
    mock_counts.side_effect = ValueError("end_date must not be before start_date")

    with pytest.raises(SystemExit) as exc:
        cli.main(["slot-counts", "3", "2024-01-05", "2024-01-01", "--duration", "60"])
    assert exc.value.code == 2


@patch("inkstudio.cli.init_db")
def test_init_db(mock_init):
    with pytest.raises(SystemExit):
        cli.main(["init-db"])
    mock_init.assert_called_once_with()


def test_serve_runs_uvicorn():
    fake_uvicorn = MagicMock()
    with patch.dict("sys.modules", {"uvicorn": fake_uvicorn}):
        with pytest.raises(SystemExit):
            cli.main(["serve", "--port", "9000"])
    fake_uvicorn.run.assert_called_once_with("inkstudio.main:app", host="127.0.0.1", port=9000, reload=False)


@patch("inkstudio.cli.slots.compute_disabled_dates", new_callable=AsyncMock)
def test_unreadable_records_exit_with_error(mock_disabled):
    mock_disabled.side_effect = AvailabilityUnavailableError("down")

    with pytest.raises(SystemExit) as exc:
        cli.main(["disabled-dates", "3", "--start", "2024-01-01"])
    assert exc.value.code == 1


def test_day_count_must_be_positive():
    with pytest.raises(SystemExit):
        cli.parse_arguments(["disabled-dates", "3", "--days", "0"])
    assert cli.parse_arguments(["disabled-dates", "3", "--days", "1"]).days == 1


def test_verbose_switches_to_debug():
    assert cli.log_level(True) == logging.DEBUG


@patch("inkstudio.cli.slots.compute_disabled_dates", new_callable=AsyncMock)
def test_disabled_dates_start_defaults_to_today(mock_disabled):
    mock_disabled.return_value = []

    with pytest.raises(SystemExit) as exc:
        cli.main(["disabled-dates", "3", "--days", "7"])
    assert exc.value.code == 0
    assert mock_disabled.call_args.args[1:] == (3, date.today(), 7)
