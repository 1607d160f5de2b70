"""Tests for the console entry point."""
from unittest.mock import patch

import pytest

import main


@pytest.fixture(autouse=True)
def no_dotenv():
    with patch('main.load_dotenv'):
        yield


def test_main_runs_app_from_command_line(monkeypatch):
    monkeypatch.setattr("sys.argv", ["watering-weather", "--port", "8080", "--timeout", "5"])
    monkeypatch.setenv("OWM_API_KEY", "test_key")

    with patch('main.setup_logging') as mock_logging, patch('main.create_app') as mock_create_app:
        main.main()

        config = mock_create_app.call_args[0][0]
        assert config.owm_api_key == "test_key"
        assert config.timeout == 5
        assert mock_logging.call_args[0][1] is False
        mock_create_app.return_value.run.assert_called_once_with(host="0.0.0.0", port=8080)


def test_main_requires_api_key(monkeypatch):
    monkeypatch.setattr("sys.argv", ["watering-weather"])
    monkeypatch.delenv("OWM_API_KEY", raising=False)

    with patch('main.setup_logging'), patch('main.create_app') as mock_create_app:
        with pytest.raises(SystemExit):
            main.main()

        mock_create_app.assert_not_called()
