"""Tests for the HTTP client wrapper."""

from unittest.mock import MagicMock

import pytest
import requests

from extractor.exceptions import FetchHTTPError, FetchResponseError, FetchTimeoutError
from extractor.http_client import HttpClient


def make_response(status_code=200, json_data=None, text="", reason="OK", json_error=None):
    response = MagicMock()
    response.status_code = status_code
    response.reason = reason
    response.text = text
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = json_data
    return response


@pytest.fixture
def session():
    mock_session = MagicMock()
    mock_session.headers = {}
    return mock_session


@pytest.fixture
def client(session):
    return HttpClient(timeout=10, user_agent="TestAgent/1.0", session=session)


class TestHttpClientInit:
    """Constructor validation."""

    def test_user_agent_header_set(self, session):
        HttpClient(user_agent="  TestAgent/1.0  ", session=session)

        assert session.headers["User-Agent"] == "TestAgent/1.0"

    @pytest.mark.parametrize("timeout", [0, 301])
    def test_timeout_range(self, session, timeout):
        with pytest.raises(ValueError, match="Timeout"):
            HttpClient(timeout=timeout, session=session)

    def test_empty_user_agent(self, session):
        with pytest.raises(ValueError, match="user_agent"):
            HttpClient(user_agent="   ", session=session)


class TestGetJson:
    """JSON requests."""

    def test_success(self, client, session):
        session.get.return_value = make_response(json_data={"title": "Engineer"})

        assert client.get_json("https://api.example.com/jobs/1") == {"title": "Engineer"}

        args, kwargs = session.get.call_args
        assert args[0] == "https://api.example.com/jobs/1"
        assert kwargs["timeout"] == 10
        assert kwargs["headers"]["Accept"] == "application/json"

    @pytest.mark.parametrize("status", [404, 500])
    def test_http_error_status(self, client, session, status):
        session.get.return_value = make_response(status_code=status, reason="Error")

        with pytest.raises(FetchHTTPError) as exc_info:
            client.get_json("https://api.example.com/jobs/1")

        assert exc_info.value.status_code == status
        assert exc_info.value.url == "https://api.example.com/jobs/1"

    def test_timeout(self, client, session):
        session.get.side_effect = requests.exceptions.Timeout("read timed out")

        with pytest.raises(FetchTimeoutError, match="timed out after 10 seconds"):
            client.get_json("https://api.example.com/jobs/1")

    def test_connection_error(self, client, session):
        session.get.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(FetchHTTPError) as exc_info:
            client.get_json("https://api.example.com/jobs/1")

        assert exc_info.value.status_code == 0

    def test_invalid_json(self, client, session):
        session.get.return_value = make_response(json_error=ValueError("Expecting value"))

        with pytest.raises(FetchResponseError, match="Failed to parse JSON"):
            client.get_json("https://api.example.com/jobs/1")


class TestGetText:
    """Page requests."""

    def test_success(self, client, session):
        session.get.return_value = make_response(text="<html><body>Job</body></html>")

        assert client.get_text("https://example.com/job") == "<html><body>Job</body></html>"
        assert "text/html" in session.get.call_args.kwargs["headers"]["Accept"]

    def test_close(self, client, session):
        client.close()

        session.close.assert_called_once()
