import pytest
import requests

from nametree.http import HTTPClient, HTTPError


class FakeResponse:
    def __init__(self, status_code, text=""):
        self.status_code = status_code
        self.text = text
        self.encoding = None


class FakeSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, params=None, headers=None, timeout=None):
        self.calls.append((method, url, headers))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def test_retries_then_succeeds():
    session = FakeSession([FakeResponse(503), FakeResponse(429), FakeResponse(200, "ok")])
    client = HTTPClient(backoff=0, session=session)
    assert client.get_text("https://example.com/sheet.csv") == "ok"
    assert len(session.calls) == 3
    assert "User-Agent" in session.calls[0][2]


def test_non_retryable_status_raises():
    client = HTTPClient(backoff=0, session=FakeSession([FakeResponse(404, "not found")]))
    with pytest.raises(HTTPError):
        client.get_text("https://example.com/missing.csv")


def test_exceeding_retries_raises():
    session = FakeSession([FakeResponse(500)] * 2)
    client = HTTPClient(max_retries=2, backoff=0, session=session)
    with pytest.raises(HTTPError, match="Exceeded retries"):
        client.request("GET", "https://example.com/flaky.csv")


def test_transport_errors_are_wrapped():
    session = FakeSession([requests.ConnectionError("boom")])
    client = HTTPClient(backoff=0, session=session)
    with pytest.raises(HTTPError):
        client.get_text("https://example.com/down.csv")
