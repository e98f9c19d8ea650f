import json

import httpx
import pytest

from app.scanning.exceptions import AntivirusUnavailableError
from app.scanning.http_antivirus import HttpAntivirusScanner


def _scanner(handler) -> HttpAntivirusScanner:  # type: ignore[no-untyped-def]
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return HttpAntivirusScanner(url="http://av.local/scan", timeout_seconds=5, client=client)


def _json_response(payload: object, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(payload).encode())


class TestHttpAntivirusScanner:
    def test_clean_response(self) -> None:
        result = _scanner(lambda request: _json_response({"infected": False})).scan(b"data")
        assert result.infected is False
        assert result.threat_names == ()

    def test_infected_response_with_names(self) -> None:
        scanner = _scanner(
            lambda request: _json_response({"is_infected": True, "viruses": ["Eicar"]})
        )
        result = scanner.scan(b"data")
        assert result.infected is True
        assert result.threat_names == ("Eicar",)

    def test_posts_raw_bytes(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return _json_response({"infected": False})

        _scanner(handler).scan(b"\x00payload")
        assert seen[0].method == "POST"
        assert seen[0].content == b"\x00payload"
        assert seen[0].headers["content-type"] == "application/octet-stream"

    def test_server_error_is_unavailable(self) -> None:
        scanner = _scanner(lambda request: httpx.Response(503))
        with pytest.raises(AntivirusUnavailableError, match="request failed"):
            scanner.scan(b"data")

    def test_connection_error_is_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(AntivirusUnavailableError):
            _scanner(handler).scan(b"data")

    def test_invalid_json_is_unavailable(self) -> None:
        scanner = _scanner(lambda request: httpx.Response(200, content=b"<html>"))
        with pytest.raises(AntivirusUnavailableError, match="invalid JSON"):
            scanner.scan(b"data")

    @pytest.mark.parametrize(
        "payload",
        [[], {"status": "ok"}, {"infected": "no"}, {"infected": True, "viruses": "Eicar"}],
    )
    def test_malformed_verdict_is_unavailable(self, payload: object) -> None:
        with pytest.raises(AntivirusUnavailableError) as exc_info:
            _scanner(lambda request: _json_response(payload)).scan(b"data")
        assert exc_info.value.collaborator == "antivirus"
