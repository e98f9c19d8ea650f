from typing import Any

import httpx

from app.scanning.antivirus_base import BaseAntivirusScanner
from app.scanning.exceptions import AntivirusUnavailableError
from app.scanning.models import AntivirusResult


class HttpAntivirusScanner(BaseAntivirusScanner):
    """Antivirus adapter for a REST front-end to an AV engine (e.g. clamd behind HTTP).

    The endpoint receives the raw bytes and answers with JSON carrying an
    ``infected`` (or ``is_infected``) boolean and an optional ``viruses`` list.
    """

    def __init__(
        self,
        *,
        url: str,
        timeout_seconds: float,
        client: httpx.Client | None = None,
    ) -> None:
        self._url = url
        self._client = client or httpx.Client(timeout=timeout_seconds)

    def scan(self, blob: bytes) -> AntivirusResult:
        try:
            response = self._client.post(
                self._url,
                content=blob,
                headers={"Content-Type": "application/octet-stream"},
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise AntivirusUnavailableError(f"Antivirus request failed: {exc}") from exc
        except ValueError as exc:
            raise AntivirusUnavailableError(f"Antivirus returned invalid JSON: {exc}") from exc
        return self._parse(payload)

    @staticmethod
    def _parse(payload: Any) -> AntivirusResult:
        if not isinstance(payload, dict):
            raise AntivirusUnavailableError("Antivirus response must be a JSON object")
        infected = payload.get("infected", payload.get("is_infected"))
        if not isinstance(infected, bool):
            raise AntivirusUnavailableError("Antivirus response has no boolean 'infected' field")
        viruses = payload.get("viruses") or []
        if not isinstance(viruses, list):
            raise AntivirusUnavailableError("Antivirus 'viruses' must be a list")
        return AntivirusResult(
            infected=infected,
            threat_names=tuple(str(name) for name in viruses),
        )
