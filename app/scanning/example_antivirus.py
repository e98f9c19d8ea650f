"""Example antivirus adapter.

Reports every blob as clean without any network call. Intended for local
development and tests only; production deployments must configure a real
engine through ``antivirus_provider``.
"""

from app.scanning.antivirus_base import BaseAntivirusScanner
from app.scanning.models import AntivirusResult


class ExampleAntivirusScanner(BaseAntivirusScanner):
    def scan(self, blob: bytes) -> AntivirusResult:
        _ = blob
        return AntivirusResult(infected=False)
