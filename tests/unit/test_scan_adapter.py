"""Tests for ScanAdapter fail-closed behavior."""

import threading
from collections.abc import Generator
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import pytest

from app.runtime.cancellation import CancellationToken
from app.runtime.collaborator_call import CollaboratorCall
from app.runtime.exceptions import SubmissionCancelledError
from app.scanning.adapter import ScanAdapter
from app.scanning.exceptions import AntivirusUnavailableError, InspectorUnavailableError
from app.scanning.models import AntivirusResult, ScanUnavailable, StructuralFlags, ThreatReport


@pytest.fixture()
def call() -> Generator[CollaboratorCall, None, None]:
    executor = ThreadPoolExecutor(max_workers=2)
    yield CollaboratorCall(executor)
    executor.shutdown(wait=False, cancel_futures=True)


def _adapter(
    call: CollaboratorCall,
    antivirus: MagicMock | None = None,
    inspector: MagicMock | None = None,
    timeout: float = 1.0,
) -> ScanAdapter:
    if antivirus is None:
        antivirus = MagicMock()
        antivirus.scan.return_value = AntivirusResult()
    if inspector is None:
        inspector = MagicMock()
        inspector.inspect.return_value = StructuralFlags()
    return ScanAdapter(
        antivirus=antivirus,
        inspector=inspector,
        call=call,
        antivirus_timeout_seconds=timeout,
        inspector_timeout_seconds=timeout,
    )


class TestScan:
    def test_clean_blob(self, call: CollaboratorCall) -> None:
        outcome = _adapter(call).scan(b"data")
        assert isinstance(outcome, ThreatReport)
        assert outcome.is_clean

    def test_merges_antivirus_and_structure(self, call: CollaboratorCall) -> None:
        antivirus = MagicMock()
        antivirus.scan.return_value = AntivirusResult(True, ("Trojan.X",))
        inspector = MagicMock()
        inspector.inspect.return_value = StructuralFlags(embedded_script=True)
        outcome = _adapter(call, antivirus, inspector).scan(b"data")
        assert isinstance(outcome, ThreatReport)
        assert outcome.threat_kinds() == ["malware", "embedded_script"]

    def test_antivirus_outage_is_unavailable_not_clean(self, call: CollaboratorCall) -> None:
        antivirus = MagicMock()
        antivirus.scan.side_effect = AntivirusUnavailableError("connection refused")
        outcome = _adapter(call, antivirus=antivirus).scan(b"data")
        assert outcome == ScanUnavailable("antivirus", "connection refused")

    def test_inspector_failure_is_unavailable(self, call: CollaboratorCall) -> None:
        inspector = MagicMock()
        inspector.inspect.side_effect = InspectorUnavailableError("crashed")
        outcome = _adapter(call, inspector=inspector).inspect_structure(b"data")
        assert isinstance(outcome, ScanUnavailable)
        assert outcome.collaborator == "structural_inspector"

    def test_scanner_timeout_is_unavailable(self, call: CollaboratorCall) -> None:
        release = threading.Event()
        antivirus = MagicMock()
        antivirus.scan.side_effect = lambda blob: release.wait(5)
        try:
            outcome = _adapter(call, antivirus=antivirus, timeout=0.1).scan_security(b"data")
        finally:
            release.set()
        assert isinstance(outcome, ScanUnavailable)
        assert outcome.collaborator == "antivirus"

    def test_structure_failure_skips_antivirus(self, call: CollaboratorCall) -> None:
        antivirus = MagicMock()
        inspector = MagicMock()
        inspector.inspect.side_effect = InspectorUnavailableError("crashed")
        _adapter(call, antivirus, inspector).scan(b"data")
        antivirus.scan.assert_not_called()

    def test_cancellation_propagates(self, call: CollaboratorCall) -> None:
        token = CancellationToken()
        token.cancel()
        with pytest.raises(SubmissionCancelledError):
            _adapter(call).scan_security(b"data", token)
