from app.logging.logger import Log
from app.runtime.cancellation import CancellationToken
from app.runtime.collaborator_call import CollaboratorCall
from app.runtime.exceptions import CollaboratorUnavailableError
from app.scanning.antivirus_base import BaseAntivirusScanner
from app.scanning.inspector_base import BaseStructuralInspector
from app.scanning.models import ScanOutcome, ScanUnavailable, ThreatReport


class ScanAdapter:
    """Normalizes antivirus and structural inspector output into ThreatReports.

    Fail-closed: if a backing scanner errors out or misses its deadline the
    outcome is ScanUnavailable, never a clean report. Cancellation is not an
    outcome and propagates as SubmissionCancelledError.
    """

    def __init__(
        self,
        *,
        antivirus: BaseAntivirusScanner,
        inspector: BaseStructuralInspector,
        call: CollaboratorCall,
        antivirus_timeout_seconds: float,
        inspector_timeout_seconds: float,
    ) -> None:
        self._antivirus = antivirus
        self._inspector = inspector
        self._call = call
        self._antivirus_timeout = antivirus_timeout_seconds
        self._inspector_timeout = inspector_timeout_seconds

    def scan(self, blob: bytes, token: CancellationToken | None = None) -> ScanOutcome:
        """Run every backing scanner and merge their findings."""
        structure = self.inspect_structure(blob, token)
        if isinstance(structure, ScanUnavailable):
            return structure
        security = self.scan_security(blob, token)
        if isinstance(security, ScanUnavailable):
            return security
        return structure.merge(security)

    def inspect_structure(
        self, blob: bytes, token: CancellationToken | None = None
    ) -> ScanOutcome:
        try:
            flags = self._call.run(
                "structural_inspector",
                lambda: self._inspector.inspect(blob),
                self._inspector_timeout,
                token,
            )
        except CollaboratorUnavailableError as exc:
            return self._unavailable(exc)
        return ThreatReport.from_structure(flags)

    def scan_security(self, blob: bytes, token: CancellationToken | None = None) -> ScanOutcome:
        try:
            result = self._call.run(
                "antivirus",
                lambda: self._antivirus.scan(blob),
                self._antivirus_timeout,
                token,
            )
        except CollaboratorUnavailableError as exc:
            return self._unavailable(exc)
        return ThreatReport.from_antivirus(result)

    @staticmethod
    def _unavailable(exc: CollaboratorUnavailableError) -> ScanUnavailable:
        Log.warning(f"Scanner {exc.collaborator} unavailable: {exc}")
        return ScanUnavailable(collaborator=exc.collaborator, message=str(exc))
