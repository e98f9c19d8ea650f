from abc import abstractmethod
from collections.abc import Collection

from app.content.sniffer import sniff_mime_type
from app.dedup.index import DuplicateIndex
from app.fingerprint.engine import FingerprintEngine
from app.logging.logger import Log
from app.metadata.exceptions import MetadataValidationError
from app.metadata.sanitizer import MetadataSanitizer
from app.pipeline.base import PipelineStage
from app.pipeline.context import SubmissionContext
from app.pipeline.models import (
    Annotation,
    ReasonCode,
    StageName,
    StagePass,
    StageReject,
    StageResult,
    SubmissionState,
)
from app.quality.base import BaseQualityService
from app.quality.exceptions import UnreadableContentError
from app.runtime.collaborator_call import CollaboratorCall
from app.runtime.exceptions import CollaboratorUnavailableError
from app.scanning.adapter import ScanAdapter
from app.scanning.models import ScanOutcome, ScanUnavailable, ThreatReport


def _service_unavailable(collaborator: str, message: str) -> StageReject:
    return StageReject(
        ReasonCode.SERVICE_UNAVAILABLE,
        f"{collaborator} unavailable: {message}",
        {"collaborator": collaborator},
    )


class SizeTypeStage(PipelineStage):
    name = StageName.SIZE_TYPE
    completes = SubmissionState.SIZE_TYPE_CHECKED

    def __init__(self, max_bytes: int, allowed_mime_types: Collection[str]) -> None:
        self._max_bytes = max_bytes
        self._allowed = frozenset(m.lower() for m in allowed_mime_types)

    def evaluate(self, context: SubmissionContext) -> StageResult:
        size = len(context.blob)
        if size > self._max_bytes:
            return StageReject(
                ReasonCode.SIZE_EXCEEDED,
                f"Upload is {size} bytes, limit is {self._max_bytes}",
                {"size": size, "limit": self._max_bytes},
            )
        if size == 0:
            return StageReject(ReasonCode.TYPE_MISMATCH, "Upload is empty")

        mime_type = sniff_mime_type(context.blob)
        if mime_type not in self._allowed:
            return StageReject(
                ReasonCode.TYPE_MISMATCH,
                f"Content type {mime_type or 'unknown'} is not accepted",
                {"detected": mime_type, "allowed": sorted(self._allowed)},
            )
        declared = context.raw_metadata.declared_mime_type
        if isinstance(declared, str) and declared.strip():
            declared = declared.split(";")[0].strip().lower()
            if declared != mime_type:
                return StageReject(
                    ReasonCode.TYPE_MISMATCH,
                    f"Declared type {declared} does not match detected type {mime_type}",
                    {"detected": mime_type, "declared": declared},
                )
        context.mime_type = mime_type
        return StagePass()


class _ScanStage(PipelineStage):
    def __init__(self, scan_adapter: ScanAdapter) -> None:
        self._scan_adapter = scan_adapter

    def evaluate(self, context: SubmissionContext) -> StageResult:
        outcome = self._scan(context)
        if isinstance(outcome, ScanUnavailable):
            return _service_unavailable(outcome.collaborator, outcome.message)
        return self._judge(outcome)

    @abstractmethod
    def _scan(self, context: SubmissionContext) -> ScanOutcome:
        raise NotImplementedError

    @staticmethod
    def _judge(report: ThreatReport) -> StageResult:
        if report.corrupted:
            return StageReject(ReasonCode.STRUCTURAL_CORRUPTION, "Content structure is damaged")
        if report.encrypted:
            return StageReject(
                ReasonCode.ENCRYPTED_UNREADABLE, "Content is encrypted and cannot be inspected"
            )
        kinds = report.threat_kinds()
        if kinds:
            return StageReject(
                ReasonCode.SECURITY_THREAT,
                f"Content carries {', '.join(kinds)}",
                {"kind": kinds[0], "kinds": kinds, "threat_names": list(report.threat_names)},
            )
        if report.external_links:
            return StagePass(
                (Annotation("external_links", "Content links to external resources"),)
            )
        return StagePass()


class StructuralScanStage(_ScanStage):
    name = StageName.STRUCTURAL_SCAN
    completes = SubmissionState.STRUCTURALLY_SCANNED

    def _scan(self, context: SubmissionContext) -> ScanOutcome:
        return self._scan_adapter.inspect_structure(context.blob, context.token)


class SecurityScanStage(_ScanStage):
    name = StageName.SECURITY_SCAN
    completes = SubmissionState.SECURITY_SCANNED

    def _scan(self, context: SubmissionContext) -> ScanOutcome:
        return self._scan_adapter.scan_security(context.blob, context.token)


class ExactDedupStage(PipelineStage):
    name = StageName.EXACT_DEDUP
    completes = SubmissionState.EXACT_DEDUP_CHECKED

    def __init__(self, engine: FingerprintEngine, index: DuplicateIndex) -> None:
        self._engine = engine
        self._index = index

    def evaluate(self, context: SubmissionContext) -> StageResult:
        fingerprint = context.fingerprint
        if fingerprint is None:
            fingerprint = self._engine.fingerprint(context.blob, context.mime_type)
            context.set_fingerprint(fingerprint)
        reference_id = self._index.lookup_exact(fingerprint.exact_hash)
        if reference_id is not None:
            return StageReject(
                ReasonCode.EXACT_DUPLICATE,
                f"Identical content already accepted as {reference_id}",
                {"reference_id": reference_id},
            )
        return StagePass()


class NearDedupStage(PipelineStage):
    name = StageName.NEAR_DEDUP
    completes = SubmissionState.NEAR_DEDUP_CHECKED

    def __init__(self, index: DuplicateIndex, threshold: int, auto_reject: bool = False) -> None:
        self._index = index
        self._threshold = threshold
        self._auto_reject = auto_reject

    def evaluate(self, context: SubmissionContext) -> StageResult:
        if context.fingerprint is None:
            raise ValueError("SubmissionContext.fingerprint must be set before near dedup")
        matches = self._index.find_near(context.fingerprint.near_hash, self._threshold)
        if not matches:
            return StagePass()
        best = matches[0]
        details = {
            "reference_id": best.reference_id,
            "distance": best.distance,
            "candidates": [m.reference_id for m in matches],
        }
        message = f"Content is {best.distance} bits from {best.reference_id}"
        if self._auto_reject:
            return StageReject(ReasonCode.NEAR_DUPLICATE_FLAGGED, message, details)
        return StagePass((Annotation(ReasonCode.NEAR_DUPLICATE_FLAGGED.value, message, details),))


class QualityStage(PipelineStage):
    name = StageName.QUALITY
    completes = SubmissionState.QUALITY_CHECKED

    def __init__(
        self,
        *,
        quality_service: BaseQualityService,
        call: CollaboratorCall,
        timeout_seconds: float,
        min_score: float,
        auto_reject: bool = False,
    ) -> None:
        self._quality_service = quality_service
        self._call = call
        self._timeout = timeout_seconds
        self._min_score = min_score
        self._auto_reject = auto_reject

    def evaluate(self, context: SubmissionContext) -> StageResult:
        blob = context.blob
        try:
            report = self._call.run(
                "quality_service",
                lambda: self._quality_service.analyze(blob, self._timeout),
                self._timeout,
                context.token,
            )
        except UnreadableContentError as exc:
            return StageReject(ReasonCode.STRUCTURAL_CORRUPTION, str(exc))
        except CollaboratorUnavailableError as exc:
            Log.warning(f"Quality service unavailable for {context.submission_id}: {exc}")
            return _service_unavailable(exc.collaborator, str(exc))

        reasons = list(report.reasons)
        if report.score < self._min_score:
            reasons.insert(0, f"score {report.score:.2f} below {self._min_score:.2f}")
        if not (report.flagged or reasons):
            return StagePass()
        reason = "; ".join(reasons) or "flagged by quality service"
        details = {"reason": reason, "score": report.score, "flagged": report.flagged}
        if self._auto_reject:
            return StageReject(ReasonCode.QUALITY_FLAGGED, f"Quality check failed: {reason}", details)
        return StagePass((Annotation(ReasonCode.QUALITY_FLAGGED.value, reason, details),))


class MetadataStage(PipelineStage):
    name = StageName.METADATA
    completes = SubmissionState.METADATA_VALIDATED

    def __init__(self, sanitizer: MetadataSanitizer) -> None:
        self._sanitizer = sanitizer

    def evaluate(self, context: SubmissionContext) -> StageResult:
        try:
            context.metadata = self._sanitizer.sanitize(context.raw_metadata)
        except MetadataValidationError as exc:
            return StageReject(ReasonCode.METADATA_INVALID, str(exc), {"field": exc.field})
        return StagePass()
