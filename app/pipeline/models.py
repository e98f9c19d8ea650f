from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from app.fingerprint.models import ContentFingerprint
from app.metadata.models import UploadMetadata


class StageName(str, Enum):
    SIZE_TYPE = "size_type"
    STRUCTURAL_SCAN = "structural_scan"
    SECURITY_SCAN = "security_scan"
    EXACT_DEDUP = "exact_dedup"
    NEAR_DEDUP = "near_dedup"
    QUALITY = "quality"
    METADATA = "metadata"


class SubmissionState(str, Enum):
    RECEIVED = "received"
    SIZE_TYPE_CHECKED = "size_type_checked"
    STRUCTURALLY_SCANNED = "structurally_scanned"
    SECURITY_SCANNED = "security_scanned"
    EXACT_DEDUP_CHECKED = "exact_dedup_checked"
    NEAR_DEDUP_CHECKED = "near_dedup_checked"
    QUALITY_CHECKED = "quality_checked"
    METADATA_VALIDATED = "metadata_validated"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class ReasonCode(str, Enum):
    SIZE_EXCEEDED = "size_exceeded"
    TYPE_MISMATCH = "type_mismatch"
    STRUCTURAL_CORRUPTION = "structural_corruption"
    ENCRYPTED_UNREADABLE = "encrypted_unreadable"
    SECURITY_THREAT = "security_threat"
    EXACT_DUPLICATE = "exact_duplicate"
    NEAR_DUPLICATE_FLAGGED = "near_duplicate_flagged"
    QUALITY_FLAGGED = "quality_flagged"
    METADATA_INVALID = "metadata_invalid"
    SERVICE_UNAVAILABLE = "service_unavailable"
    CANCELLED = "cancelled"

    @property
    def retryable(self) -> bool:
        """Transient reasons; the caller may resubmit the same bytes."""
        return self in (ReasonCode.SERVICE_UNAVAILABLE, ReasonCode.CANCELLED)


@dataclass(frozen=True)
class Annotation:
    """Advisory finding routed to human review; never blocks acceptance."""

    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class StagePass:
    annotations: tuple[Annotation, ...] = ()


@dataclass(frozen=True)
class StageReject:
    reason: ReasonCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def retryable(self) -> bool:
        return self.reason.retryable


StageResult = StagePass | StageReject


@dataclass(frozen=True)
class Accepted:
    """Terminal verdict: the blob may continue to encryption and storage."""

    reference_id: str
    fingerprint: ContentFingerprint
    metadata: UploadMetadata
    annotations: tuple[Annotation, ...] = ()

    @property
    def needs_review(self) -> bool:
        return bool(self.annotations)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": "accepted",
            "reference_id": self.reference_id,
            "exact_hash": self.fingerprint.exact_hash,
            "near_hash": self.fingerprint.near_hash_hex,
            "metadata": asdict(self.metadata),
            "annotations": [asdict(a) for a in self.annotations],
        }


@dataclass(frozen=True)
class Rejected:
    """Terminal verdict: the first failing stage and why."""

    stage: StageName
    reason: ReasonCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def retryable(self) -> bool:
        return self.reason.retryable

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": "rejected",
            "stage": self.stage.value,
            "reason": self.reason.value,
            "message": self.message,
            "retryable": self.retryable,
            "details": dict(self.details),
        }


Verdict = Accepted | Rejected
