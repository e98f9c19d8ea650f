from dataclasses import dataclass, field

from app.fingerprint.models import ContentFingerprint
from app.metadata.models import RawMetadata, UploadMetadata
from app.pipeline.models import Annotation, SubmissionState
from app.runtime.cancellation import CancellationToken


@dataclass(slots=True)
class SubmissionContext:
    """Per-submission state, owned by exactly one pipeline run."""

    submission_id: str
    blob: bytes
    raw_metadata: RawMetadata
    token: CancellationToken = field(default_factory=CancellationToken)
    state: SubmissionState = SubmissionState.RECEIVED
    mime_type: str | None = None
    fingerprint: ContentFingerprint | None = None
    metadata: UploadMetadata | None = None
    annotations: list[Annotation] = field(default_factory=list)

    def set_fingerprint(self, fingerprint: ContentFingerprint) -> None:
        if self.fingerprint is not None:
            raise RuntimeError(f"Fingerprint already computed for submission {self.submission_id}")
        self.fingerprint = fingerprint

    @property
    def submitter(self) -> str:
        identity = self.raw_metadata.submitter_identity
        return identity if isinstance(identity, str) and identity else "<anonymous>"

    def release(self) -> None:
        """Drop the blob reference; called on every exit path."""
        self.blob = b""
