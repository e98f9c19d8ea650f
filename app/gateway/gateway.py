import threading
from collections import Counter
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any
from uuid import uuid4

from app.config.settings import Settings
from app.content.text_extractor import ContentTextExtractor
from app.dedup.checkpointer import IndexCheckpointer
from app.dedup.factory import DuplicateIndexStoreFactory
from app.dedup.index import DuplicateIndex
from app.fingerprint.canonicalizer import TextCanonicalizer
from app.fingerprint.engine import FingerprintEngine
from app.logging.logger import Log
from app.metadata.models import RawMetadata
from app.metadata.sanitizer import MetadataSanitizer
from app.pdf.factory import PdfExtractorFactory
from app.pipeline.context import SubmissionContext
from app.pipeline.models import Accepted, ReasonCode, Rejected, Verdict
from app.pipeline.orchestrator import PipelineOrchestrator
from app.pipeline.stages import (
    ExactDedupStage,
    MetadataStage,
    NearDedupStage,
    QualityStage,
    SecurityScanStage,
    SizeTypeStage,
    StructuralScanStage,
)
from app.quality.factory import QualityServiceFactory
from app.runtime.cancellation import CancellationToken
from app.runtime.collaborator_call import CollaboratorCall
from app.scanning.factory import ScanAdapterFactory


class Gateway:
    """Entry point for uploads: one verdict per submission, never an exception."""

    def __init__(
        self,
        orchestrator: PipelineOrchestrator,
        checkpointer: IndexCheckpointer,
        max_workers: int = 8,
        collaborator_executor: ThreadPoolExecutor | None = None,
    ) -> None:
        self._orchestrator = orchestrator
        self._checkpointer = checkpointer
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="submission"
        )
        self._collaborator_executor = collaborator_executor
        self._counts: Counter[str] = Counter()
        self._counts_lock = threading.Lock()
        self._closed = False

    def submit(
        self,
        blob: bytes | bytearray,
        metadata: RawMetadata | dict[str, Any],
        token: CancellationToken | None = None,
    ) -> Verdict:
        """Run the pipeline on the calling thread and return its verdict."""
        context = SubmissionContext(
            submission_id=uuid4().hex,
            blob=bytes(blob),
            raw_metadata=(
                metadata if isinstance(metadata, RawMetadata) else RawMetadata.from_mapping(metadata)
            ),
            token=token or CancellationToken(),
        )
        try:
            verdict = self._orchestrator.run(context)
        except Exception as exc:
            Log.exception(f"Submission {context.submission_id} failed outside any stage: {exc!r}")
            verdict = Rejected(
                stage=self._orchestrator.stages[-1].name,
                reason=ReasonCode.SERVICE_UNAVAILABLE,
                message="Gateway failed to complete the submission",
                details={"collaborator": "gateway"},
            )
        self._count(verdict)
        return verdict

    def submit_async(
        self,
        blob: bytes | bytearray,
        metadata: RawMetadata | dict[str, Any],
        token: CancellationToken | None = None,
    ) -> "Future[Verdict]":
        """Queue the submission on the gateway's worker pool."""
        if self._closed:
            raise RuntimeError("Gateway is closed")
        return self._executor.submit(self.submit, bytes(blob), metadata, token)

    def stats(self) -> dict[str, Any]:
        """Verdict counters since start: accepted, rejected, and rejections per reason."""
        with self._counts_lock:
            counts = dict(self._counts)
        rejected = {
            key.removeprefix("rejected:"): value
            for key, value in sorted(counts.items())
            if key.startswith("rejected:")
        }
        return {
            "accepted": counts.get("accepted", 0),
            "needs_review": counts.get("needs_review", 0),
            "rejected": sum(rejected.values()),
            "rejected_by_reason": rejected,
        }

    def close(self) -> None:
        """Wait for queued submissions, stop the pools and checkpoint the index."""
        if self._closed:
            return
        self._closed = True
        self._executor.shutdown(wait=True)
        if self._collaborator_executor is not None:
            self._collaborator_executor.shutdown(wait=False, cancel_futures=True)
        self._checkpointer.flush()
        Log.info("Gateway closed")

    def __enter__(self) -> "Gateway":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _count(self, verdict: Verdict) -> None:
        with self._counts_lock:
            if isinstance(verdict, Accepted):
                self._counts["accepted"] += 1
                if verdict.needs_review:
                    self._counts["needs_review"] += 1
            else:
                self._counts[f"rejected:{verdict.reason.value}"] += 1


def build_gateway(settings: Settings) -> Gateway:
    """Build a Gateway with all stages and adapters wired from settings."""
    pdf_extractor = PdfExtractorFactory.create(settings)
    text_extractor = ContentTextExtractor(pdf_extractor)
    engine = FingerprintEngine(
        text_extractor=text_extractor,
        canonicalizer=TextCanonicalizer(),
        shingle_size=settings.shingle_size,
        byte_shingle_size=settings.byte_shingle_size,
    )

    store = DuplicateIndexStoreFactory.create(settings)
    index = DuplicateIndex.from_store(
        store, settings.near_duplicate_threshold, settings.near_duplicate_bands
    )
    checkpointer = IndexCheckpointer(index, store, settings.index_checkpoint_every)

    collaborator_executor = ThreadPoolExecutor(
        max_workers=settings.gateway_max_workers * 2, thread_name_prefix="collaborator"
    )
    call = CollaboratorCall(collaborator_executor)
    scan_adapter = ScanAdapterFactory.create(settings, call)
    quality_service = QualityServiceFactory.create(settings, text_extractor)

    stages = [
        SizeTypeStage(settings.max_upload_bytes, settings.allowed_mime_types),
        StructuralScanStage(scan_adapter),
        SecurityScanStage(scan_adapter),
        ExactDedupStage(engine, index),
        NearDedupStage(
            index,
            settings.near_duplicate_threshold,
            auto_reject=settings.near_duplicate_auto_reject,
        ),
        QualityStage(
            quality_service=quality_service,
            call=call,
            timeout_seconds=settings.quality_timeout_seconds,
            min_score=settings.quality_min_score,
            auto_reject=settings.quality_auto_reject,
        ),
        MetadataStage(MetadataSanitizer.from_settings(settings)),
    ]
    orchestrator = PipelineOrchestrator(stages, index, checkpointer)
    Log.info(
        f"Gateway ready: {len(index)} indexed entries, "
        f"near-duplicate threshold {settings.near_duplicate_threshold}"
    )
    return Gateway(
        orchestrator=orchestrator,
        checkpointer=checkpointer,
        max_workers=settings.gateway_max_workers,
        collaborator_executor=collaborator_executor,
    )
