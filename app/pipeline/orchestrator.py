from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from uuid import uuid4

from app.dedup.checkpointer import IndexCheckpointer
from app.dedup.index import DuplicateIndex
from app.dedup.models import DuplicateIndexEntry
from app.logging.logger import Log
from app.pipeline.base import PipelineStage
from app.pipeline.context import SubmissionContext
from app.pipeline.models import (
    Accepted,
    ReasonCode,
    Rejected,
    StageName,
    StageReject,
    StageResult,
    SubmissionState,
    Verdict,
)
from app.runtime.exceptions import SubmissionCancelledError


def _new_reference_id() -> str:
    return str(uuid4())


class PipelineOrchestrator:
    """Runs the stages in order and stops at the first rejection.

    Pipeline: size/type -> structural scan -> security scan -> exact dedup ->
    near dedup -> quality -> metadata -> commit to index.
    """

    def __init__(
        self,
        stages: Sequence[PipelineStage],
        index: DuplicateIndex,
        checkpointer: IndexCheckpointer,
        reference_id_factory: Callable[[], str] = _new_reference_id,
    ) -> None:
        if not stages:
            raise ValueError("PipelineOrchestrator needs at least one stage")
        self._stages = tuple(stages)
        self._index = index
        self._checkpointer = checkpointer
        self._reference_id_factory = reference_id_factory

    @property
    def stages(self) -> tuple[PipelineStage, ...]:
        return self._stages

    def run(self, context: SubmissionContext) -> Verdict:
        """Produce exactly one verdict for the submission.

        The blob reference is released on every exit path.
        """
        try:
            return self._run(context)
        finally:
            context.release()

    def _run(self, context: SubmissionContext) -> Verdict:
        Log.info(f"Submission {context.submission_id}: {len(context.blob)} bytes received")

        for stage in self._stages:
            if context.token.is_cancelled():
                return self._reject(
                    context,
                    stage.name,
                    StageReject(ReasonCode.CANCELLED, f"Cancelled before {stage.name.value}"),
                )
            result = self._evaluate(stage, context)
            if isinstance(result, StageReject):
                return self._reject(context, stage.name, result)
            context.annotations.extend(result.annotations)
            context.state = stage.completes
            Log.debug(f"Submission {context.submission_id}: {stage.name.value} passed")

        last = self._stages[-1].name
        if context.token.is_cancelled():
            return self._reject(
                context, last, StageReject(ReasonCode.CANCELLED, "Cancelled before commit")
            )
        return self._commit(context)

    def _evaluate(self, stage: PipelineStage, context: SubmissionContext) -> StageResult:
        try:
            return stage.evaluate(context)
        except SubmissionCancelledError as exc:
            return StageReject(ReasonCode.CANCELLED, str(exc))
        except Exception as exc:
            Log.exception(
                f"Submission {context.submission_id}: {stage.name.value} raised {exc!r}"
            )
            return StageReject(
                ReasonCode.SERVICE_UNAVAILABLE,
                f"{stage.name.value} failed unexpectedly",
                {"collaborator": stage.name.value},
            )

    def _commit(self, context: SubmissionContext) -> Verdict:
        fingerprint = context.fingerprint
        metadata = context.metadata
        if fingerprint is None or metadata is None:
            raise ValueError(
                f"Submission {context.submission_id} reached commit without fingerprint or metadata"
            )

        reference_id = self._reference_id_factory()
        existing = self._index.insert_if_absent(
            DuplicateIndexEntry(fingerprint.exact_hash, fingerprint.near_hash, reference_id)
        )
        if existing is not None:
            # Lost the race against a concurrent submission of the same bytes.
            return self._reject(
                context,
                StageName.EXACT_DEDUP,
                StageReject(
                    ReasonCode.EXACT_DUPLICATE,
                    f"Identical content already accepted as {existing}",
                    {"reference_id": existing},
                ),
            )

        self._checkpointer.record_insert()
        context.state = SubmissionState.ACCEPTED
        annotations = tuple(context.annotations)
        Log.info(
            f"Submission accepted as {reference_id}",
            submission=context.submission_id,
            needs_review=bool(annotations),
        )
        return Accepted(
            reference_id=reference_id,
            fingerprint=fingerprint,
            metadata=metadata,
            annotations=annotations,
        )

    @staticmethod
    def _reject(context: SubmissionContext, stage: StageName, result: StageReject) -> Rejected:
        context.state = SubmissionState.REJECTED
        if result.reason is ReasonCode.SECURITY_THREAT:
            Log.warning(
                f"Security threat: {result.message}",
                submission=context.submission_id,
                submitter=context.submitter,
                at=datetime.now(timezone.utc).isoformat(),
            )
        else:
            Log.info(
                f"Submission rejected: {result.message}",
                submission=context.submission_id,
                stage=stage.value,
                reason=result.reason.value,
            )
        return Rejected(
            stage=stage,
            reason=result.reason,
            message=result.message,
            details=dict(result.details),
        )
