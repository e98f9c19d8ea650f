from abc import ABC, abstractmethod

from app.pipeline.context import SubmissionContext
from app.pipeline.models import StageName, StageResult, SubmissionState


class PipelineStage(ABC):
    """One check in the submission pipeline."""

    name: StageName
    completes: SubmissionState

    @abstractmethod
    def evaluate(self, context: SubmissionContext) -> StageResult:
        """Return StagePass or StageReject for the submission.

        Stages may raise SubmissionCancelledError when the caller abandons the
        submission; any other exception is turned into a rejection by the
        orchestrator.
        """
        raise NotImplementedError
