"""Validates the quality service's raw JSON answer."""

from typing import Any

from app.quality.exceptions import QualityValidationError
from app.quality.models import QualityReport

_MAX_REASONS = 10


def validate_and_build(data: dict[str, Any]) -> QualityReport:
    """Validate raw parsed JSON and build a QualityReport.

    Raises:
        QualityValidationError: on any validation failure.
    """
    for field in ("score", "flagged"):
        if field not in data:
            raise QualityValidationError(f"Missing required field: {field}")
    return QualityReport(
        score=_build_score(data["score"]),
        flagged=_build_flagged(data["flagged"]),
        reasons=_build_reasons(data.get("reasons")),
    )


def _build_score(raw: Any) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise QualityValidationError("'score' must be a number")
    if not 0.0 <= raw <= 1.0:
        raise QualityValidationError(f"'score' must be between 0 and 1, got {raw}")
    return float(raw)


def _build_flagged(raw: Any) -> bool:
    if not isinstance(raw, bool):
        raise QualityValidationError("'flagged' must be a boolean")
    return raw


def _build_reasons(raw: Any) -> list[str]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise QualityValidationError("'reasons' must be a list")
    if len(raw) > _MAX_REASONS:
        raise QualityValidationError(f"Too many reasons: {len(raw)} (max {_MAX_REASONS})")
    reasons: list[str] = []
    for i, item in enumerate(raw):
        if not isinstance(item, str):
            raise QualityValidationError(f"Reason at index {i} must be a string")
        reasons.append(item.strip())
    return [reason for reason in reasons if reason]
