from dataclasses import dataclass, field


@dataclass(frozen=True)
class QualityReport:
    """Output of the content-quality service."""

    score: float
    flagged: bool = False
    reasons: list[str] = field(default_factory=list)
