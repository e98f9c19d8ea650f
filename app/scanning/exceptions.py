from app.runtime.exceptions import CollaboratorUnavailableError


class AntivirusUnavailableError(CollaboratorUnavailableError):
    """Raised when the antivirus engine cannot be reached or answers nonsense."""

    def __init__(self, message: str) -> None:
        super().__init__("antivirus", message)


class InspectorUnavailableError(CollaboratorUnavailableError):
    """Raised when the structural inspector fails to run."""

    def __init__(self, message: str) -> None:
        super().__init__("structural_inspector", message)
