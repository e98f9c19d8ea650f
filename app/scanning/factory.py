from app.config.settings import Settings
from app.runtime.collaborator_call import CollaboratorCall
from app.scanning.adapter import ScanAdapter
from app.scanning.antivirus_base import BaseAntivirusScanner
from app.scanning.example_antivirus import ExampleAntivirusScanner
from app.scanning.http_antivirus import HttpAntivirusScanner
from app.scanning.inspector_base import BaseStructuralInspector
from app.scanning.pattern_inspector import PatternStructuralInspector
from app.scanning.pymupdf_inspector import PyMuPdfStructuralInspector


class ScanAdapterFactory:
    """Creates the scan adapter with the configured scanner backends."""

    INSPECTORS: dict[str, type[BaseStructuralInspector]] = {
        "pymupdf": PyMuPdfStructuralInspector,
        "pattern": PatternStructuralInspector,
    }
    ANTIVIRUS_PROVIDERS = ("http", "example")

    @classmethod
    def create(cls, settings: Settings, call: CollaboratorCall) -> ScanAdapter:
        return ScanAdapter(
            antivirus=cls._create_antivirus(settings),
            inspector=cls._create_inspector(settings),
            call=call,
            antivirus_timeout_seconds=settings.antivirus_timeout_seconds,
            inspector_timeout_seconds=settings.structural_timeout_seconds,
        )

    @classmethod
    def _create_antivirus(cls, settings: Settings) -> BaseAntivirusScanner:
        provider = settings.antivirus_provider.lower()
        if provider == "example":
            return ExampleAntivirusScanner()
        if provider == "http":
            return HttpAntivirusScanner(
                url=settings.antivirus_url,
                timeout_seconds=settings.antivirus_timeout_seconds,
            )
        raise ValueError(
            f"Unknown antivirus provider '{provider}'. "
            f"Choose from: {list(cls.ANTIVIRUS_PROVIDERS)}"
        )

    @classmethod
    def _create_inspector(cls, settings: Settings) -> BaseStructuralInspector:
        name = settings.structural_inspector.lower()
        inspector_cls = cls.INSPECTORS.get(name)
        if inspector_cls is None:
            raise ValueError(
                f"Unknown structural inspector '{name}'. Choose from: {list(cls.INSPECTORS)}"
            )
        return inspector_cls()
