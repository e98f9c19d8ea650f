import re
from typing import ClassVar

from app.content.sniffer import PDF_MIME_TYPE, sniff_mime_type
from app.scanning import pdf_markers
from app.scanning.exceptions import InspectorUnavailableError
from app.scanning.inspector_base import BaseStructuralInspector
from app.scanning.models import StructuralFlags


class PatternStructuralInspector(BaseStructuralInspector):
    """Inspects raw PDF bytes for marker names without parsing the document.

    Cheap and dependency-free, but blind to content inside compressed object
    streams; use the PyMuPDF inspector where that matters.
    """

    _TRAILER_WINDOW: ClassVar[int] = 2048

    _PATTERNS: ClassVar[dict[str, re.Pattern[bytes]]] = {
        name: re.compile(pattern.encode("ascii"))
        for name, pattern in (
            ("script", pdf_markers.SCRIPT),
            ("attachment", pdf_markers.ATTACHMENT),
            ("auto_execution", pdf_markers.AUTO_EXECUTION),
            ("open_action", pdf_markers.OPEN_ACTION_SCRIPT),
            ("external_link", pdf_markers.EXTERNAL_LINK),
            ("form", pdf_markers.FORM),
            ("encrypt", pdf_markers.ENCRYPT),
        )
    }

    def inspect(self, blob: bytes) -> StructuralFlags:
        if sniff_mime_type(blob) != PDF_MIME_TYPE:
            return StructuralFlags()
        try:
            data = pdf_markers.unescape_names(blob)
        except Exception as exc:
            raise InspectorUnavailableError(f"Pattern inspection failed: {exc}") from exc
        found = {name: bool(pattern.search(data)) for name, pattern in self._PATTERNS.items()}
        return StructuralFlags(
            corrupted=b"%%EOF" not in blob[-self._TRAILER_WINDOW :],
            encrypted=found["encrypt"],
            embedded_script=found["script"],
            embedded_attachment=found["attachment"],
            auto_execution=found["auto_execution"] or found["open_action"],
            external_links=found["external_link"],
            interactive_form=found["form"],
        )
