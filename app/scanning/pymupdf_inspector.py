import re
from typing import Any, ClassVar

import pymupdf

from app.content.sniffer import PDF_MIME_TYPE, sniff_mime_type
from app.scanning import pdf_markers
from app.scanning.exceptions import InspectorUnavailableError
from app.scanning.inspector_base import BaseStructuralInspector
from app.scanning.models import StructuralFlags


class PyMuPdfStructuralInspector(BaseStructuralInspector):
    """Inspects PDF structure through PyMuPDF.

    Every object is read back decompressed, so markers hidden in object
    streams are found too. Documents PyMuPDF cannot open, or that have no
    pages, are reported as corrupted.
    """

    _SCRIPT_RE: ClassVar[re.Pattern[str]] = re.compile(pdf_markers.SCRIPT)
    _ATTACHMENT_RE: ClassVar[re.Pattern[str]] = re.compile(pdf_markers.ATTACHMENT)
    _AUTO_EXECUTION_RE: ClassVar[re.Pattern[str]] = re.compile(pdf_markers.AUTO_EXECUTION)
    _ACTION_SCRIPT_RE: ClassVar[re.Pattern[str]] = re.compile(pdf_markers.ACTION_SCRIPT)
    _EXTERNAL_LINK_RE: ClassVar[re.Pattern[str]] = re.compile(pdf_markers.EXTERNAL_LINK)
    _FORM_RE: ClassVar[re.Pattern[str]] = re.compile(pdf_markers.FORM)

    def inspect(self, blob: bytes) -> StructuralFlags:
        if sniff_mime_type(blob) != PDF_MIME_TYPE:
            return StructuralFlags()
        try:
            doc = pymupdf.open(stream=blob, filetype="pdf")  # type: ignore[no-untyped-call]
        except Exception:
            return StructuralFlags(corrupted=True)
        try:
            with doc:
                return self._inspect_document(doc)
        except InspectorUnavailableError:
            raise
        except Exception as exc:
            raise InspectorUnavailableError(f"PyMuPDF inspection failed: {exc}") from exc

    def _inspect_document(self, doc: Any) -> StructuralFlags:
        encrypted = bool(doc.needs_pass or (doc.metadata or {}).get("encryption"))
        if doc.needs_pass:
            return StructuralFlags(encrypted=True)
        if doc.page_count == 0:
            return StructuralFlags(corrupted=True, encrypted=encrypted)

        objects = self._read_objects(doc)
        if objects is None:
            return StructuralFlags(corrupted=True, encrypted=encrypted)
        body = "\n".join(objects)

        return StructuralFlags(
            encrypted=encrypted,
            embedded_script=bool(self._SCRIPT_RE.search(body)),
            embedded_attachment=doc.embfile_count() > 0 or bool(self._ATTACHMENT_RE.search(body)),
            auto_execution=bool(self._AUTO_EXECUTION_RE.search(body))
            or self._open_action_runs_code(doc),
            external_links=self._has_uri_links(doc) or bool(self._EXTERNAL_LINK_RE.search(body)),
            interactive_form=bool(doc.is_form_pdf) or bool(self._FORM_RE.search(body)),
        )

    @staticmethod
    def _read_objects(doc: Any) -> list[str] | None:
        objects: list[str] = []
        for xref in range(1, doc.xref_length()):
            try:
                source = doc.xref_object(xref, compressed=False)
            except RuntimeError:
                return None
            raw = source.encode("latin-1", "replace")
            objects.append(pdf_markers.unescape_names(raw).decode("latin-1"))
        return objects

    def _open_action_runs_code(self, doc: Any) -> bool:
        kind, value = doc.xref_get_key(doc.pdf_catalog(), "OpenAction")
        if kind == "null":
            return False
        if kind == "xref":
            value = doc.xref_object(int(value.split()[0]), compressed=False)
        return bool(self._ACTION_SCRIPT_RE.search(value))

    @staticmethod
    def _has_uri_links(doc: Any) -> bool:
        return any(
            link.get("kind") == pymupdf.LINK_URI
            for page in doc
            for link in page.get_links()
        )
