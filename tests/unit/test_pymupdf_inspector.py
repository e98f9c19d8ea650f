"""Tests for PyMuPdfStructuralInspector against generated PDFs."""

import pymupdf
import pytest

from app.scanning.models import StructuralFlags
from app.scanning.pymupdf_inspector import PyMuPdfStructuralInspector


def _document_with_text() -> pymupdf.Document:
    doc = pymupdf.open()
    page = doc.new_page()
    page.insert_text((72, 72), "Inspector fixture")
    return doc


@pytest.fixture()
def inspector() -> PyMuPdfStructuralInspector:
    return PyMuPdfStructuralInspector()


class TestPyMuPdfStructuralInspector:
    def test_reportlab_pdf_is_clean(
        self, inspector: PyMuPdfStructuralInspector, sample_pdf_bytes: bytes
    ) -> None:
        flags = inspector.inspect(sample_pdf_bytes)
        assert flags == StructuralFlags()

    def test_non_pdf_is_skipped(self, inspector: PyMuPdfStructuralInspector) -> None:
        assert not inspector.inspect(b"just text").corrupted

    def test_unparseable_pdf_is_corrupted(self, inspector: PyMuPdfStructuralInspector) -> None:
        assert inspector.inspect(b"%PDF-1.7\n\x00\x01garbage").corrupted

    def test_open_action_javascript(self, inspector: PyMuPdfStructuralInspector) -> None:
        doc = _document_with_text()
        doc.xref_set_key(doc.pdf_catalog(), "OpenAction", "<</S/JavaScript/JS(app.alert(1))>>")
        flags = inspector.inspect(doc.tobytes())
        assert flags.embedded_script
        assert flags.auto_execution

    def test_embedded_file(self, inspector: PyMuPdfStructuralInspector) -> None:
        doc = _document_with_text()
        doc.embfile_add("payload.txt", b"hidden content")
        assert inspector.inspect(doc.tobytes()).embedded_attachment

    def test_uri_link_is_advisory(self, inspector: PyMuPdfStructuralInspector) -> None:
        doc = _document_with_text()
        doc[0].insert_link(
            {
                "kind": pymupdf.LINK_URI,
                "from": pymupdf.Rect(72, 60, 200, 80),
                "uri": "https://example.com",
            }
        )
        flags = inspector.inspect(doc.tobytes())
        assert flags.external_links
        assert not flags.embedded_script

    def test_form_field(self, inspector: PyMuPdfStructuralInspector) -> None:
        doc = _document_with_text()
        widget = pymupdf.Widget()
        widget.field_type = pymupdf.PDF_WIDGET_TYPE_TEXT
        widget.field_name = "name"
        widget.rect = pymupdf.Rect(72, 100, 200, 120)
        doc[0].add_widget(widget)
        assert inspector.inspect(doc.tobytes()).interactive_form

    def test_password_protected(self, inspector: PyMuPdfStructuralInspector) -> None:
        doc = _document_with_text()
        blob = doc.tobytes(
            encryption=pymupdf.PDF_ENCRYPT_AES_256, owner_pw="owner", user_pw="user"
        )
        flags = inspector.inspect(blob)
        assert flags.encrypted
