import io
import random
from collections.abc import Callable

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from app.metadata.models import RawMetadata

_STEMS = ("alpha", "delta", "sigma", "omega", "kappa", "lumen", "terra", "nova")


def generate_text(seed: int, words: int) -> str:
    """Deterministic pseudo-prose over a larger vocabulary for fingerprint tests."""
    rng = random.Random(seed)
    vocabulary = [f"{rng.choice(_STEMS)}{i}" for i in range(4000)]
    return " ".join(rng.choice(vocabulary) for _ in range(words))


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Hello PDF World")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Page one content")
    c.showPage()
    c.drawString(72, 720, "Page two content")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def text_generator() -> Callable[[int, int], str]:
    return generate_text


@pytest.fixture()
def raw_metadata() -> RawMetadata:
    return RawMetadata(
        title="Quarterly Report",
        author="Jane Doe",
        category="finance",
        description="Numbers for the third quarter.",
        submitter_identity="user-42",
    )


@pytest.fixture()
def metadata_payload() -> dict[str, str]:
    return {
        "title": "Field Notes",
        "author": "A. Researcher",
        "category": "research",
        "description": "Observations from the spring survey.",
        "submitterIdentity": "user-7",
    }
