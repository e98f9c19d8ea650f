from app.fingerprint.canonicalizer import TextCanonicalizer
from app.fingerprint.engine import FingerprintEngine, hamming_distance, similar
from app.fingerprint.models import ContentFingerprint

__all__ = [
    "ContentFingerprint",
    "FingerprintEngine",
    "TextCanonicalizer",
    "hamming_distance",
    "similar",
]
