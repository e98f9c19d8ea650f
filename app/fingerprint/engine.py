"""Exact and near-duplicate fingerprinting.

The near-duplicate fingerprint is a 64-bit SimHash:

1. Extract text from the blob and canonicalize it.
2. Cut the word stream into overlapping shingles of ``shingle_size`` words.
3. Hash every distinct shingle to 64 bits with BLAKE2b.
4. For each bit position, add the shingle's frequency when the bit is set and
   subtract it otherwise.
5. Bit *i* of the fingerprint is 1 iff the accumulated vote is non-negative.

Blobs without extractable text (scanned PDFs, binary payloads) fall back to
overlapping byte windows of the raw content.
"""

import hashlib
from collections import Counter
from collections.abc import Iterable

from app.content.exceptions import UnsupportedContentError
from app.content.text_extractor import ContentTextExtractor
from app.fingerprint.canonicalizer import TextCanonicalizer
from app.fingerprint.models import NEAR_HASH_BITS, ContentFingerprint
from app.logging.logger import Log
from app.pdf.exceptions import PdfExtractionError


def hamming_distance(a: int, b: int) -> int:
    """Number of differing bits between two near hashes."""
    return (a ^ b).bit_count()


def similar(a: ContentFingerprint, b: ContentFingerprint, threshold: int) -> bool:
    return hamming_distance(a.near_hash, b.near_hash) <= threshold


def shingle_hash(shingle: bytes) -> int:
    return int.from_bytes(hashlib.blake2b(shingle, digest_size=8).digest(), "big")


def simhash(features: Counter[bytes]) -> int:
    """Collapse weighted features into a 64-bit similarity-preserving hash."""
    set_weight = [0] * NEAR_HASH_BITS
    total_weight = 0
    for feature, weight in features.items():
        total_weight += weight
        h = shingle_hash(feature)
        while h:
            low = h & -h
            set_weight[low.bit_length() - 1] += weight
            h ^= low

    result = 0
    for bit, weight in enumerate(set_weight):
        # vote = weight of set bits minus weight of clear bits
        if 2 * weight - total_weight >= 0:
            result |= 1 << bit
    return result


def word_shingles(tokens: list[str], size: int) -> Iterable[bytes]:
    if not tokens:
        return []
    if len(tokens) <= size:
        return [" ".join(tokens).encode("utf-8")]
    return (
        " ".join(tokens[i : i + size]).encode("utf-8")
        for i in range(len(tokens) - size + 1)
    )


def byte_shingles(blob: bytes, size: int) -> Iterable[bytes]:
    if len(blob) <= size:
        return [blob]
    stride = max(size // 2, 1)
    return (blob[i : i + size] for i in range(0, len(blob) - size + 1, stride))


class FingerprintEngine:
    """Computes a ContentFingerprint; deterministic for identical bytes."""

    def __init__(
        self,
        text_extractor: ContentTextExtractor,
        canonicalizer: TextCanonicalizer,
        shingle_size: int = 3,
        byte_shingle_size: int = 64,
    ) -> None:
        self._text_extractor = text_extractor
        self._canonicalizer = canonicalizer
        self._shingle_size = shingle_size
        self._byte_shingle_size = byte_shingle_size

    def fingerprint(self, blob: bytes, mime_type: str | None = None) -> ContentFingerprint:
        exact_hash = hashlib.sha256(blob).hexdigest()
        near_hash = simhash(Counter(self._features(blob, mime_type)))
        Log.debug(f"Fingerprinted {len(blob)} bytes: {exact_hash[:12]} / {near_hash:016x}")
        return ContentFingerprint(exact_hash=exact_hash, near_hash=near_hash)

    def _features(self, blob: bytes, mime_type: str | None) -> Iterable[bytes]:
        try:
            text = self._text_extractor.extract(blob, mime_type)
        except (PdfExtractionError, UnsupportedContentError) as exc:
            Log.debug(f"No text for fingerprinting, using byte shingles: {exc}")
            return byte_shingles(blob, self._byte_shingle_size)
        tokens = self._canonicalizer.tokens(text)
        if not tokens:
            return byte_shingles(blob, self._byte_shingle_size)
        return word_shingles(tokens, self._shingle_size)
