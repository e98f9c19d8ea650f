from dataclasses import dataclass

NEAR_HASH_BITS = 64


@dataclass(frozen=True, slots=True)
class ContentFingerprint:
    """Exact and near-duplicate identity of one content blob."""

    exact_hash: str  # SHA-256 hex digest of the raw bytes
    near_hash: int  # unsigned 64-bit SimHash

    @property
    def near_hash_hex(self) -> str:
        return f"{self.near_hash:016x}"
