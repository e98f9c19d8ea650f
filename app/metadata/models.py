from dataclasses import dataclass, field, fields
from typing import Any


@dataclass(frozen=True)
class RawMetadata:
    """Descriptive fields exactly as supplied by the uploader."""

    title: Any = None
    author: Any = None
    category: Any = None
    description: Any = None
    submitter_identity: Any = None
    declared_mime_type: Any = None

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "RawMetadata":
        """Build from a request payload, ignoring unknown keys.

        camelCase keys (``submitterIdentity``) are accepted as sent by web clients.
        """
        aliases = {"submitterIdentity": "submitter_identity", "mimeType": "declared_mime_type"}
        known = {f.name for f in fields(cls)}
        values = {aliases.get(key, key): value for key, value in data.items()}
        return cls(**{key: value for key, value in values.items() if key in known})


@dataclass(frozen=True)
class UploadMetadata:
    """Validated, normalized metadata. Produced only by MetadataSanitizer."""

    title: str
    author: str
    category: str
    description: str = ""
    submitter_identity: str = ""
    declared_mime_type: str | None = None


@dataclass(frozen=True)
class MetadataPolicy:
    """Limits applied by the sanitizer."""

    allowed_categories: frozenset[str] = field(default_factory=frozenset)
    title_max_length: int = 200
    author_max_length: int = 120
    description_min_length: int = 0
    description_max_length: int = 5000
    submitter_identity_max_length: int = 256
