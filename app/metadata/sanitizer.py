"""Validates and normalizes uploader metadata.

Every text field is normalized first and all checks run on the normalized
values, so feeding a sanitized result back in yields the same result. Checks,
in order: required fields, length bounds, category membership.
"""

from dataclasses import asdict
from typing import Any

from app.config.settings import Settings
from app.metadata.exceptions import MetadataValidationError
from app.metadata.models import MetadataPolicy, RawMetadata, UploadMetadata
from app.metadata.text import normalize_text

_REQUIRED_FIELDS = ("title", "author")


class MetadataSanitizer:
    """Pure transform from RawMetadata to UploadMetadata."""

    def __init__(self, policy: MetadataPolicy) -> None:
        self._policy = policy

    @classmethod
    def from_settings(cls, settings: Settings) -> "MetadataSanitizer":
        return cls(
            MetadataPolicy(
                allowed_categories=frozenset(
                    c.strip().lower() for c in settings.metadata_allowed_categories
                ),
                title_max_length=settings.metadata_title_max_length,
                author_max_length=settings.metadata_author_max_length,
                description_min_length=settings.metadata_description_min_length,
                description_max_length=settings.metadata_description_max_length,
            )
        )

    def sanitize(self, raw: RawMetadata | UploadMetadata) -> UploadMetadata:
        """Return a new normalized copy of *raw*.

        Raises:
            MetadataValidationError: naming the first field that fails.
        """
        values = asdict(raw)
        title = _text(values, "title")
        author = _text(values, "author")
        category = _text(values, "category").lower()
        description = _text(values, "description", multiline=True)
        submitter_identity = _text(values, "submitter_identity")
        declared_mime_type = _text(values, "declared_mime_type").lower() or None

        normalized = {"title": title, "author": author}
        for name in _REQUIRED_FIELDS:
            if not normalized[name]:
                raise MetadataValidationError(name, f"'{name}' is required")

        self._check_max(len(title), self._policy.title_max_length, "title")
        self._check_max(len(author), self._policy.author_max_length, "author")
        self._check_max(
            len(submitter_identity),
            self._policy.submitter_identity_max_length,
            "submitter_identity",
        )
        if len(description) < self._policy.description_min_length:
            raise MetadataValidationError(
                "description",
                f"'description' must be at least {self._policy.description_min_length} characters",
            )
        self._check_max(len(description), self._policy.description_max_length, "description")

        if not category:
            raise MetadataValidationError("category", "'category' is required")
        if category not in self._policy.allowed_categories:
            raise MetadataValidationError(
                "category",
                f"'category' must be one of {sorted(self._policy.allowed_categories)}, "
                f"got {category!r}",
            )

        return UploadMetadata(
            title=title,
            author=author,
            category=category,
            description=description,
            submitter_identity=submitter_identity,
            declared_mime_type=declared_mime_type,
        )

    @staticmethod
    def _check_max(length: int, maximum: int, name: str) -> None:
        if length > maximum:
            raise MetadataValidationError(
                name, f"'{name}' must be at most {maximum} characters, got {length}"
            )


def _text(values: dict[str, Any], name: str, multiline: bool = False) -> str:
    value = values.get(name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise MetadataValidationError(name, f"'{name}' must be a string")
    return normalize_text(value, multiline=multiline)
