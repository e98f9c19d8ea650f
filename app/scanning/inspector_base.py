from abc import ABC, abstractmethod

from app.scanning.models import StructuralFlags


class BaseStructuralInspector(ABC):
    """Contract for structural content inspectors."""

    @abstractmethod
    def inspect(self, blob: bytes) -> StructuralFlags:
        """Report active or hidden content carried by the blob.

        Raises:
            InspectorUnavailableError: if the inspector itself fails.
        """
