from abc import ABC, abstractmethod


class BaseQualityClient(ABC):
    """Contract for provider-specific quality AI clients."""

    @abstractmethod
    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        json_schema: dict[str, object],
        timeout_seconds: float,
    ) -> str:
        """Return provider response as plain text."""
