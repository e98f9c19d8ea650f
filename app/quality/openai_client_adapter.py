from typing import Any

import httpx
import openai

from app.quality.client_base import BaseQualityClient
from app.quality.exceptions import QualityError, QualityNetworkError


class OpenAIClientAdapter(BaseQualityClient):
    """Runs quality reviews through an OpenAI-compatible chat completions API.

    Retries are disabled on the SDK client: the pipeline owns the deadline for
    the quality stage, and a retried request would run past it.
    """

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: float,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
            max_retries=0,
        )

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
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        try:
            response = self._client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=temperature,
                response_format=self._report_format(json_schema),
                timeout=timeout_seconds,
            )
        except (openai.APITimeoutError, httpx.TimeoutException) as exc:
            raise QualityNetworkError(f"AI provider network error: timed out ({exc})") from exc
        except (openai.APIConnectionError, httpx.ConnectError) as exc:
            raise QualityNetworkError(f"AI provider network error: {exc}") from exc
        except openai.APIStatusError as exc:
            raise QualityNetworkError(
                f"AI provider API error: HTTP {exc.status_code} {exc.message}"
            ) from exc
        except openai.APIError as exc:
            raise QualityNetworkError(f"AI provider API error: {exc}") from exc
        return self._report_text(response)

    @staticmethod
    def _report_format(json_schema: dict[str, object]) -> dict[str, Any]:
        return {
            "type": "json_schema",
            "json_schema": {"name": "quality_report", "strict": True, "schema": json_schema},
        }

    @staticmethod
    def _report_text(response: Any) -> str:
        if not response.choices:
            raise QualityError("AI returned no choices")
        choice = response.choices[0]
        if getattr(choice.message, "refusal", None):
            raise QualityError(f"AI refused to review content: {choice.message.refusal}")
        if choice.finish_reason == "length":
            raise QualityError("AI response was truncated")
        if choice.message.content is None:
            raise QualityError("AI returned empty response")
        return choice.message.content
