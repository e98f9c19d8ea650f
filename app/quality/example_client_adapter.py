"""Example quality client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseQualityClient and register the provider in QualityServiceFactory.
"""

import json
from typing import ClassVar

from app.quality.client_base import BaseQualityClient


class ExampleClientAdapter(BaseQualityClient):
    """Example adapter that returns a fixed passing quality report.

    No network calls. Useful for local development and tests.
    """

    DEFAULT_RESPONSE: ClassVar[dict[str, object]] = {
        "score": 1.0,
        "flagged": False,
        "reasons": [],
    }

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
        _ = model, temperature, system_prompt, user_prompt, json_schema, timeout_seconds
        return json.dumps(self.DEFAULT_RESPONSE)
