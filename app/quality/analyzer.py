"""AI-powered content-quality analyzer."""

import json
from pathlib import Path

from app.content.exceptions import UnsupportedContentError
from app.content.text_extractor import ContentTextExtractor
from app.logging.logger import Log
from app.pdf.exceptions import PdfExtractionError
from app.quality.base import BaseQualityService
from app.quality.client_base import BaseQualityClient
from app.quality.exceptions import QualityError, UnreadableContentError
from app.quality.models import QualityReport
from app.quality.prompt_loader import load_json_schema, load_prompt_template
from app.quality.validator import validate_and_build


class QualityAnalyzer(BaseQualityService):
    """Scores uploaded content with an AI provider."""

    def __init__(
        self,
        *,
        client: BaseQualityClient,
        text_extractor: ContentTextExtractor,
        model: str,
        temperature: float = 0.0,
        max_chars: int = 12000,
        prompt_template_path: Path | None = None,
        json_schema_path: Path | None = None,
        system_prompt: str = "You are a careful content reviewer. Reply with JSON only.",
    ) -> None:
        self._client = client
        self._text_extractor = text_extractor
        self._model = model
        self._temperature = max(0.0, min(0.2, temperature))
        self._max_chars = max_chars
        self._system_prompt = system_prompt
        self._prompt_template = load_prompt_template(prompt_template_path)
        schema_str = load_json_schema(json_schema_path)
        self._json_schema = schema_str
        self._json_schema_dict = json.loads(schema_str)

    def analyze(self, blob: bytes, timeout_seconds: float) -> QualityReport:
        text = self._extract_text(blob)
        prompt = self._build_prompt(text)
        Log.debug(f"Quality prompt: {len(prompt)} chars")

        raw_response = self._client.create_chat_completion(
            model=self._model,
            temperature=self._temperature,
            system_prompt=self._system_prompt,
            user_prompt=prompt,
            json_schema=self._json_schema_dict,
            timeout_seconds=timeout_seconds,
        )
        Log.debug(f"AI raw response:\n{raw_response}")

        report = validate_and_build(self._parse_json(raw_response))
        Log.info(f"Quality analysis complete: score={report.score:.2f} flagged={report.flagged}")
        return report

    def _extract_text(self, blob: bytes) -> str:
        try:
            text = self._text_extractor.extract(blob)
        except (PdfExtractionError, UnsupportedContentError) as exc:
            raise UnreadableContentError(
                f"Cannot read content for quality analysis: {exc}"
            ) from exc
        return text[: self._max_chars]

    def _build_prompt(self, text: str) -> str:
        return self._prompt_template.format(
            document_text=text,
            json_schema=self._json_schema,
        )

    @staticmethod
    def _parse_json(raw: str) -> dict[str, object]:
        cleaned = raw.strip()
        if cleaned.startswith("```"):
            lines = cleaned.splitlines()
            if lines and lines[0].startswith("```"):
                lines = lines[1:]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            cleaned = "\n".join(lines)

        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            raise QualityError(f"Invalid JSON response: {exc}") from exc

        if not isinstance(parsed, dict):
            raise QualityError("JSON response must be an object")
        return parsed
