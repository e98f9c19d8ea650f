"""Tests for the QualityAnalyzer (AI-powered quality scoring)."""

import json
from unittest.mock import MagicMock, patch

import pytest

from app.content.text_extractor import ContentTextExtractor
from app.pdf.exceptions import PdfExtractionError
from app.quality.analyzer import QualityAnalyzer
from app.quality.exceptions import (
    QualityError,
    QualityNetworkError,
    QualityValidationError,
    UnreadableContentError,
)


def _make_analyzer(
    client: MagicMock | None = None,
    pdf_extractor: MagicMock | None = None,
    **kwargs: object,
) -> QualityAnalyzer:
    return QualityAnalyzer(
        client=client or MagicMock(),
        text_extractor=ContentTextExtractor(pdf_extractor or MagicMock()),
        model="test-model",
        **kwargs,  # type: ignore[arg-type]
    )


def _mock_ai_response(client: MagicMock, content: str) -> None:
    client.create_chat_completion.return_value = content


def _valid_json_response(score: float = 0.9, flagged: bool = False) -> str:
    return json.dumps({"score": score, "flagged": flagged, "reasons": []})


class TestAnalyzeSuccess:
    def test_returns_quality_report(self) -> None:
        client = MagicMock()
        _mock_ai_response(client, _valid_json_response(0.75))
        report = _make_analyzer(client).analyze(b"some text", 5)
        assert report.score == 0.75
        assert report.flagged is False

    def test_passes_document_text_to_prompt(self) -> None:
        client = MagicMock()
        _mock_ai_response(client, _valid_json_response())
        _make_analyzer(client).analyze(b"a field guide to mosses", 5)
        user_msg = client.create_chat_completion.call_args.kwargs["user_prompt"]
        assert "a field guide to mosses" in user_msg

    def test_extracts_pdf_text(self) -> None:
        client = MagicMock()
        _mock_ai_response(client, _valid_json_response())
        pdf_extractor = MagicMock()
        pdf_extractor.extract.return_value = "text from the pdf"
        _make_analyzer(client, pdf_extractor).analyze(b"%PDF-1.7 ...", 5)
        user_msg = client.create_chat_completion.call_args.kwargs["user_prompt"]
        assert "text from the pdf" in user_msg

    def test_truncates_long_documents(self) -> None:
        client = MagicMock()
        _mock_ai_response(client, _valid_json_response())
        _make_analyzer(client, max_chars=10).analyze(b"0123456789ABCDEF", 5)
        user_msg = client.create_chat_completion.call_args.kwargs["user_prompt"]
        assert "0123456789" in user_msg
        assert "ABCDEF" not in user_msg

    def test_forwards_timeout_and_model(self) -> None:
        client = MagicMock()
        _mock_ai_response(client, _valid_json_response())
        _make_analyzer(client).analyze(b"text", 7.5)
        kwargs = client.create_chat_completion.call_args.kwargs
        assert kwargs["timeout_seconds"] == 7.5
        assert kwargs["model"] == "test-model"

    def test_clamps_temperature_to_zero_to_point_two(self) -> None:
        client = MagicMock()
        _mock_ai_response(client, _valid_json_response())
        _make_analyzer(client, temperature=0.9).analyze(b"text", 5)
        assert client.create_chat_completion.call_args.kwargs["temperature"] == 0.2

    def test_passes_json_schema(self) -> None:
        client = MagicMock()
        _mock_ai_response(client, _valid_json_response())
        _make_analyzer(client).analyze(b"text", 5)
        schema = client.create_chat_completion.call_args.kwargs["json_schema"]
        assert "score" in schema["properties"]

    def test_strips_markdown_code_fences(self) -> None:
        client = MagicMock()
        _mock_ai_response(client, "```json\n" + _valid_json_response(0.4, True) + "\n```")
        report = _make_analyzer(client).analyze(b"text", 5)
        assert report.flagged is True


class TestAnalyzeFailures:
    def test_unreadable_pdf_is_a_content_error(self) -> None:
        client = MagicMock()
        pdf_extractor = MagicMock()
        pdf_extractor.extract.side_effect = PdfExtractionError("broken")
        with pytest.raises(UnreadableContentError, match="Cannot read content") as exc_info:
            _make_analyzer(client, pdf_extractor=pdf_extractor).analyze(b"%PDF-1.7", 5)
        assert not isinstance(exc_info.value, QualityError)
        client.create_chat_completion.assert_not_called()

    def test_invalid_json_raises_error(self) -> None:
        client = MagicMock()
        _mock_ai_response(client, "not valid json")
        with pytest.raises(QualityError, match="Invalid JSON"):
            _make_analyzer(client).analyze(b"text", 5)

    def test_json_array_raises_error(self) -> None:
        client = MagicMock()
        _mock_ai_response(client, "[]")
        with pytest.raises(QualityError, match="must be an object"):
            _make_analyzer(client).analyze(b"text", 5)

    def test_network_error_propagates(self) -> None:
        client = MagicMock()
        client.create_chat_completion.side_effect = QualityNetworkError("network")
        with pytest.raises(QualityNetworkError):
            _make_analyzer(client).analyze(b"text", 5)

    def test_out_of_range_score_raises_validation_error(self) -> None:
        client = MagicMock()
        _mock_ai_response(client, _valid_json_response(score=3))
        with pytest.raises(QualityValidationError, match="between 0 and 1"):
            _make_analyzer(client).analyze(b"text", 5)

    def test_errors_name_the_quality_collaborator(self) -> None:
        client = MagicMock()
        _mock_ai_response(client, "nope")
        with pytest.raises(QualityError) as exc_info:
            _make_analyzer(client).analyze(b"text", 5)
        assert exc_info.value.collaborator == "quality_service"


class TestDebugLogging:
    def test_logs_prompt_in_debug(self) -> None:
        client = MagicMock()
        _mock_ai_response(client, _valid_json_response())
        with patch("app.quality.analyzer.Log") as mock_log:
            _make_analyzer(client).analyze(b"text", 5)
        assert "prompt" in mock_log.debug.call_args_list[0].args[0].lower()
